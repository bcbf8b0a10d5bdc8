"""Error Hierarchy — typed, categorized exceptions for all marketplace failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with MarketError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - Monetary errors carry no balances in the message (balances are private)
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    AUTHORIZATION = "authorization"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: int | None = None
    resource_type: str | None = None
    resource_id: int | str | None = None
    debug_info: dict[str, Any] | None = None


class MarketError(Exception):
    """Base exception for all marketplace errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "resource_type": self.context.resource_type,
                    "resource_id": self.context.resource_id,
                },
            }
        }


def _business(message: str, code: str, context: ErrorContext | None, status: int = 400):
    return dict(
        message=message, code=code, category=ErrorCategory.BUSINESS_RULE,
        severity=ErrorSeverity.ERROR, context=context, http_status=status,
    )


# ─── Lookup & Ownership Errors ──────────────────────────────────

class ResourceNotFoundError(MarketError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: int | str,
        context: ErrorContext | None = None,
        code: str = "RESOURCE_NOT_FOUND", message: str | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.resource_type = resource_type
        ctx.resource_id = resource_id
        super().__init__(
            message or f"{resource_type} '{resource_id}' not found",
            code, ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )


class BuyerNotFoundError(ResourceNotFoundError):
    def __init__(self, buyer_id: int, context: ErrorContext | None = None):
        super().__init__("Buyer", buyer_id, context, "BUYER_NOT_FOUND", "Buyer not found")


class SellerNotFoundError(ResourceNotFoundError):
    def __init__(self, seller_id: int, context: ErrorContext | None = None):
        super().__init__("Seller", seller_id, context, "SELLER_NOT_FOUND", "Seller not found")


class TransactionNotFoundError(ResourceNotFoundError):
    def __init__(self, transaction_id: int, context: ErrorContext | None = None):
        super().__init__(
            "Transaction", transaction_id, context,
            "TRANSACTION_NOT_FOUND", "Transaction not found",
        )


class AdminRequiredError(MarketError):
    """Caller is not an admin."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Admin privileges required",
            "ADMIN_REQUIRED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class NotBuyersTransactionError(MarketError):
    """Caller is not the buyer recorded on the transaction."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Transaction does not belong to this buyer",
            "NOT_BUYERS_TRANSACTION", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.ERROR, context, 403,
        )


# ─── Validation Errors ──────────────────────────────────────────

class InvalidAmountError(MarketError):
    """Monetary amount is not a positive value."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_AMOUNT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class InvalidRatingError(MarketError):
    def __init__(self, rating: int, context: ErrorContext | None = None):
        super().__init__(
            f"Rating must be an integer between 1 and 5, got {rating}",
            "INVALID_RATING", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class InvalidRefundAmountError(MarketError):
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Invalid refund amount for partial refund",
            "INVALID_REFUND_AMOUNT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


# ─── Checkout Errors ────────────────────────────────────────────

class NoValidCartItemsError(MarketError):
    """Some requested cart item ids do not exist (or none were given)."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(**_business(
            "No valid cart items found for checkout", "NO_VALID_CART_ITEMS", context,
        ))


class CartItemsInvalidError(MarketError):
    """Cart items exist but at least one belongs to another buyer."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Some cart items are invalid or do not belong to the buyer",
            "CART_ITEMS_INVALID", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.ERROR, context, 403,
        )


class ListingsUnavailableError(MarketError):
    """One or more listings are no longer active."""
    def __init__(self, titles: list[str], context: ErrorContext | None = None):
        super().__init__(
            f"Listings are no longer available: {', '.join(titles)}",
            "LISTINGS_UNAVAILABLE", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.titles = titles


class ListingNotPurchasableError(MarketError):
    def __init__(self, listing_id: int, context: ErrorContext | None = None):
        super().__init__(**_business(
            f"Listing {listing_id} is not available for purchase",
            "LISTING_NOT_PURCHASABLE", context,
        ))


class SelfPurchaseError(MarketError):
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(**_business(
            "Cannot purchase your own listings", "SELF_PURCHASE", context,
        ))


# ─── Listing Errors ─────────────────────────────────────────────

class SellerNotVerifiedError(MarketError):
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(**_business(
            "Seller must be verified to create listings",
            "SELLER_NOT_VERIFIED", context, 403,
        ))


class InvalidStatusTransitionError(MarketError):
    """Requested status change is not allowed by the entity's state machine."""
    def __init__(
        self, entity: str, current: str, target: str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{entity} cannot move from '{current}' to '{target}'",
            "INVALID_STATUS_TRANSITION", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.entity = entity
        self.current = current
        self.target = target


# ─── Dispute & Review Errors ────────────────────────────────────

class DisputeWindowExpiredError(MarketError):
    def __init__(self, window_hours: int, context: ErrorContext | None = None):
        super().__init__(**_business(
            f"Dispute window has expired ({window_hours} hours after purchase)",
            "DISPUTE_WINDOW_EXPIRED", context,
        ))


class DisputeExistsError(MarketError):
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(**_business(
            "A dispute already exists for this transaction",
            "DISPUTE_EXISTS", context, 409,
        ))


class DisputeAlreadyResolvedError(MarketError):
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(**_business(
            "Dispute is already resolved", "DISPUTE_ALREADY_RESOLVED", context, 409,
        ))


class IncompleteTransactionError(MarketError):
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(**_business(
            "Cannot review incomplete transaction", "INCOMPLETE_TRANSACTION", context,
        ))


class ReviewExistsError(MarketError):
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(**_business(
            "Review already exists for this transaction", "REVIEW_EXISTS", context, 409,
        ))


# ─── Ledger Errors ──────────────────────────────────────────────

class InsufficientBalanceError(MarketError):
    """Seller asked to withdraw more than their balance."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(**_business(
            "Insufficient balance", "INSUFFICIENT_BALANCE", context,
        ))


class InsufficientSellerBalanceError(MarketError):
    """Balance dropped below the request amount before approval."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(**_business(
            "Insufficient seller balance for withdrawal",
            "INSUFFICIENT_SELLER_BALANCE", context,
        ))


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(MarketError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation

