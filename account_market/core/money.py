"""Money Arithmetic — fee computation and dispute settlement splits.

Invariants:
    - All amounts are Decimal quantized to cents (ROUND_HALF_UP), never float
    - platform_fee = amount × rate; seller net = amount − platform_fee
    - Settlement: buyer_refund + seller_amount + platform_fee == amount unless
      clamping engages, in which case seller_amount == 0 exactly
    - Partial refunds require 0 ≤ refund ≤ amount

Design Decisions:
    - Pure functions over service methods: every split is unit-testable without a DB
    - Raises typed errors (not dicts): callers are services, not tool loops
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from account_market.core.domain_types import DisputeResolution, TransactionStatus
from account_market.core.errors import InvalidAmountError, InvalidRefundAmountError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Decimal | int | float | str) -> Decimal:
    """Coerce to a cent-quantized Decimal. Floats go through str() to avoid binary noise."""
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidAmountError(f"Not a monetary amount: {value!r}")


def require_positive(amount: Decimal) -> Decimal:
    if amount <= ZERO:
        raise InvalidAmountError("Amount must be positive")
    return amount


def compute_platform_fee(amount: Decimal, fee_rate: Decimal) -> Decimal:
    return to_money(amount * fee_rate)


def compute_seller_net(amount: Decimal, platform_fee: Decimal) -> Decimal:
    return max(ZERO, to_money(amount - platform_fee))


def line_total(unit_price: Decimal, quantity: int) -> Decimal:
    return to_money(unit_price * quantity)


@dataclass(frozen=True)
class SettlementSplit:
    """Outcome of a dispute resolution — who receives what from the escrowed amount."""
    buyer_refund: Decimal
    seller_amount: Decimal
    platform_fee: Decimal
    transaction_status: TransactionStatus
    clamped: bool = False


def compute_settlement(
    resolution: DisputeResolution,
    amount: Decimal,
    platform_fee: Decimal,
    refund_amount: Decimal | None = None,
) -> SettlementSplit:
    """Split a disputed transaction's amount according to the admin resolution.

    The platform fee is never returned to the seller. On a partial refund the
    seller's share is clamped at zero when refund + fee exceeds the amount.
    """
    if resolution == DisputeResolution.BUYER_FAVOR:
        return SettlementSplit(
            buyer_refund=to_money(amount),
            seller_amount=ZERO,
            platform_fee=to_money(platform_fee),
            transaction_status=TransactionStatus.REFUNDED,
        )
    if resolution == DisputeResolution.SELLER_FAVOR:
        return SettlementSplit(
            buyer_refund=ZERO,
            seller_amount=compute_seller_net(amount, platform_fee),
            platform_fee=to_money(platform_fee),
            transaction_status=TransactionStatus.COMPLETED,
        )
    if resolution == DisputeResolution.PARTIAL_REFUND:
        if refund_amount is None:
            raise InvalidRefundAmountError()
        refund = to_money(refund_amount)
        if refund < ZERO or refund > amount:
            raise InvalidRefundAmountError()
        return SettlementSplit(
            buyer_refund=refund,
            seller_amount=max(ZERO, to_money(amount - refund - platform_fee)),
            platform_fee=to_money(platform_fee),
            transaction_status=TransactionStatus.COMPLETED,
            clamped=refund + platform_fee > amount,
        )
    raise ValueError(f"Unknown dispute resolution: {resolution!r}")
