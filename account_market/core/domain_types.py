"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, ListingId, TransactionId ... wrap ints — never use bare ints in domain logic
    - All valid states encoded as Enums — no raw string matching
    - Enum values match the DB `status`/`role` column contents exactly

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", int)
ListingId = NewType("ListingId", int)
CartItemId = NewType("CartItemId", int)
TransactionId = NewType("TransactionId", int)
DisputeId = NewType("DisputeId", int)
ReviewId = NewType("ReviewId", int)
WithdrawalId = NewType("WithdrawalId", int)


# ─── Enums ───────────────────────────────────────────────────────

class UserRole(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"


class Platform(str, Enum):
    """Account platforms a listing can belong to."""
    INSTAGRAM = "instagram"
    TWITTER = "twitter"
    FACEBOOK = "facebook"
    TIKTOK = "tiktok"
    YOUTUBE = "youtube"
    TWITCH = "twitch"
    DISCORD = "discord"
    STEAM = "steam"
    EPIC_GAMES = "epic_games"
    ORIGIN = "origin"
    BATTLE_NET = "battle_net"
    MINECRAFT = "minecraft"
    LEAGUE_OF_LEGENDS = "league_of_legends"
    FORTNITE = "fortnite"
    OTHER = "other"


class ListingStatus(str, Enum):
    """Listing lifecycle — only ACTIVE is purchasable or publicly visible."""
    ACTIVE = "active"
    SOLD = "sold"
    REMOVED = "removed"
    UNDER_REVIEW = "under_review"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    DISPUTED = "disputed"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"


class DisputeStatus(str, Enum):
    OPEN = "open"
    IN_REVIEW = "in_review"
    RESOLVED = "resolved"
    CLOSED = "closed"


class DisputeResolution(str, Enum):
    """Admin outcomes for a dispute — each maps to a fixed money split."""
    BUYER_FAVOR = "buyer_favor"
    SELLER_FAVOR = "seller_favor"
    PARTIAL_REFUND = "partial_refund"


class PaymentMethod(str, Enum):
    """Recorded only — no gateway processing."""
    CREDIT_CARD = "credit_card"
    PAYPAL = "paypal"
    CRYPTO = "crypto"
    BANK_TRANSFER = "bank_transfer"


class WithdrawalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
