"""Checkout Enforcement — ordered precondition checks and per-seller grouping.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Checks run in a fixed order and the first violation wins:
        1. every requested id resolved to a cart row
        2. every row belongs to the buyer
        3. every listing is active
        4. no listing is owned by the buyer
    - One SellerGroup per distinct seller; groups ordered by seller id
    - Group amount = Σ price × quantity; fee = amount × rate (cent-rounded)

Design Decisions:
    - "Doesn't exist" and "not yours" are separate checks with separate errors,
      even though both surface similar messages
    - Buyer existence is checked by the shell before rows are loaded
"""

from dataclasses import dataclass, field
from decimal import Decimal

from account_market.core.domain_types import ListingStatus
from account_market.core.errors import (
    NoValidCartItemsError, CartItemsInvalidError,
    ListingsUnavailableError, SelfPurchaseError,
)
from account_market.core.money import (
    ZERO, compute_platform_fee, compute_seller_net, line_total,
)


@dataclass(frozen=True)
class CartLine:
    """A cart row joined with the listing fields checkout needs."""
    cart_item_id: int
    buyer_id: int
    listing_id: int
    quantity: int
    unit_price: Decimal
    seller_id: int
    listing_status: str
    listing_title: str


@dataclass
class SellerGroup:
    """All cart lines going to one seller — becomes exactly one transaction."""
    seller_id: int
    lines: list[CartLine] = field(default_factory=list)
    amount: Decimal = ZERO
    platform_fee: Decimal = ZERO

    @property
    def seller_net(self) -> Decimal:
        return compute_seller_net(self.amount, self.platform_fee)

    @property
    def listing_ids(self) -> list[int]:
        return [line.listing_id for line in self.lines]

    @property
    def primary_listing_id(self) -> int:
        return self.lines[0].listing_id


def check_all_items_found(requested_ids: list[int], found_ids: set[int]) -> None:
    """Rule 1: every requested cart item id must exist (an empty request never does)."""
    if not requested_ids or set(requested_ids) - found_ids:
        raise NoValidCartItemsError()


def check_items_owned(lines: list[CartLine], buyer_id: int) -> None:
    """Rule 2: every cart row must belong to the requesting buyer."""
    if any(line.buyer_id != buyer_id for line in lines):
        raise CartItemsInvalidError()


def check_listings_active(lines: list[CartLine]) -> None:
    """Rule 3: every listing must still be active, naming the ones that are not."""
    unavailable = [
        line.listing_title for line in lines
        if line.listing_status != ListingStatus.ACTIVE
    ]
    if unavailable:
        raise ListingsUnavailableError(unavailable)


def check_no_self_purchase(lines: list[CartLine], buyer_id: int) -> None:
    """Rule 4: buyers cannot purchase their own listings."""
    if any(line.seller_id == buyer_id for line in lines):
        raise SelfPurchaseError()


def validate_checkout(
    buyer_id: int, requested_ids: list[int], lines: list[CartLine],
) -> None:
    """Chain all checkout checks. Raises the first violation."""
    check_all_items_found(requested_ids, {line.cart_item_id for line in lines})
    check_items_owned(lines, buyer_id)
    check_listings_active(lines)
    check_no_self_purchase(lines, buyer_id)


def group_by_seller(lines: list[CartLine], fee_rate: Decimal) -> list[SellerGroup]:
    """Group validated lines per seller and price each group."""
    groups: dict[int, SellerGroup] = {}
    for line in sorted(lines, key=lambda ln: ln.cart_item_id):
        group = groups.setdefault(line.seller_id, SellerGroup(seller_id=line.seller_id))
        group.lines.append(line)
        group.amount += line_total(line.unit_price, line.quantity)
    for group in groups.values():
        group.platform_fee = compute_platform_fee(group.amount, fee_rate)
    return [groups[seller_id] for seller_id in sorted(groups)]
