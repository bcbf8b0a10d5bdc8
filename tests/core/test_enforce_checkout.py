"""Checkout Enforcement — precondition order and per-seller grouping.

Tests cover:
    - each rule raises its own typed error
    - the first violated rule wins when several apply
    - grouping: one group per seller, ordered by seller id, fee per group
"""

from decimal import Decimal

import pytest

from account_market.core.enforce_checkout import (
    CartLine, validate_checkout, group_by_seller, check_all_items_found,
)
from account_market.core.errors import (
    NoValidCartItemsError, CartItemsInvalidError,
    ListingsUnavailableError, SelfPurchaseError,
)

BUYER = 1
RATE = Decimal("0.05")


def _line(cart_item_id, seller_id, price, *, buyer_id=BUYER, status="active",
          quantity=1, title=None):
    return CartLine(
        cart_item_id=cart_item_id,
        buyer_id=buyer_id,
        listing_id=100 + cart_item_id,
        quantity=quantity,
        unit_price=Decimal(price),
        seller_id=seller_id,
        listing_status=status,
        listing_title=title or f"Listing {cart_item_id}",
    )


# ─── validation ──────────────────────────────────────────────────

def test_valid_cart_passes():
    validate_checkout(BUYER, [1, 2], [_line(1, 7, "10.00"), _line(2, 8, "20.00")])


def test_empty_request_has_no_valid_items():
    with pytest.raises(NoValidCartItemsError):
        check_all_items_found([], set())


def test_missing_cart_item_raises_no_valid_items():
    with pytest.raises(NoValidCartItemsError):
        validate_checkout(BUYER, [1, 99], [_line(1, 7, "10.00")])


def test_foreign_cart_item_raises_invalid_items():
    with pytest.raises(CartItemsInvalidError):
        validate_checkout(BUYER, [1], [_line(1, 7, "10.00", buyer_id=2)])


def test_inactive_listing_names_the_titles():
    lines = [
        _line(1, 7, "10.00", status="sold", title="Old TikTok"),
        _line(2, 7, "10.00"),
    ]
    with pytest.raises(ListingsUnavailableError) as exc_info:
        validate_checkout(BUYER, [1, 2], lines)
    assert exc_info.value.titles == ["Old TikTok"]
    assert "Old TikTok" in exc_info.value.message


def test_own_listing_raises_self_purchase():
    with pytest.raises(SelfPurchaseError):
        validate_checkout(BUYER, [1], [_line(1, BUYER, "10.00")])


def test_ownership_checked_before_availability():
    lines = [_line(1, 7, "10.00", buyer_id=2, status="removed")]
    with pytest.raises(CartItemsInvalidError):
        validate_checkout(BUYER, [1], lines)


def test_availability_checked_before_self_purchase():
    lines = [_line(1, BUYER, "10.00", status="sold")]
    with pytest.raises(ListingsUnavailableError):
        validate_checkout(BUYER, [1], lines)


# ─── grouping ────────────────────────────────────────────────────

def test_two_sellers_make_two_groups_with_fees():
    groups = group_by_seller(
        [_line(1, 9, "30.00"), _line(2, 4, "50.00")], RATE,
    )
    assert [g.seller_id for g in groups] == [4, 9]
    assert groups[0].amount == Decimal("50.00")
    assert groups[0].platform_fee == Decimal("2.50")
    assert groups[1].amount == Decimal("30.00")
    assert groups[1].platform_fee == Decimal("1.50")
    assert groups[1].seller_net == Decimal("28.50")


def test_same_seller_lines_share_one_group():
    groups = group_by_seller(
        [_line(2, 7, "20.00"), _line(1, 7, "10.00", quantity=2)], RATE,
    )
    assert len(groups) == 1
    assert groups[0].amount == Decimal("40.00")
    assert groups[0].primary_listing_id == 101
    assert groups[0].listing_ids == [101, 102]
