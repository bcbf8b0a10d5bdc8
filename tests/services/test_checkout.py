"""Checkout — per-seller transactions, sold listings, seller credit, cart cleanup.

Invariants:
    - Two sellers in one cart → two transactions with their own fees
    - Every purchased listing ends SOLD, every consumed cart row is gone
    - Any precondition failure leaves balances, listings and the cart untouched
"""

from decimal import Decimal

import pytest
from sqlalchemy import select

from account_market.core.errors import (
    BuyerNotFoundError, CartItemsInvalidError, ListingsUnavailableError,
    NoValidCartItemsError, SelfPurchaseError,
)
from account_market.models.cart_item import CartItem
from account_market.models.listing import Listing
from account_market.services.checkout import CheckoutService
from tests.services.seed import (
    balance_of, make_cart_item, make_listing, make_user,
)


async def _listing_status(db, listing_id):
    result = await db.execute(select(Listing.status).where(Listing.id == listing_id))
    return result.scalar_one()


async def _cart_ids(db, buyer_id):
    result = await db.execute(select(CartItem.id).where(CartItem.buyer_id == buyer_id))
    return set(result.scalars().all())


async def test_two_seller_checkout(test_db, settings, buyer, seller, other_seller):
    l1 = await make_listing(test_db, seller, "50.00", title="A")
    l2 = await make_listing(test_db, other_seller, "30.00", title="B")
    c1 = await make_cart_item(test_db, buyer, l1)
    c2 = await make_cart_item(test_db, buyer, l2)

    txns = await CheckoutService(test_db, settings=settings).checkout(
        buyer.id, "credit_card", [c1.id, c2.id],
    )

    assert len(txns) == 2
    by_seller = {t.seller_id: t for t in txns}
    assert by_seller[seller.id].amount == Decimal("50.00")
    assert by_seller[seller.id].platform_fee == Decimal("2.50")
    assert by_seller[other_seller.id].amount == Decimal("30.00")
    assert by_seller[other_seller.id].platform_fee == Decimal("1.50")
    assert all(t.status == "completed" for t in txns)
    assert await _listing_status(test_db, l1.id) == "sold"
    assert await _listing_status(test_db, l2.id) == "sold"
    assert await _cart_ids(test_db, buyer.id) == set()
    assert await balance_of(test_db, seller.id) == Decimal("47.50")
    assert await balance_of(test_db, other_seller.id) == Decimal("28.50")


async def test_same_seller_lines_make_one_transaction(test_db, settings, buyer, seller):
    l1 = await make_listing(test_db, seller, "10.00", title="A")
    l2 = await make_listing(test_db, seller, "20.00", title="B")
    c1 = await make_cart_item(test_db, buyer, l1)
    c2 = await make_cart_item(test_db, buyer, l2)

    txns = await CheckoutService(test_db, settings=settings).checkout(
        buyer.id, "paypal", [c1.id, c2.id],
    )

    assert len(txns) == 1
    txn = txns[0]
    assert txn.amount == Decimal("30.00")
    assert txn.listing_id == l1.id
    assert [item.listing_id for item in txn.items] == [l1.id, l2.id]


async def test_escrow_date_and_on_demand_delivery(test_db, settings, buyer, listing):
    cart = await make_cart_item(test_db, buyer, listing)

    [txn] = await CheckoutService(test_db, settings=settings).checkout(
        buyer.id, "crypto", [cart.id],
    )

    assert txn.credentials_delivered_at is None
    delta = txn.escrow_release_date - txn.created_at
    assert delta.total_seconds() == 24 * 3600


async def test_immediate_delivery_mode_stamps_at_checkout(test_db, settings, buyer, listing):
    cart = await make_cart_item(test_db, buyer, listing)
    settings.credential_delivery_mode = "immediate"

    [txn] = await CheckoutService(test_db, settings=settings).checkout(
        buyer.id, "crypto", [cart.id],
    )

    assert txn.credentials_delivered_at is not None


async def test_unknown_buyer(test_db, settings):
    with pytest.raises(BuyerNotFoundError):
        await CheckoutService(test_db, settings=settings).checkout(999, "paypal", [1])


async def test_unknown_cart_item(test_db, settings, buyer, listing):
    cart = await make_cart_item(test_db, buyer, listing)
    buyer_id, cart_id = buyer.id, cart.id
    with pytest.raises(NoValidCartItemsError):
        await CheckoutService(test_db, settings=settings).checkout(
            buyer_id, "paypal", [cart_id, cart_id + 100],
        )
    assert await _cart_ids(test_db, buyer_id) == {cart_id}


async def test_empty_cart_item_list(test_db, settings, buyer):
    with pytest.raises(NoValidCartItemsError):
        await CheckoutService(test_db, settings=settings).checkout(buyer.id, "paypal", [])


async def test_someone_elses_cart_item(test_db, settings, buyer, listing):
    thief = await make_user(test_db, "thief@example.com")
    cart = await make_cart_item(test_db, buyer, listing)
    with pytest.raises(CartItemsInvalidError):
        await CheckoutService(test_db, settings=settings).checkout(
            thief.id, "paypal", [cart.id],
        )


async def test_unavailable_listing_rolls_back_everything(
    test_db, settings, buyer, seller, other_seller,
):
    ok = await make_listing(test_db, seller, "50.00", title="Fine")
    gone = await make_listing(test_db, other_seller, "30.00", title="Gone", status="removed")
    c1 = await make_cart_item(test_db, buyer, ok)
    c2 = await make_cart_item(test_db, buyer, gone)
    # rollback expires session objects: keep plain ids
    buyer_id, seller_id, ok_id = buyer.id, seller.id, ok.id
    cart_ids = [c1.id, c2.id]

    with pytest.raises(ListingsUnavailableError) as exc_info:
        await CheckoutService(test_db, settings=settings).checkout(
            buyer_id, "paypal", cart_ids,
        )

    assert exc_info.value.titles == ["Gone"]
    assert await _listing_status(test_db, ok_id) == "active"
    assert await balance_of(test_db, seller_id) == Decimal("0.00")
    assert await _cart_ids(test_db, buyer_id) == set(cart_ids)


async def test_buying_own_listing(test_db, settings, seller, listing):
    cart = await make_cart_item(test_db, seller, listing)
    with pytest.raises(SelfPurchaseError):
        await CheckoutService(test_db, settings=settings).checkout(
            seller.id, "paypal", [cart.id],
        )


async def test_listing_sold_between_validation_and_flip(
    test_db, settings, buyer, seller, other_seller, monkeypatch,
):
    """A listing that stops being active mid-checkout aborts every group."""
    first = await make_listing(test_db, seller, "10.00", title="First")
    raced = await make_listing(test_db, other_seller, "20.00", title="Raced")
    c1 = await make_cart_item(test_db, buyer, first)
    c2 = await make_cart_item(test_db, buyer, raced)
    buyer_id, seller_id, other_id = buyer.id, seller.id, other_seller.id
    first_id, raced_id, cart_ids = first.id, raced.id, [c1.id, c2.id]

    service = CheckoutService(test_db, settings=settings)
    original = service._mark_sold

    async def sell_elsewhere_first(group, now):
        if group.seller_id == other_id:
            await test_db.execute(
                Listing.__table__.update()
                .where(Listing.__table__.c.id == raced_id)
                .values(status="sold"),
            )
        await original(group, now)

    monkeypatch.setattr(service, "_mark_sold", sell_elsewhere_first)

    with pytest.raises(ListingsUnavailableError) as exc_info:
        await service.checkout(buyer_id, "paypal", cart_ids)

    assert exc_info.value.titles == ["Raced"]
    assert await _listing_status(test_db, first_id) == "active"
    assert await _listing_status(test_db, raced_id) == "active"
    assert await balance_of(test_db, seller_id) == Decimal("0.00")
    assert await _cart_ids(test_db, buyer_id) == set(cart_ids)
