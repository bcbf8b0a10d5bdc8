"""Dispute Resolution — window, once-only, settlement conservation, escrow hold.

Invariants:
    - Opening a dispute moves the seller's net proceeds into escrow (clamped)
    - buyer refund + seller share + fee == amount (seller clamps at 0)
    - A resolved or closed dispute never pays out twice
    - Partial refund 60 of 100 with fee 10 → buyer +60, seller +30
"""

import logging
from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy import select

from account_market.core.errors import (
    DisputeAlreadyResolvedError, DisputeExistsError, DisputeWindowExpiredError,
    InvalidRefundAmountError, InvalidStatusTransitionError,
    NotBuyersTransactionError, TransactionNotFoundError,
)
from account_market.models.transaction import Transaction
from account_market.models.user import User
from account_market.services.disputes import DisputeService
from tests.services.seed import balance_of, make_transaction, make_user

D = Decimal


async def _set_balance(db, user_id, amount):
    user = await db.get(User, user_id)
    user.balance = D(amount)
    await db.commit()


async def _txn_status(db, txn_id):
    result = await db.execute(select(Transaction.status).where(Transaction.id == txn_id))
    return result.scalar_one()


@pytest.fixture
async def disputed_100(test_db, settings, buyer, seller, listing):
    """Transaction 100.00 / fee 10.00 with an open dispute and nothing held."""
    txn = await make_transaction(test_db, buyer, seller, listing, amount="100.00", fee="10.00")
    dispute = await DisputeService(test_db, settings=settings).create_dispute(
        txn.id, buyer.id, "Not as described", "The account has far fewer followers",
    )
    return txn, dispute


# ─── create_dispute ─────────────────────────────────────────────

async def test_open_dispute_holds_seller_proceeds(test_db, settings, buyer, seller, completed_txn):
    await _set_balance(test_db, seller.id, "95.00")

    dispute = await DisputeService(test_db, settings=settings).create_dispute(
        completed_txn.id, buyer.id, "Wrong password", "Credentials do not work at all",
    )

    assert dispute.status == "open"
    assert dispute.seller_id == seller.id
    assert dispute.held_amount == D("95.00")
    assert await balance_of(test_db, seller.id) == D("0.00")
    assert await _txn_status(test_db, completed_txn.id) == "disputed"


async def test_hold_clamps_at_seller_balance(
    test_db, settings, buyer, seller, completed_txn, caplog,
):
    await _set_balance(test_db, seller.id, "40.00")

    with caplog.at_level(logging.WARNING, logger="account_market.services.disputes"):
        dispute = await DisputeService(test_db, settings=settings).create_dispute(
            completed_txn.id, buyer.id, "Wrong password", "Credentials do not work at all",
        )

    assert dispute.held_amount == D("40.00")
    assert await balance_of(test_db, seller.id) == D("0.00")
    shortfalls = [r for r in caplog.records if getattr(r, "reason", None) == "hold_shortfall"]
    assert len(shortfalls) == 1
    assert shortfalls[0].amount == "55.00"


async def test_dispute_inside_window(test_db, settings, buyer, seller, listing):
    txn = await make_transaction(
        test_db, buyer, seller, listing, age=timedelta(hours=23, minutes=59),
    )
    dispute = await DisputeService(test_db, settings=settings).create_dispute(
        txn.id, buyer.id, "Late problem", "Recovered by the original owner",
    )
    assert dispute.id is not None


async def test_dispute_outside_window(test_db, settings, buyer, seller, listing):
    txn = await make_transaction(
        test_db, buyer, seller, listing, age=timedelta(hours=24, minutes=1),
    )
    txn_id, buyer_id = txn.id, buyer.id
    with pytest.raises(DisputeWindowExpiredError):
        await DisputeService(test_db, settings=settings).create_dispute(
            txn_id, buyer_id, "Too late", "Recovered by the original owner",
        )
    assert await _txn_status(test_db, txn_id) == "completed"


async def test_dispute_by_someone_else(test_db, settings, completed_txn):
    stranger = await make_user(test_db, "stranger@example.com")
    with pytest.raises(NotBuyersTransactionError):
        await DisputeService(test_db, settings=settings).create_dispute(
            completed_txn.id, stranger.id, "Not mine", "I never bought this account",
        )


async def test_dispute_unknown_transaction(test_db, settings, buyer):
    with pytest.raises(TransactionNotFoundError):
        await DisputeService(test_db, settings=settings).create_dispute(
            12345, buyer.id, "Ghost", "This transaction does not exist",
        )


async def test_second_dispute_rejected(test_db, settings, buyer, disputed_100):
    txn, _ = disputed_100
    txn_id, buyer_id = txn.id, buyer.id
    with pytest.raises(DisputeExistsError):
        await DisputeService(test_db, settings=settings).create_dispute(
            txn_id, buyer_id, "Again", "Trying to dispute a second time",
        )


async def test_refunded_transaction_cannot_be_disputed(test_db, settings, buyer, seller, listing):
    txn = await make_transaction(test_db, buyer, seller, listing, status="refunded")
    with pytest.raises(InvalidStatusTransitionError):
        await DisputeService(test_db, settings=settings).create_dispute(
            txn.id, buyer.id, "Refunded", "Already refunded but disputing",
        )


# ─── resolve_dispute ────────────────────────────────────────────

async def test_partial_refund_scenario(test_db, settings, buyer, seller, disputed_100):
    txn, dispute = disputed_100

    resolved = await DisputeService(test_db, settings=settings).resolve_dispute(
        dispute.id, "partial_refund", "Split the difference", D("60.00"),
    )

    assert resolved.status == "resolved"
    assert resolved.resolution == "partial_refund"
    assert resolved.refund_amount == D("60.00")
    assert resolved.resolved_at is not None
    assert await balance_of(test_db, buyer.id) == D("60.00")
    assert await balance_of(test_db, seller.id) == D("30.00")
    assert await _txn_status(test_db, txn.id) == "completed"


async def test_buyer_favor_refunds_in_full(test_db, settings, buyer, seller, disputed_100, caplog):
    txn, dispute = disputed_100

    with caplog.at_level(logging.WARNING, logger="account_market.services.disputes"):
        await DisputeService(test_db, settings=settings).resolve_dispute(
            dispute.id, "buyer_favor", "Account was recovered by owner",
        )

    assert not [r for r in caplog.records if getattr(r, "reason", None) == "refund_exceeds_net"]

    assert await balance_of(test_db, buyer.id) == D("100.00")
    assert await balance_of(test_db, seller.id) == D("0.00")
    assert await _txn_status(test_db, txn.id) == "refunded"


async def test_seller_favor_returns_held_proceeds(test_db, settings, buyer, seller, completed_txn):
    await _set_balance(test_db, seller.id, "95.00")
    service = DisputeService(test_db, settings=settings)
    dispute = await service.create_dispute(
        completed_txn.id, buyer.id, "Buyer remorse", "Changed my mind about it",
    )

    await service.resolve_dispute(dispute.id, "seller_favor", "Account as described")

    assert await balance_of(test_db, seller.id) == D("95.00")
    assert await balance_of(test_db, buyer.id) == D("0.00")


async def test_refund_larger_than_net_clamps_seller(
    test_db, settings, buyer, seller, disputed_100, caplog,
):
    _, dispute = disputed_100

    with caplog.at_level(logging.WARNING, logger="account_market.services.disputes"):
        await DisputeService(test_db, settings=settings).resolve_dispute(
            dispute.id, "partial_refund", "Mostly refunded", D("95.00"),
        )

    assert await balance_of(test_db, buyer.id) == D("95.00")
    assert await balance_of(test_db, seller.id) == D("0.00")
    assert [r for r in caplog.records if getattr(r, "reason", None) == "refund_exceeds_net"]


async def test_refund_exactly_net_is_not_clamped(
    test_db, settings, buyer, seller, disputed_100, caplog,
):
    _, dispute = disputed_100

    with caplog.at_level(logging.WARNING, logger="account_market.services.disputes"):
        await DisputeService(test_db, settings=settings).resolve_dispute(
            dispute.id, "partial_refund", "Refund all but the fee", D("90.00"),
        )

    assert await balance_of(test_db, seller.id) == D("0.00")
    assert not [r for r in caplog.records if getattr(r, "reason", None) == "refund_exceeds_net"]


async def test_second_resolution_rejected(test_db, settings, buyer, seller, disputed_100):
    _, dispute = disputed_100
    dispute_id, buyer_id, seller_id = dispute.id, buyer.id, seller.id
    service = DisputeService(test_db, settings=settings)
    await service.resolve_dispute(dispute_id, "buyer_favor", "Refund")

    with pytest.raises(DisputeAlreadyResolvedError):
        await service.resolve_dispute(dispute_id, "seller_favor", "Changed my mind")

    assert await balance_of(test_db, buyer_id) == D("100.00")
    assert await balance_of(test_db, seller_id) == D("0.00")


@pytest.mark.parametrize("refund", [None, D("100.01")])
async def test_invalid_partial_refund_changes_nothing(
    test_db, settings, buyer, disputed_100, refund,
):
    txn, dispute = disputed_100
    txn_id, dispute_id, buyer_id = txn.id, dispute.id, buyer.id

    with pytest.raises(InvalidRefundAmountError):
        await DisputeService(test_db, settings=settings).resolve_dispute(
            dispute_id, "partial_refund", "Bad refund", refund,
        )

    assert await balance_of(test_db, buyer_id) == D("0.00")
    assert await _txn_status(test_db, txn_id) == "disputed"


async def test_resolve_unknown_dispute_returns_none(test_db, settings):
    assert await DisputeService(test_db, settings=settings).resolve_dispute(
        999, "buyer_favor", "Nothing here",
    ) is None


# ─── review / close / reads ─────────────────────────────────────

async def test_in_review_then_resolve(test_db, settings, buyer, disputed_100):
    _, dispute = disputed_100
    service = DisputeService(test_db, settings=settings)

    reviewed = await service.mark_in_review(dispute.id, "Looking into it")
    assert reviewed.status == "in_review"
    assert reviewed.admin_notes == "Looking into it"

    resolved = await service.resolve_dispute(dispute.id, "buyer_favor", "Refund")
    assert resolved.status == "resolved"


async def test_close_returns_hold_and_completes_transaction(
    test_db, settings, buyer, seller, completed_txn,
):
    await _set_balance(test_db, seller.id, "95.00")
    service = DisputeService(test_db, settings=settings)
    dispute = await service.create_dispute(
        completed_txn.id, buyer.id, "Mistake", "Opened this dispute by accident",
    )

    closed = await service.close_dispute(dispute.id, "Opened by mistake")

    assert closed.status == "closed"
    assert await balance_of(test_db, seller.id) == D("95.00")
    assert await _txn_status(test_db, completed_txn.id) == "completed"


async def test_closed_dispute_cannot_be_resolved(test_db, settings, disputed_100):
    _, dispute = disputed_100
    dispute_id = dispute.id
    service = DisputeService(test_db, settings=settings)
    await service.close_dispute(dispute_id)

    with pytest.raises(DisputeAlreadyResolvedError):
        await service.resolve_dispute(dispute_id, "buyer_favor", "Too late")


async def test_get_dispute_hides_from_strangers(test_db, settings, buyer, seller, disputed_100):
    _, dispute = disputed_100
    stranger = await make_user(test_db, "stranger@example.com")
    service = DisputeService(test_db, settings=settings)

    assert (await service.get_dispute(dispute.id, buyer.id)).id == dispute.id
    assert (await service.get_dispute(dispute.id, seller.id)).id == dispute.id
    assert await service.get_dispute(dispute.id, stranger.id) is None
    assert await service.get_dispute(999, buyer.id) is None


async def test_list_disputes_filters_by_status(test_db, settings, disputed_100):
    service = DisputeService(test_db, settings=settings)
    assert len(await service.list_disputes()) == 1
    assert len(await service.list_disputes("open")) == 1
    assert await service.list_disputes("resolved") == []
