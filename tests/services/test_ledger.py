"""Ledger Service — credit/debit sign checks, never-negative balances."""

from decimal import Decimal

import pytest

from account_market.core.errors import (
    InsufficientBalanceError, InvalidAmountError, ResourceNotFoundError,
)
from account_market.services.ledger import LedgerService
from tests.services.seed import balance_of, make_user

D = Decimal


@pytest.fixture
async def wallet(test_db):
    return await make_user(test_db, "wallet@example.com", "seller", balance="10.00")


async def test_credit_and_debit(test_db, wallet):
    ledger = LedgerService(test_db)
    assert await ledger.credit(wallet.id, D("5.25")) == D("15.25")
    assert await ledger.debit(wallet.id, D("15.25")) == D("0.00")


async def test_debit_refuses_overdraft(test_db, wallet):
    with pytest.raises(InsufficientBalanceError):
        await LedgerService(test_db).debit(wallet.id, D("10.01"))
    assert await balance_of(test_db, wallet.id) == D("10.00")


async def test_debit_up_to_clamps(test_db, wallet):
    taken = await LedgerService(test_db).debit_up_to(wallet.id, D("25.00"))
    assert taken == D("10.00")
    assert await balance_of(test_db, wallet.id) == D("0.00")


@pytest.mark.parametrize("amount", [D("0.00"), D("-3.00")])
async def test_non_positive_amounts_rejected(test_db, wallet, amount):
    with pytest.raises(InvalidAmountError):
        await LedgerService(test_db).credit(wallet.id, amount)


async def test_unknown_user(test_db):
    ledger = LedgerService(test_db)
    assert await ledger.get_balance(4242) == D("0.00")
    with pytest.raises(ResourceNotFoundError):
        await ledger.credit(4242, D("1.00"))
