"""Ledger Service — the only code path that mutates user balances.

Invariants:
    - credit/debit amounts are positive, cent-quantized Decimals
    - Every mutation is a read-modify-write on a row locked FOR UPDATE
    - balance >= 0 after every operation (debit refuses, debit_up_to clamps)
    - Never commits: the calling engine's unit_of_work owns the transaction

Design Decisions:
    - Row lock over optimistic retry: the core never retries on its own
    - populate_existing on the locked read: the identity map must not hand back
      a balance read before the lock was taken
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from account_market.core.domain_types import UserId
from account_market.core.errors import InsufficientBalanceError, ResourceNotFoundError
from account_market.core.money import ZERO, to_money, require_positive
from account_market.models.user import User

logger = logging.getLogger(__name__)


class LedgerService:
    """LedgerStore implementation over users.balance."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _lock_user(self, user_id: UserId) -> User:
        result = await self.db.execute(
            select(User)
            .where(User.id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise ResourceNotFoundError("User", user_id)
        return user

    async def get_balance(self, user_id: UserId) -> Decimal:
        """Current balance; unknown users read as 0.00."""
        result = await self.db.execute(
            select(User.balance).where(User.id == user_id),
        )
        balance = result.scalar_one_or_none()
        return to_money(balance) if balance is not None else ZERO

    async def credit(self, user_id: UserId, amount: Decimal) -> Decimal:
        amount = require_positive(to_money(amount))
        user = await self._lock_user(user_id)
        user.balance = to_money(user.balance + amount)
        user.updated_at = datetime.now(timezone.utc)
        await self.db.flush()
        logger.info(
            "Balance credited",
            extra={"user_id": user_id, "amount": str(amount)},
        )
        return user.balance

    async def debit(self, user_id: UserId, amount: Decimal) -> Decimal:
        """Debit the full amount or raise InsufficientBalanceError with nothing changed."""
        amount = require_positive(to_money(amount))
        user = await self._lock_user(user_id)
        if user.balance < amount:
            raise InsufficientBalanceError()
        user.balance = to_money(user.balance - amount)
        user.updated_at = datetime.now(timezone.utc)
        await self.db.flush()
        logger.info(
            "Balance debited",
            extra={"user_id": user_id, "amount": str(amount)},
        )
        return user.balance

    async def debit_up_to(self, user_id: UserId, amount: Decimal) -> Decimal:
        """Debit min(amount, balance). Returns the amount actually taken."""
        amount = to_money(amount)
        if amount <= ZERO:
            return ZERO
        user = await self._lock_user(user_id)
        taken = min(amount, to_money(user.balance))
        if taken > ZERO:
            user.balance = to_money(user.balance - taken)
            user.updated_at = datetime.now(timezone.utc)
            await self.db.flush()
        if taken < amount:
            logger.warning(
                "Debit clamped at available balance",
                extra={"user_id": user_id, "amount": str(amount), "reason": "clamped"},
            )
        return taken
