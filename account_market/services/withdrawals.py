"""Withdrawal Engine — seller payout requests and admin processing.

Invariants:
    - A request is accepted only when amount ≤ current seller balance
    - The seller is debited exactly once, on pending -> approved
    - Re-approving an approved request changes nothing on the balance
    - Rejection moves no money, from pending or approved
    - completed only follows approved and stamps processed_at
    - The request row is locked before the status check, so two concurrent
      approvals serialize and the second sees APPROVED

Design Decisions:
    - Admin notes: supplied notes overwrite; omitted (or empty) notes follow
      the withdrawal_notes_policy setting
    - Payment details are vault-encoded on the way in and never decoded here
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from account_market.config import Settings, get_settings
from account_market.core.domain_types import WithdrawalStatus
from account_market.core.errors import (
    SellerNotFoundError, InsufficientBalanceError, InsufficientSellerBalanceError,
)
from account_market.core.money import to_money, require_positive
from account_market.core.repository_protocols import LedgerStore, UserDirectory
from account_market.core.state_machines import check_transition
from account_market.core.vault import encode_secret
from account_market.infrastructure.database import unit_of_work
from account_market.models.withdrawal_request import WithdrawalRequest
from account_market.services.ledger import LedgerService
from account_market.services.users import UserDirectoryService

logger = logging.getLogger(__name__)


class WithdrawalService:
    def __init__(
        self,
        db: AsyncSession,
        ledger: LedgerStore | None = None,
        users: UserDirectory | None = None,
        settings: Settings | None = None,
    ):
        self.db = db
        self.ledger = ledger or LedgerService(db)
        self.users = users or UserDirectoryService(db)
        self.settings = settings or get_settings()

    async def create_withdrawal_request(
        self,
        seller_id: int,
        amount: Decimal,
        payment_method: str,
        payment_details: str,
    ) -> WithdrawalRequest:
        amount = require_positive(to_money(amount))
        async with unit_of_work(self.db):
            if not await self.users.exists(seller_id):
                raise SellerNotFoundError(seller_id)
            balance = await self.ledger.get_balance(seller_id)
            if amount > balance:
                raise InsufficientBalanceError()
            request = WithdrawalRequest(
                seller_id=seller_id,
                amount=amount,
                payment_method=payment_method,
                payment_details=encode_secret(payment_details),
                status=WithdrawalStatus.PENDING.value,
            )
            self.db.add(request)
            await self.db.flush()

        logger.info(
            "Withdrawal requested",
            extra={
                "withdrawal_id": request.id,
                "seller_id": seller_id,
                "amount": str(amount),
            },
        )
        return request

    async def process_withdrawal(
        self,
        withdrawal_id: int,
        new_status: str,
        admin_notes: str | None = None,
    ) -> WithdrawalRequest | None:
        """Move a request through its lifecycle. None when it does not exist."""
        target = WithdrawalStatus(new_status)
        async with unit_of_work(self.db):
            result = await self.db.execute(
                select(WithdrawalRequest)
                .where(WithdrawalRequest.id == withdrawal_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            request = result.scalar_one_or_none()
            if request is None:
                logger.info(
                    "Withdrawal processing skipped",
                    extra={"withdrawal_id": withdrawal_id, "reason": "not_found"},
                )
                return None

            current = WithdrawalStatus(request.status)
            check_transition(current, target)
            now = datetime.now(timezone.utc)

            if target == WithdrawalStatus.APPROVED and current == WithdrawalStatus.PENDING:
                try:
                    await self.ledger.debit(request.seller_id, request.amount)
                except InsufficientBalanceError:
                    raise InsufficientSellerBalanceError()
            elif target == WithdrawalStatus.COMPLETED:
                request.processed_at = now

            request.status = target.value
            if admin_notes:
                request.admin_notes = admin_notes
            elif self.settings.withdrawal_notes_policy == "clear":
                request.admin_notes = None
            request.updated_at = now

        logger.info(
            f"Withdrawal {current.value} -> {target.value}",
            extra={
                "withdrawal_id": withdrawal_id,
                "seller_id": request.seller_id,
                "amount": str(request.amount),
            },
        )
        return request

    async def list_withdrawal_requests(
        self, status: str | None = None,
    ) -> list[WithdrawalRequest]:
        query = select(WithdrawalRequest).order_by(
            WithdrawalRequest.created_at.desc(), WithdrawalRequest.id.desc(),
        )
        if status:
            query = query.where(
                WithdrawalRequest.status == WithdrawalStatus(status).value,
            )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_seller_withdrawals(self, seller_id: int) -> list[WithdrawalRequest]:
        result = await self.db.execute(
            select(WithdrawalRequest)
            .where(WithdrawalRequest.seller_id == seller_id)
            .order_by(WithdrawalRequest.created_at.desc(), WithdrawalRequest.id.desc())
        )
        return list(result.scalars().all())
