"""Dispute Resolution Engine — opening, reviewing, resolving and dismissing disputes.

Invariants:
    - One dispute per transaction; only the buyer opens it, within the dispute
      window measured from the transaction's created_at
    - Opening moves the seller's proceeds (amount − fee) back into escrow,
      clamped at the seller's balance, and records the held value; a hold
      short of the proceeds is logged with the shortfall
    - Resolution pays out of the escrowed amount: buyer refund + seller share
      + platform fee == amount (seller share clamps at 0)
    - RESOLVED and CLOSED are terminal; a second resolve raises, never re-pays
    - Dispute, transaction and balances always commit together

Design Decisions:
    - Lookups that may be unauthorized collapse to None (get_dispute)
    - resolve overwrites admin notes; mark_in_review and close write them only when given
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from account_market.config import Settings, get_settings
from account_market.core.domain_types import (
    DisputeResolution, DisputeStatus, TransactionStatus,
)
from account_market.core.enforce_disputes import (
    check_buyer_owns, check_dispute_window, check_no_existing_dispute,
    check_dispute_resolvable,
)
from account_market.core.errors import TransactionNotFoundError
from account_market.core.money import ZERO, compute_seller_net, compute_settlement
from account_market.core.repository_protocols import LedgerStore
from account_market.core.state_machines import check_transition
from account_market.infrastructure.database import unit_of_work
from account_market.models.dispute import Dispute
from account_market.models.transaction import Transaction
from account_market.services.ledger import LedgerService

logger = logging.getLogger(__name__)


class DisputeService:
    """Dispute lifecycle over transactions and the ledger."""

    def __init__(
        self,
        db: AsyncSession,
        ledger: LedgerStore | None = None,
        settings: Settings | None = None,
    ):
        self.db = db
        self.ledger = ledger or LedgerService(db)
        self.settings = settings or get_settings()

    async def create_dispute(
        self, transaction_id: int, buyer_id: int, reason: str, description: str,
    ) -> Dispute:
        async with unit_of_work(self.db):
            txn = await self._lock_transaction(transaction_id)
            if txn is None:
                raise TransactionNotFoundError(transaction_id)
            check_buyer_owns(txn.buyer_id, buyer_id)
            check_dispute_window(
                txn.created_at, datetime.now(timezone.utc),
                self.settings.dispute_window_hours,
            )
            existing = await self.db.execute(
                select(Dispute.id).where(Dispute.transaction_id == transaction_id),
            )
            check_no_existing_dispute(existing.scalar_one_or_none())
            check_transition(txn.status, TransactionStatus.DISPUTED)

            net = compute_seller_net(txn.amount, txn.platform_fee)
            held = await self.ledger.debit_up_to(txn.seller_id, net)
            if held < net:
                logger.warning(
                    "Dispute hold short of seller proceeds",
                    extra={
                        "transaction_id": transaction_id,
                        "seller_id": txn.seller_id,
                        "amount": str(net - held),
                        "reason": "hold_shortfall",
                    },
                )
            now = datetime.now(timezone.utc)
            dispute = Dispute(
                transaction_id=txn.id,
                buyer_id=buyer_id,
                seller_id=txn.seller_id,
                reason=reason,
                description=description,
                status=DisputeStatus.OPEN.value,
                held_amount=held,
                created_at=now,
            )
            self.db.add(dispute)
            txn.status = TransactionStatus.DISPUTED.value
            txn.updated_at = now
            await self.db.flush()

        logger.info(
            "Dispute opened",
            extra={
                "dispute_id": dispute.id,
                "transaction_id": transaction_id,
                "amount": str(held),
            },
        )
        return dispute

    async def resolve_dispute(
        self,
        dispute_id: int,
        resolution: str,
        admin_notes: str,
        refund_amount: Decimal | None = None,
    ) -> Dispute | None:
        """Settle a dispute. None when it does not exist."""
        outcome = DisputeResolution(resolution)
        async with unit_of_work(self.db):
            dispute = await self._lock_dispute(dispute_id)
            if dispute is None:
                logger.info(
                    "Dispute resolution skipped",
                    extra={"dispute_id": dispute_id, "reason": "not_found"},
                )
                return None
            check_dispute_resolvable(dispute.status)
            txn = await self._lock_transaction(dispute.transaction_id)

            split = compute_settlement(
                outcome, txn.amount, txn.platform_fee, refund_amount,
            )
            if split.buyer_refund > ZERO:
                await self.ledger.credit(txn.buyer_id, split.buyer_refund)
            if split.seller_amount > ZERO:
                await self.ledger.credit(txn.seller_id, split.seller_amount)
            if split.clamped:
                logger.warning(
                    "Seller share clamped to zero",
                    extra={"dispute_id": dispute_id, "reason": "refund_exceeds_net"},
                )

            now = datetime.now(timezone.utc)
            if txn.status != split.transaction_status:
                check_transition(txn.status, split.transaction_status)
            txn.status = split.transaction_status.value
            txn.updated_at = now
            dispute.status = DisputeStatus.RESOLVED.value
            dispute.resolution = outcome.value
            dispute.refund_amount = split.buyer_refund
            dispute.admin_notes = admin_notes
            dispute.resolved_at = now
            dispute.updated_at = now

        logger.info(
            f"Dispute resolved: {outcome.value}",
            extra={
                "dispute_id": dispute_id,
                "transaction_id": txn.id,
                "amount": str(split.buyer_refund),
            },
        )
        return dispute

    async def mark_in_review(
        self, dispute_id: int, admin_notes: str | None = None,
    ) -> Dispute | None:
        async with unit_of_work(self.db):
            dispute = await self._lock_dispute(dispute_id)
            if dispute is None:
                return None
            check_transition(dispute.status, DisputeStatus.IN_REVIEW)
            dispute.status = DisputeStatus.IN_REVIEW.value
            if admin_notes:
                dispute.admin_notes = admin_notes
            dispute.updated_at = datetime.now(timezone.utc)
        return dispute

    async def close_dispute(
        self, dispute_id: int, admin_notes: str | None = None,
    ) -> Dispute | None:
        """Dismiss without a ruling: held proceeds go back to the seller."""
        async with unit_of_work(self.db):
            dispute = await self._lock_dispute(dispute_id)
            if dispute is None:
                return None
            check_dispute_resolvable(dispute.status)
            txn = await self._lock_transaction(dispute.transaction_id)

            if dispute.held_amount > ZERO:
                await self.ledger.credit(dispute.seller_id, dispute.held_amount)
            now = datetime.now(timezone.utc)
            check_transition(txn.status, TransactionStatus.COMPLETED)
            txn.status = TransactionStatus.COMPLETED.value
            txn.updated_at = now
            dispute.status = DisputeStatus.CLOSED.value
            if admin_notes:
                dispute.admin_notes = admin_notes
            dispute.resolved_at = now
            dispute.updated_at = now

        logger.info(
            "Dispute closed",
            extra={"dispute_id": dispute_id, "amount": str(dispute.held_amount)},
        )
        return dispute

    async def get_dispute(self, dispute_id: int, user_id: int) -> Dispute | None:
        """Visible to the dispute's buyer and seller only."""
        dispute = await self.db.get(Dispute, dispute_id)
        if dispute is None or user_id not in (dispute.buyer_id, dispute.seller_id):
            return None
        return dispute

    async def list_disputes(self, status: str | None = None) -> list[Dispute]:
        query = select(Dispute).order_by(Dispute.created_at.desc(), Dispute.id.desc())
        if status:
            query = query.where(Dispute.status == DisputeStatus(status).value)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def _lock_transaction(self, transaction_id: int) -> Transaction | None:
        result = await self.db.execute(
            select(Transaction)
            .where(Transaction.id == transaction_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _lock_dispute(self, dispute_id: int) -> Dispute | None:
        result = await self.db.execute(
            select(Dispute)
            .where(Dispute.id == dispute_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
