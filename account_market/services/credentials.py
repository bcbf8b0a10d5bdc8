"""Credential Delivery Service — releases purchased account secrets at most once.

Invariants:
    - Only the buyer of a completed, not-yet-delivered transaction gets credentials
    - The delivered stamp is a single conditional UPDATE: of two concurrent
      calls exactly one sees a returned row
    - Every refusal returns None to the caller; the reason is only logged

Design Decisions:
    - Missing / not yours / not completed / already delivered look identical
      from outside (no existence leak)
    - A multi-listing transaction releases every item's secret, newline-joined
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from account_market.core.domain_types import TransactionStatus
from account_market.core.vault import decode_secret
from account_market.infrastructure.database import unit_of_work
from account_market.models.listing import Listing
from account_market.models.transaction import Transaction, TransactionItem

logger = logging.getLogger(__name__)


class CredentialDeliveryService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def deliver_credentials(
        self, transaction_id: int, buyer_id: int,
    ) -> str | None:
        async with unit_of_work(self.db):
            result = await self.db.execute(
                update(Transaction)
                .where(Transaction.id == transaction_id)
                .where(Transaction.buyer_id == buyer_id)
                .where(Transaction.status == TransactionStatus.COMPLETED.value)
                .where(Transaction.credentials_delivered_at.is_(None))
                .values(
                    credentials_delivered_at=datetime.now(timezone.utc),
                    updated_at=datetime.now(timezone.utc),
                )
                .returning(Transaction.listing_id)
            )
            primary_listing_id = result.scalar_one_or_none()
            if primary_listing_id is None:
                await self._log_refusal(transaction_id, buyer_id)
                return None
            credentials = await self._decode_all(transaction_id, primary_listing_id)

        logger.info(
            "Credentials delivered",
            extra={"transaction_id": transaction_id, "buyer_id": buyer_id},
        )
        return credentials

    async def _decode_all(self, transaction_id: int, primary_listing_id: int) -> str:
        result = await self.db.execute(
            select(Listing.encrypted_credentials)
            .join(TransactionItem, TransactionItem.listing_id == Listing.id)
            .where(TransactionItem.transaction_id == transaction_id)
            .order_by(TransactionItem.id)
        )
        secrets = list(result.scalars().all())
        if not secrets:
            listing = await self.db.get(Listing, primary_listing_id)
            secrets = [listing.encrypted_credentials]
        return "\n".join(decode_secret(secret) for secret in secrets)

    async def _log_refusal(self, transaction_id: int, buyer_id: int) -> None:
        txn = await self.db.get(Transaction, transaction_id)
        if txn is None:
            reason = "not_found"
        elif txn.buyer_id != buyer_id:
            reason = "not_buyer"
        elif txn.status != TransactionStatus.COMPLETED:
            reason = f"status_{txn.status}"
        else:
            reason = "already_delivered"
        logger.info(
            "Credential delivery refused",
            extra={
                "transaction_id": transaction_id,
                "buyer_id": buyer_id,
                "reason": reason,
            },
        )
