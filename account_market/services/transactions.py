"""Transaction reads — a user's purchases and sales."""

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from account_market.core.domain_types import TransactionStatus
from account_market.models.transaction import Transaction


class TransactionQueryService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_transactions(
        self,
        user_id: int,
        status: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Transaction]:
        """Transactions where the user is buyer or seller, newest first."""
        query = (
            select(Transaction)
            .where(or_(Transaction.buyer_id == user_id, Transaction.seller_id == user_id))
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        )
        if status:
            query = query.where(Transaction.status == TransactionStatus(status).value)
        result = await self.db.execute(query.limit(limit).offset(offset))
        return list(result.scalars().all())

    async def get_transaction(self, transaction_id: int, user_id: int) -> Transaction | None:
        txn = await self.db.get(Transaction, transaction_id)
        if txn is None or user_id not in (txn.buyer_id, txn.seller_id):
            return None
        return txn
