"""Review Subsystem — one immutable rating per completed transaction."""

import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from account_market.core.enforce_disputes import (
    check_buyer_owns, check_rating, check_reviewable,
)
from account_market.core.errors import TransactionNotFoundError
from account_market.infrastructure.database import unit_of_work
from account_market.models.review import Review
from account_market.models.transaction import Transaction

logger = logging.getLogger(__name__)


class ReviewService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_review(
        self,
        transaction_id: int,
        buyer_id: int,
        rating: int,
        comment: str | None = None,
    ) -> Review:
        async with unit_of_work(self.db):
            txn = await self.db.get(Transaction, transaction_id)
            if txn is None:
                raise TransactionNotFoundError(transaction_id)
            check_buyer_owns(txn.buyer_id, buyer_id)
            existing = await self.db.execute(
                select(Review.id).where(Review.transaction_id == transaction_id),
            )
            check_reviewable(txn.status, existing.scalar_one_or_none())
            check_rating(rating)

            review = Review(
                transaction_id=transaction_id,
                buyer_id=buyer_id,
                seller_id=txn.seller_id,
                rating=rating,
                comment=comment,
            )
            self.db.add(review)
            await self.db.flush()

        logger.info(
            "Review created",
            extra={"transaction_id": transaction_id, "seller_id": txn.seller_id},
        )
        return review

    async def get_seller_reviews(self, seller_id: int) -> list[Review]:
        result = await self.db.execute(
            select(Review)
            .where(Review.seller_id == seller_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
        )
        return list(result.scalars().all())

    async def get_seller_rating(self, seller_id: int) -> dict:
        """{"count", "average"} — average is None when the seller has no reviews."""
        result = await self.db.execute(
            select(func.count(Review.id), func.avg(Review.rating))
            .where(Review.seller_id == seller_id)
        )
        count, average = result.one()
        return {
            "seller_id": seller_id,
            "count": count,
            "average": round(float(average), 2) if average is not None else None,
        }
