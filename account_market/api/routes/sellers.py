"""Seller Routes — balance (owner only), reviews and rating (public).

Invariants:
    - A balance is visible to its owner only; anyone else gets a generic 404
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from account_market.api.dependencies import get_current_user_id
from account_market.core.errors import ResourceNotFoundError
from account_market.infrastructure.database import get_db
from account_market.schemas.review import ReviewResponse
from account_market.schemas.seller import BalanceResponse, SellerRatingResponse
from account_market.services.ledger import LedgerService
from account_market.services.reviews import ReviewService

router = APIRouter(prefix="/api/v1/sellers", tags=["sellers"])


@router.get("/{seller_id}/balance", response_model=BalanceResponse)
async def get_balance(
    seller_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    if seller_id != user_id:
        raise ResourceNotFoundError("Seller", seller_id)
    balance = await LedgerService(db).get_balance(seller_id)
    return BalanceResponse(user_id=seller_id, balance=float(balance))


@router.get("/{seller_id}/reviews", response_model=list[ReviewResponse])
async def get_seller_reviews(seller_id: int, db: AsyncSession = Depends(get_db)):
    return await ReviewService(db).get_seller_reviews(seller_id)


@router.get("/{seller_id}/rating", response_model=SellerRatingResponse)
async def get_seller_rating(seller_id: int, db: AsyncSession = Depends(get_db)):
    return await ReviewService(db).get_seller_rating(seller_id)
