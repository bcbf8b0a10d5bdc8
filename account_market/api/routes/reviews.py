"""Review Routes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from account_market.api.dependencies import get_current_user_id
from account_market.infrastructure.database import get_db
from account_market.schemas.review import ReviewCreate, ReviewResponse
from account_market.services.reviews import ReviewService

router = APIRouter(prefix="/api/v1/reviews", tags=["reviews"])


@router.post(
    "", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED,
)
async def create_review(
    body: ReviewCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await ReviewService(db).create_review(
        body.transaction_id, user_id, body.rating, body.comment,
    )
