"""Dispute Routes — buyer-facing dispute creation and lookup."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from account_market.api.dependencies import get_current_user_id
from account_market.core.errors import ResourceNotFoundError
from account_market.infrastructure.database import get_db
from account_market.schemas.dispute import DisputeCreate, DisputeResponse
from account_market.services.disputes import DisputeService

router = APIRouter(prefix="/api/v1/disputes", tags=["disputes"])


@router.post(
    "", response_model=DisputeResponse, status_code=status.HTTP_201_CREATED,
)
async def create_dispute(
    body: DisputeCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await DisputeService(db).create_dispute(
        body.transaction_id, user_id, body.reason, body.description,
    )


@router.get("/{dispute_id}", response_model=DisputeResponse)
async def get_dispute(
    dispute_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    dispute = await DisputeService(db).get_dispute(dispute_id, user_id)
    if dispute is None:
        raise ResourceNotFoundError("Dispute", dispute_id)
    return dispute
