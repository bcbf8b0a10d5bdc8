"""Withdrawal Routes — seller payout requests."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from account_market.api.dependencies import get_current_user_id
from account_market.infrastructure.database import get_db
from account_market.schemas.withdrawal import WithdrawalCreate, WithdrawalResponse
from account_market.services.withdrawals import WithdrawalService

router = APIRouter(prefix="/api/v1/withdrawals", tags=["withdrawals"])


@router.post(
    "", response_model=WithdrawalResponse, status_code=status.HTTP_201_CREATED,
)
async def create_withdrawal(
    body: WithdrawalCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await WithdrawalService(db).create_withdrawal_request(
        user_id, body.amount, body.payment_method, body.payment_details,
    )


@router.get("", response_model=list[WithdrawalResponse])
async def my_withdrawals(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await WithdrawalService(db).get_seller_withdrawals(user_id)
