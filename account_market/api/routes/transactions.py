"""Transaction Routes — checkout, purchase history, credential delivery.

Invariants:
    - Checkout answers 201 with one transaction per seller
    - Credential delivery refusals of every kind are the same 404
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from account_market.api.dependencies import get_current_user_id
from account_market.core.domain_types import TransactionStatus
from account_market.core.errors import ResourceNotFoundError
from account_market.infrastructure.database import get_db
from account_market.schemas.transaction import (
    CheckoutRequest, CredentialsResponse, TransactionResponse,
)
from account_market.services.checkout import CheckoutService
from account_market.services.credentials import CredentialDeliveryService
from account_market.services.transactions import TransactionQueryService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/transactions", tags=["transactions"])


@router.post(
    "/checkout",
    response_model=list[TransactionResponse],
    status_code=status.HTTP_201_CREATED,
)
async def checkout(
    body: CheckoutRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await CheckoutService(db).checkout(
        user_id, body.payment_method.value, body.cart_item_ids,
    )


@router.get("", response_model=list[TransactionResponse])
async def list_transactions(
    status_filter: TransactionStatus | None = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Purchases and sales of the caller, newest first."""
    return await TransactionQueryService(db).get_user_transactions(
        user_id,
        status=status_filter.value if status_filter else None,
        limit=limit, offset=offset,
    )


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    txn = await TransactionQueryService(db).get_transaction(transaction_id, user_id)
    if txn is None:
        raise ResourceNotFoundError("Transaction", transaction_id)
    return txn


@router.post("/{transaction_id}/credentials", response_model=CredentialsResponse)
async def deliver_credentials(
    transaction_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    credentials = await CredentialDeliveryService(db).deliver_credentials(
        transaction_id, user_id,
    )
    if credentials is None:
        raise ResourceNotFoundError(
            "Transaction", transaction_id,
            message="Credentials are not available for this transaction",
        )
    return CredentialsResponse(transaction_id=transaction_id, credentials=credentials)
