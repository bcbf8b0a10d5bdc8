"""Admin Routes — listing moderation, dispute handling, withdrawal processing.

Invariants:
    - Every route requires an admin caller (router-level dependency)
    - Service None (unknown id) becomes a 404
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from account_market.api.dependencies import require_admin
from account_market.core.domain_types import (
    DisputeStatus, ListingStatus, WithdrawalStatus,
)
from account_market.core.errors import ResourceNotFoundError
from account_market.infrastructure.database import get_db
from account_market.schemas.dispute import DisputeNote, DisputeResolve, DisputeResponse
from account_market.schemas.listing import ListingModerate, ListingResponse
from account_market.schemas.withdrawal import WithdrawalProcess, WithdrawalResponse
from account_market.services.disputes import DisputeService
from account_market.services.listings import ListingService
from account_market.services.withdrawals import WithdrawalService

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/v1/admin", tags=["admin"], dependencies=[Depends(require_admin)],
)


# ─── Listings ───────────────────────────────────────────────────

@router.get("/listings", response_model=list[ListingResponse])
async def list_all_listings(
    status_filter: ListingStatus | None = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    return await ListingService(db).list_all_listings(
        status_filter.value if status_filter else None,
    )


@router.post("/listings/{listing_id}/moderate", response_model=ListingResponse)
async def moderate_listing(
    listing_id: int, body: ListingModerate, db: AsyncSession = Depends(get_db),
):
    listing = await ListingService(db).moderate_listing(
        listing_id, body.status, body.admin_notes,
    )
    if listing is None:
        raise ResourceNotFoundError("Listing", listing_id)
    return listing


# ─── Disputes ───────────────────────────────────────────────────

@router.get("/disputes", response_model=list[DisputeResponse])
async def list_disputes(
    status_filter: DisputeStatus | None = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    return await DisputeService(db).list_disputes(
        status_filter.value if status_filter else None,
    )


@router.post("/disputes/{dispute_id}/review", response_model=DisputeResponse)
async def mark_dispute_in_review(
    dispute_id: int, body: DisputeNote, db: AsyncSession = Depends(get_db),
):
    dispute = await DisputeService(db).mark_in_review(dispute_id, body.admin_notes)
    if dispute is None:
        raise ResourceNotFoundError("Dispute", dispute_id)
    return dispute


@router.post("/disputes/{dispute_id}/resolve", response_model=DisputeResponse)
async def resolve_dispute(
    dispute_id: int, body: DisputeResolve, db: AsyncSession = Depends(get_db),
):
    dispute = await DisputeService(db).resolve_dispute(
        dispute_id, body.resolution, body.admin_notes, body.refund_amount,
    )
    if dispute is None:
        raise ResourceNotFoundError("Dispute", dispute_id)
    return dispute


@router.post("/disputes/{dispute_id}/close", response_model=DisputeResponse)
async def close_dispute(
    dispute_id: int, body: DisputeNote, db: AsyncSession = Depends(get_db),
):
    dispute = await DisputeService(db).close_dispute(dispute_id, body.admin_notes)
    if dispute is None:
        raise ResourceNotFoundError("Dispute", dispute_id)
    return dispute


# ─── Withdrawals ────────────────────────────────────────────────

@router.get("/withdrawals", response_model=list[WithdrawalResponse])
async def list_withdrawals(
    status_filter: WithdrawalStatus | None = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    return await WithdrawalService(db).list_withdrawal_requests(
        status_filter.value if status_filter else None,
    )


@router.post("/withdrawals/{withdrawal_id}/process", response_model=WithdrawalResponse)
async def process_withdrawal(
    withdrawal_id: int, body: WithdrawalProcess, db: AsyncSession = Depends(get_db),
):
    request = await WithdrawalService(db).process_withdrawal(
        withdrawal_id, body.status, body.admin_notes,
    )
    if request is None:
        raise ResourceNotFoundError("WithdrawalRequest", withdrawal_id)
    return request
