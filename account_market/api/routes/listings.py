"""Listing Routes — seller listing management and public browsing.

Invariants:
    - Public reads see active listings only; credentials are never serialized
    - Update of a missing or foreign listing is a generic 404
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from account_market.api.dependencies import get_current_user_id
from account_market.core.domain_types import Platform
from account_market.core.errors import ResourceNotFoundError
from account_market.infrastructure.database import get_db
from account_market.schemas.listing import ListingCreate, ListingResponse, ListingUpdate
from account_market.services.listings import ListingService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/listings", tags=["listings"])


@router.post(
    "", response_model=ListingResponse, status_code=status.HTTP_201_CREATED,
)
async def create_listing(
    body: ListingCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Create a listing for the calling seller (starts under review)."""
    return await ListingService(db).create_listing(
        seller_id=user_id,
        title=body.title,
        description=body.description,
        platform=body.platform.value,
        category=body.category,
        price=body.price,
        credentials=body.credentials,
        follower_count=body.follower_count,
        account_age_months=body.account_age_months,
    )


@router.get("", response_model=list[ListingResponse])
async def list_listings(
    platform: Platform | None = None,
    category: str | None = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    return await ListingService(db).list_active_listings(
        platform=platform.value if platform else None,
        category=category, limit=limit, offset=offset,
    )


@router.get("/mine", response_model=list[ListingResponse])
async def my_listings(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """All of the caller's listings, every status."""
    return await ListingService(db).get_seller_listings(user_id)


@router.get("/{listing_id}", response_model=ListingResponse)
async def get_listing(listing_id: int, db: AsyncSession = Depends(get_db)):
    listing = await ListingService(db).get_listing(listing_id)
    if listing is None:
        raise ResourceNotFoundError("Listing", listing_id)
    return listing


@router.patch("/{listing_id}", response_model=ListingResponse)
async def update_listing(
    listing_id: int,
    body: ListingUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    listing = await ListingService(db).update_listing(
        listing_id, user_id, **body.model_dump(exclude_unset=True),
    )
    if listing is None:
        raise ResourceNotFoundError("Listing", listing_id)
    return listing
