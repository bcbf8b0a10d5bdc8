"""Listing Service — seller listing creation/editing and admin moderation.

Invariants:
    - Only existing, verified sellers create listings; new listings start under_review
    - Credentials are vault-encoded before they reach the DB
    - Public reads return ACTIVE listings only
    - SOLD is terminal: neither the seller nor an admin can move a sold listing
    - Checkout is the only path to SOLD (moderation accepts active/removed only)

Design Decisions:
    - Not-found and not-owned collapse to None on update (no existence leak)
    - update_listing never touches status: status belongs to moderation and checkout
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from account_market.core.domain_types import ListingStatus, Platform
from account_market.core.errors import (
    SellerNotFoundError, SellerNotVerifiedError, InvalidStatusTransitionError,
)
from account_market.core.money import to_money, require_positive
from account_market.core.repository_protocols import UserDirectory
from account_market.core.state_machines import check_transition
from account_market.core.vault import encode_secret
from account_market.infrastructure.database import unit_of_work
from account_market.models.listing import Listing
from account_market.services.users import UserDirectoryService

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = frozenset({
    "title", "description", "category", "price",
    "follower_count", "account_age_months",
})


class ListingService:
    """Listing store operations."""

    def __init__(self, db: AsyncSession, users: UserDirectory | None = None):
        self.db = db
        self.users = users or UserDirectoryService(db)

    async def create_listing(
        self,
        seller_id: int,
        title: str,
        description: str,
        platform: str,
        category: str,
        price: Decimal,
        credentials: str,
        follower_count: int | None = None,
        account_age_months: int | None = None,
    ) -> Listing:
        async with unit_of_work(self.db):
            seller = await self.users.get_user(seller_id)
            if seller is None:
                raise SellerNotFoundError(seller_id)
            if not seller.is_verified:
                raise SellerNotVerifiedError()
            listing = Listing(
                seller_id=seller_id,
                title=title,
                description=description,
                platform=Platform(platform).value,
                category=category,
                price=require_positive(to_money(price)),
                follower_count=follower_count,
                account_age_months=account_age_months,
                encrypted_credentials=encode_secret(credentials),
                status=ListingStatus.UNDER_REVIEW.value,
            )
            self.db.add(listing)
            await self.db.flush()
        logger.info(
            "Listing created",
            extra={"listing_id": listing.id, "seller_id": seller_id},
        )
        return listing

    async def update_listing(
        self, listing_id: int, seller_id: int, **fields: Any,
    ) -> Listing | None:
        """Edit the seller's own listing. Unknown fields are ignored."""
        async with unit_of_work(self.db):
            listing = await self.db.get(Listing, listing_id)
            if listing is None or listing.seller_id != seller_id:
                logger.info(
                    "Listing update refused",
                    extra={"listing_id": listing_id, "seller_id": seller_id,
                           "reason": "not_found" if listing is None else "not_owner"},
                )
                return None
            if listing.status == ListingStatus.SOLD:
                raise InvalidStatusTransitionError("Listing", listing.status, "edited")
            for name, value in fields.items():
                if name not in _EDITABLE_FIELDS:
                    continue
                if name == "price" and value is not None:
                    value = require_positive(to_money(value))
                setattr(listing, name, value)
            listing.updated_at = datetime.now(timezone.utc)
        return listing

    async def moderate_listing(
        self, listing_id: int, status: str, admin_notes: str | None = None,
    ) -> Listing | None:
        """Admin toggle between active and removed (also approves under_review)."""
        target = ListingStatus(status)
        if target not in (ListingStatus.ACTIVE, ListingStatus.REMOVED):
            raise InvalidStatusTransitionError("Listing", "any", target.value)
        async with unit_of_work(self.db):
            listing = await self.db.get(Listing, listing_id)
            if listing is None:
                return None
            if listing.status != target:
                check_transition(listing.status, target)
            listing.status = target.value
            if admin_notes:
                listing.admin_notes = admin_notes
            listing.updated_at = datetime.now(timezone.utc)
        logger.info(
            f"Listing moderated to {target.value}",
            extra={"listing_id": listing_id},
        )
        return listing

    async def get_listing(self, listing_id: int) -> Listing | None:
        """Public read — active listings only."""
        result = await self.db.execute(
            select(Listing).where(
                Listing.id == listing_id,
                Listing.status == ListingStatus.ACTIVE.value,
            ),
        )
        return result.scalar_one_or_none()

    async def list_active_listings(
        self,
        platform: str | None = None,
        category: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Listing]:
        query = (
            select(Listing)
            .where(Listing.status == ListingStatus.ACTIVE.value)
            .order_by(Listing.created_at.desc(), Listing.id.desc())
        )
        if platform:
            query = query.where(Listing.platform == Platform(platform).value)
        if category:
            query = query.where(Listing.category == category)
        result = await self.db.execute(query.limit(limit).offset(offset))
        return list(result.scalars().all())

    async def get_seller_listings(self, seller_id: int) -> list[Listing]:
        result = await self.db.execute(
            select(Listing)
            .where(Listing.seller_id == seller_id)
            .order_by(Listing.id),
        )
        return list(result.scalars().all())

    async def list_all_listings(self, status: str | None = None) -> list[Listing]:
        """Admin view — every status."""
        query = select(Listing).order_by(Listing.created_at.desc(), Listing.id.desc())
        if status:
            query = query.where(Listing.status == ListingStatus(status).value)
        result = await self.db.execute(query)
        return list(result.scalars().all())
