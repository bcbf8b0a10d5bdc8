"""Cart Service — buyer-scoped staging of listings before checkout.

Invariants:
    - Only active listings can be added; buyers cannot cart their own listings
    - One row per (buyer, listing): re-adding increments quantity
    - get_cart hides rows whose listing is no longer active
    - remove_from_cart only deletes the caller's own rows
"""

import logging

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from account_market.core.domain_types import ListingStatus
from account_market.core.errors import (
    InvalidAmountError, ListingNotPurchasableError, SelfPurchaseError,
)
from account_market.infrastructure.database import unit_of_work
from account_market.models.cart_item import CartItem
from account_market.models.listing import Listing

logger = logging.getLogger(__name__)


class CartService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add_to_cart(
        self, buyer_id: int, listing_id: int, quantity: int = 1,
    ) -> CartItem:
        if quantity < 1:
            raise InvalidAmountError("Quantity must be at least 1")
        async with unit_of_work(self.db):
            listing = await self.db.get(Listing, listing_id)
            if listing is None or listing.status != ListingStatus.ACTIVE:
                raise ListingNotPurchasableError(listing_id)
            if listing.seller_id == buyer_id:
                raise SelfPurchaseError()

            result = await self.db.execute(
                select(CartItem)
                .where(CartItem.buyer_id == buyer_id)
                .where(CartItem.listing_id == listing_id)
                .with_for_update()
            )
            item = result.scalar_one_or_none()
            if item is None:
                item = CartItem(
                    buyer_id=buyer_id, listing_id=listing_id, quantity=quantity,
                )
                self.db.add(item)
            else:
                item.quantity += quantity
            await self.db.flush()
        logger.info(
            "Listing added to cart",
            extra={"buyer_id": buyer_id, "listing_id": listing_id},
        )
        return item

    async def get_cart(self, buyer_id: int) -> list[CartItem]:
        result = await self.db.execute(
            select(CartItem)
            .join(Listing, CartItem.listing_id == Listing.id)
            .where(CartItem.buyer_id == buyer_id)
            .where(Listing.status == ListingStatus.ACTIVE.value)
            .order_by(CartItem.id)
        )
        return list(result.scalars().all())

    async def remove_from_cart(self, cart_item_id: int, buyer_id: int) -> bool:
        async with unit_of_work(self.db):
            result = await self.db.execute(
                delete(CartItem)
                .where(CartItem.id == cart_item_id)
                .where(CartItem.buyer_id == buyer_id)
                .returning(CartItem.id)
            )
            removed = result.scalar_one_or_none() is not None
        return removed
