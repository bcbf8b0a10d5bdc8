"""Checkout Service — converts cart rows into per-seller escrow transactions.

Invariants:
    - Preconditions run before the first write (buyer, then enforce_checkout order)
    - One Transaction per seller group, status completed, escrow date = now + hold
    - Every listing of a group flips active -> sold via one conditional UPDATE;
      a listing that stopped being active meanwhile aborts the whole checkout
    - Seller is credited amount − fee through the ledger (row-locked)
    - Consumed cart rows are deleted in the same commit as everything else

Design Decisions:
    - The whole checkout is ONE unit of work: a failure in any group rolls back
      every group and leaves the cart intact
    - Lines loaded with a single CartItem ⋈ Listing join (no per-item queries)
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from account_market.config import Settings, get_settings
from account_market.core.domain_types import (
    ListingStatus, PaymentMethod, TransactionStatus,
)
from account_market.core.enforce_checkout import (
    CartLine, SellerGroup, validate_checkout, group_by_seller,
)
from account_market.core.errors import BuyerNotFoundError, ListingsUnavailableError
from account_market.core.repository_protocols import LedgerStore, UserDirectory
from account_market.infrastructure.database import unit_of_work
from account_market.models.cart_item import CartItem
from account_market.models.listing import Listing
from account_market.models.transaction import Transaction, TransactionItem
from account_market.services.ledger import LedgerService
from account_market.services.users import UserDirectoryService

logger = logging.getLogger(__name__)


class CheckoutService:
    """Transaction engine entry point."""

    def __init__(
        self,
        db: AsyncSession,
        ledger: LedgerStore | None = None,
        users: UserDirectory | None = None,
        settings: Settings | None = None,
    ):
        self.db = db
        self.ledger = ledger or LedgerService(db)
        self.users = users or UserDirectoryService(db)
        self.settings = settings or get_settings()

    async def checkout(
        self, buyer_id: int, payment_method: str, cart_item_ids: list[int],
    ) -> list[Transaction]:
        """Buy the given cart rows. Returns one transaction per seller, ordered by seller id."""
        method = PaymentMethod(payment_method)
        async with unit_of_work(self.db):
            if not await self.users.exists(buyer_id):
                raise BuyerNotFoundError(buyer_id)

            lines = await self._load_lines(cart_item_ids)
            validate_checkout(buyer_id, cart_item_ids, lines)
            groups = group_by_seller(lines, self.settings.platform_fee_rate)

            now = datetime.now(timezone.utc)
            transactions = [
                await self._settle_group(buyer_id, method, group, now)
                for group in groups
            ]

            await self.db.execute(
                delete(CartItem).where(CartItem.id.in_(
                    [line.cart_item_id for line in lines],
                )),
            )

        logger.info(
            f"Checkout completed: {len(transactions)} transaction(s)",
            extra={
                "buyer_id": buyer_id,
                "amount": str(sum(t.amount for t in transactions)),
            },
        )
        return transactions

    async def _load_lines(self, cart_item_ids: list[int]) -> list[CartLine]:
        if not cart_item_ids:
            return []
        result = await self.db.execute(
            select(
                CartItem.id, CartItem.buyer_id, CartItem.listing_id,
                CartItem.quantity, Listing.price, Listing.seller_id,
                Listing.status, Listing.title,
            )
            .join(Listing, CartItem.listing_id == Listing.id)
            .where(CartItem.id.in_(cart_item_ids))
            .order_by(CartItem.id)
        )
        return [
            CartLine(
                cart_item_id=row[0], buyer_id=row[1], listing_id=row[2],
                quantity=row[3], unit_price=row[4], seller_id=row[5],
                listing_status=row[6], listing_title=row[7],
            )
            for row in result.all()
        ]

    async def _settle_group(
        self,
        buyer_id: int,
        method: PaymentMethod,
        group: SellerGroup,
        now: datetime,
    ) -> Transaction:
        delivered_at = (
            now if self.settings.credential_delivery_mode == "immediate" else None
        )
        txn = Transaction(
            buyer_id=buyer_id,
            seller_id=group.seller_id,
            listing_id=group.primary_listing_id,
            amount=group.amount,
            platform_fee=group.platform_fee,
            payment_method=method.value,
            status=TransactionStatus.COMPLETED.value,
            escrow_release_date=now + timedelta(hours=self.settings.escrow_hold_hours),
            credentials_delivered_at=delivered_at,
            created_at=now,
            items=[
                TransactionItem(
                    listing_id=line.listing_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
                for line in group.lines
            ],
        )
        self.db.add(txn)
        await self.db.flush()

        await self._mark_sold(group, now)
        if group.seller_net > 0:
            await self.ledger.credit(group.seller_id, group.seller_net)

        logger.info(
            "Transaction created",
            extra={
                "transaction_id": txn.id,
                "buyer_id": buyer_id,
                "seller_id": group.seller_id,
                "amount": str(group.amount),
            },
        )
        return txn

    async def _mark_sold(self, group: SellerGroup, now: datetime) -> None:
        listing_ids = list(dict.fromkeys(group.listing_ids))
        result = await self.db.execute(
            update(Listing)
            .where(Listing.id.in_(listing_ids))
            .where(Listing.status == ListingStatus.ACTIVE.value)
            .values(status=ListingStatus.SOLD.value, updated_at=now)
            .returning(Listing.id)
        )
        flipped = set(result.scalars().all())
        if flipped != set(listing_ids):
            lost = [
                line.listing_title for line in group.lines
                if line.listing_id not in flipped
            ]
            logger.warning(
                "Listing sold concurrently during checkout",
                extra={"seller_id": group.seller_id, "reason": "listing_race"},
            )
            raise ListingsUnavailableError(lost)
