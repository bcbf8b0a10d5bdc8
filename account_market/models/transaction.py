"""Transaction ORM — one escrow agreement between a buyer and one seller.

Invariants:
    - One row per seller group of a checkout (not per cart item)
    - platform_fee = amount × fee rate, amount > 0
    - credentials_delivered_at set at most once (conditional UPDATE guards it)
    - escrow_release_date = checkout time + escrow hold (advisory only)
    - status: pending -> completed -> {disputed -> completed | refunded} | cancelled | refunded

Design Decisions:
    - listing_id keeps the group's primary listing; every listing of the group
      is recorded in transaction_items so delivery can release all of them
    - cascade delete for items: a transaction owns its lines
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Integer, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from account_market.db.base import Base


class Transaction(Base):
    """Escrow record for one seller group of a checkout."""
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
        CheckConstraint("platform_fee >= 0", name="ck_transactions_fee_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    buyer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True,
    )
    seller_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True,
    )
    listing_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("listings.id"), nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    platform_fee: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0.00"))
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    escrow_release_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    credentials_delivered_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    items: Mapped[list["TransactionItem"]] = relationship(
        "TransactionItem", back_populates="transaction",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="TransactionItem.id",
    )


class TransactionItem(Base):
    """One listing carried by a transaction."""
    __tablename__ = "transaction_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    transaction_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False,
    )
    listing_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("listings.id"), nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    unit_price: Mapped[Decimal] = mapped_column(nullable=False)

    transaction: Mapped["Transaction"] = relationship(
        "Transaction", back_populates="items",
    )
