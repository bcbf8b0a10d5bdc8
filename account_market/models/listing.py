"""Listing ORM — a sellable account with its encoded credentials.

Invariants:
    - Owned by exactly one seller (seller_id FK)
    - price > 0 (DB check constraint)
    - status in {active, sold, removed, under_review}; created under_review
    - encrypted_credentials holds the vault encoding, never plain text

Design Decisions:
    - platform/status as String columns + str Enums in core: portable across
      Postgres and SQLite, validated at the schema boundary
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Text, Integer, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from account_market.db.base import Base


class Listing(Base):
    """Account listing offered by a seller."""
    __tablename__ = "listings"
    __table_args__ = (
        CheckConstraint("price > 0", name="ck_listings_price_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    seller_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    platform: Mapped[str] = mapped_column(String(30), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[Decimal] = mapped_column(nullable=False)
    follower_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    account_age_months: Mapped[int | None] = mapped_column(Integer, nullable=True)
    encrypted_credentials: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="under_review", index=True,
    )
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
