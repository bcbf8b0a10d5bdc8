"""Dispute ORM — one buyer/seller conflict over one transaction.

Invariants:
    - transaction_id unique: at most one dispute per transaction
    - status: open -> in_review -> resolved | closed (terminal)
    - held_amount: seller proceeds moved into escrow when the dispute opened
    - resolution/refund_amount set only when resolved
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Text, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from account_market.db.base import Base


class Dispute(Base):
    __tablename__ = "disputes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    transaction_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("transactions.id"), nullable=False, unique=True,
    )
    buyer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False,
    )
    seller_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False,
    )
    reason: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="open", index=True,
    )
    resolution: Mapped[str | None] = mapped_column(String(20), nullable=True)
    refund_amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    held_amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0.00"))
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(
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
