"""User ORM — identity, role and the ledger balance.

Invariants:
    - email is unique
    - balance >= 0 (DB check constraint); mutated only via LedgerService
    - role in {buyer, seller, admin}

Design Decisions:
    - Balance lives on the user row: row lock on users.id serializes every
      credit/debit for one user
    - Registration and password hashing are an external concern; password_hash
      is nullable so collaborators can own it
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Boolean, DateTime, Integer, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from account_market.db.base import Base


class User(Base):
    """Marketplace participant — buyer, seller or admin."""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_users_balance_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="buyer")
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    balance: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0.00"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
