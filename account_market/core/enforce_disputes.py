"""Dispute & Review Enforcement — time windows and once-only guards.

Invariants:
    - All functions are PURE: `now` is always passed in
    - The dispute window is measured from the transaction's stored created_at
    - A dispute in RESOLVED or CLOSED can never be resolved again

Design Decisions:
    - Naive datetimes are read as UTC: SQLite drops tzinfo on round-trip while
      Postgres keeps it, and every timestamp we write is UTC
"""

from datetime import datetime, timedelta, timezone

from account_market.core.domain_types import DisputeStatus, TransactionStatus
from account_market.core.errors import (
    DisputeWindowExpiredError, DisputeExistsError, DisputeAlreadyResolvedError,
    IncompleteTransactionError, InvalidRatingError, NotBuyersTransactionError,
    ReviewExistsError,
)


def as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def dispute_deadline(created_at: datetime, window_hours: int) -> datetime:
    return as_utc(created_at) + timedelta(hours=window_hours)


def check_buyer_owns(transaction_buyer_id: int, buyer_id: int) -> None:
    if transaction_buyer_id != buyer_id:
        raise NotBuyersTransactionError()


def check_dispute_window(
    created_at: datetime, now: datetime, window_hours: int,
) -> None:
    if as_utc(now) > dispute_deadline(created_at, window_hours):
        raise DisputeWindowExpiredError(window_hours)


def check_no_existing_dispute(existing_dispute_id: int | None) -> None:
    if existing_dispute_id is not None:
        raise DisputeExistsError()


def check_dispute_resolvable(status: str) -> None:
    if status in (DisputeStatus.RESOLVED, DisputeStatus.CLOSED):
        raise DisputeAlreadyResolvedError()


def check_reviewable(transaction_status: str, existing_review_id: int | None) -> None:
    if transaction_status != TransactionStatus.COMPLETED:
        raise IncompleteTransactionError()
    if existing_review_id is not None:
        raise ReviewExistsError()


def check_rating(rating: int) -> None:
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise InvalidRatingError(rating)


def escrow_released(escrow_release_date: datetime | None, now: datetime) -> bool:
    """Advisory marker only: no job acts on it."""
    if escrow_release_date is None:
        return False
    return as_utc(now) >= as_utc(escrow_release_date)
