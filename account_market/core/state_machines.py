"""Status State Machines — allowed transitions for listings, transactions, disputes, withdrawals.

Invariants:
    - SOLD listings are terminal (no re-listing)
    - RESOLVED and CLOSED disputes are terminal
    - REJECTED and COMPLETED withdrawals are terminal
    - Same-state "transitions" are only legal where listed (approval idempotency)

Design Decisions:
    - Explicit transition tables over if/elif chains: every edge visible in one place
    - check_transition raises on top of can_transition
"""

from enum import Enum

from account_market.core.domain_types import (
    ListingStatus, TransactionStatus, DisputeStatus, WithdrawalStatus,
)
from account_market.core.errors import InvalidStatusTransitionError


LISTING_TRANSITIONS: dict[ListingStatus, frozenset[ListingStatus]] = {
    ListingStatus.UNDER_REVIEW: frozenset({ListingStatus.ACTIVE, ListingStatus.REMOVED}),
    ListingStatus.ACTIVE: frozenset({ListingStatus.REMOVED, ListingStatus.SOLD}),
    ListingStatus.REMOVED: frozenset({ListingStatus.ACTIVE}),
    ListingStatus.SOLD: frozenset(),
}

TRANSACTION_TRANSITIONS: dict[TransactionStatus, frozenset[TransactionStatus]] = {
    TransactionStatus.PENDING: frozenset({
        TransactionStatus.COMPLETED, TransactionStatus.CANCELLED,
    }),
    TransactionStatus.COMPLETED: frozenset({
        TransactionStatus.DISPUTED, TransactionStatus.REFUNDED,
    }),
    TransactionStatus.DISPUTED: frozenset({
        TransactionStatus.COMPLETED, TransactionStatus.REFUNDED,
    }),
    TransactionStatus.REFUNDED: frozenset(),
    TransactionStatus.CANCELLED: frozenset(),
}

DISPUTE_TRANSITIONS: dict[DisputeStatus, frozenset[DisputeStatus]] = {
    DisputeStatus.OPEN: frozenset({
        DisputeStatus.IN_REVIEW, DisputeStatus.RESOLVED, DisputeStatus.CLOSED,
    }),
    DisputeStatus.IN_REVIEW: frozenset({DisputeStatus.RESOLVED, DisputeStatus.CLOSED}),
    DisputeStatus.RESOLVED: frozenset(),
    DisputeStatus.CLOSED: frozenset(),
}

WITHDRAWAL_TRANSITIONS: dict[WithdrawalStatus, frozenset[WithdrawalStatus]] = {
    WithdrawalStatus.PENDING: frozenset({
        WithdrawalStatus.APPROVED, WithdrawalStatus.REJECTED,
    }),
    # approved -> approved is the idempotent re-approval (no second debit)
    WithdrawalStatus.APPROVED: frozenset({
        WithdrawalStatus.APPROVED, WithdrawalStatus.REJECTED, WithdrawalStatus.COMPLETED,
    }),
    WithdrawalStatus.REJECTED: frozenset(),
    WithdrawalStatus.COMPLETED: frozenset(),
}

_MACHINES: dict[type[Enum], tuple[str, dict]] = {
    ListingStatus: ("Listing", LISTING_TRANSITIONS),
    TransactionStatus: ("Transaction", TRANSACTION_TRANSITIONS),
    DisputeStatus: ("Dispute", DISPUTE_TRANSITIONS),
    WithdrawalStatus: ("Withdrawal", WITHDRAWAL_TRANSITIONS),
}


def can_transition(current: Enum | str, target: Enum) -> bool:
    _, table = _MACHINES[type(target)]
    return target in table[type(target)(current)]


def check_transition(current: Enum | str, target: Enum) -> None:
    """Raise InvalidStatusTransitionError unless current -> target is an allowed edge."""
    if not can_transition(current, target):
        entity, _ = _MACHINES[type(target)]
        raise InvalidStatusTransitionError(
            entity, type(target)(current).value, target.value,
        )
