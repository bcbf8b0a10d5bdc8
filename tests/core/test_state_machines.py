"""Status State Machines — every status value has a row and terminal states stay terminal."""

import pytest

from account_market.core.domain_types import (
    ListingStatus, TransactionStatus, DisputeStatus, WithdrawalStatus,
)
from account_market.core.errors import InvalidStatusTransitionError
from account_market.core.state_machines import (
    LISTING_TRANSITIONS, TRANSACTION_TRANSITIONS, DISPUTE_TRANSITIONS,
    WITHDRAWAL_TRANSITIONS, can_transition, check_transition,
)


@pytest.mark.parametrize("enum_type, table", [
    (ListingStatus, LISTING_TRANSITIONS),
    (TransactionStatus, TRANSACTION_TRANSITIONS),
    (DisputeStatus, DISPUTE_TRANSITIONS),
    (WithdrawalStatus, WITHDRAWAL_TRANSITIONS),
])
def test_tables_are_closed_over_their_enum(enum_type, table):
    assert set(table) == set(enum_type)
    for targets in table.values():
        assert all(isinstance(t, enum_type) for t in targets)


def test_sold_listing_is_terminal():
    assert not LISTING_TRANSITIONS[ListingStatus.SOLD]
    with pytest.raises(InvalidStatusTransitionError):
        check_transition(ListingStatus.SOLD, ListingStatus.ACTIVE)


def test_removed_listing_can_be_reactivated():
    assert can_transition(ListingStatus.REMOVED, ListingStatus.ACTIVE)


def test_resolved_and_closed_disputes_are_terminal():
    for state in (DisputeStatus.RESOLVED, DisputeStatus.CLOSED):
        assert not any(can_transition(state, target) for target in DisputeStatus)


def test_withdrawal_reapproval_is_allowed():
    check_transition(WithdrawalStatus.APPROVED, WithdrawalStatus.APPROVED)


def test_withdrawal_completed_requires_approval():
    with pytest.raises(InvalidStatusTransitionError):
        check_transition(WithdrawalStatus.PENDING, WithdrawalStatus.COMPLETED)


def test_rejected_withdrawal_is_terminal():
    for target in WithdrawalStatus:
        assert not can_transition(WithdrawalStatus.REJECTED, target)


def test_check_transition_accepts_stored_string():
    check_transition("completed", TransactionStatus.DISPUTED)


def test_disputed_transaction_settles_to_completed_or_refunded():
    assert can_transition(TransactionStatus.DISPUTED, TransactionStatus.COMPLETED)
    assert can_transition(TransactionStatus.DISPUTED, TransactionStatus.REFUNDED)
    assert not can_transition(TransactionStatus.DISPUTED, TransactionStatus.CANCELLED)


def test_error_names_entity_and_states():
    with pytest.raises(InvalidStatusTransitionError) as exc_info:
        check_transition(DisputeStatus.CLOSED, DisputeStatus.IN_REVIEW)
    assert exc_info.value.http_status == 409
    assert "closed" in exc_info.value.message
