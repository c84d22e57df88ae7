"""
Unit Tests for the Claim State Machine
"""

import pytest

from claimdesk.core.enums import ClaimStatus
from claimdesk.services.claim_state_machine import (
    OPEN_STATUSES,
    TERMINAL_STATUSES,
    ClaimStateMachine,
    Transition,
    is_terminal_status,
)


@pytest.fixture
def machine():
    return ClaimStateMachine()


@pytest.mark.unit
class TestClaimStateMachine:
    @pytest.mark.parametrize(
        ("from_status", "to_status"),
        [
            (ClaimStatus.PENDING, ClaimStatus.UNDER_REVIEW),
            (ClaimStatus.PENDING, ClaimStatus.CANCELLED),
            (ClaimStatus.UNDER_REVIEW, ClaimStatus.UNDER_REVIEW),
            (ClaimStatus.UNDER_REVIEW, ClaimStatus.APPROVED),
            (ClaimStatus.UNDER_REVIEW, ClaimStatus.REJECTED),
        ],
    )
    def test_allowed_moves(self, machine, from_status, to_status):
        result = machine.validate_transition(from_status, to_status, has_adjuster=True)

        assert result.success
        assert result.to_status == to_status

    @pytest.mark.parametrize("status", sorted(TERMINAL_STATUSES))
    def test_terminal_statuses_have_no_exits(self, machine, status):
        assert is_terminal_status(status)

        for target in ClaimStatus:
            result = machine.validate_transition(status, target, has_adjuster=True)
            assert not result.success
            assert "no further transitions" in result.error

    @pytest.mark.parametrize(
        ("from_status", "to_status"),
        [
            (ClaimStatus.PENDING, ClaimStatus.APPROVED),
            (ClaimStatus.PENDING, ClaimStatus.REJECTED),
            (ClaimStatus.UNDER_REVIEW, ClaimStatus.CANCELLED),
            (ClaimStatus.UNDER_REVIEW, ClaimStatus.PENDING),
        ],
    )
    def test_skipping_or_reversing_is_invalid(self, machine, from_status, to_status):
        result = machine.validate_transition(from_status, to_status, has_adjuster=True)

        assert not result.success
        assert "Invalid transition" in result.error
        assert result.to_status is None

    def test_assignment_requires_adjuster(self, machine):
        result = machine.validate_transition(ClaimStatus.PENDING, ClaimStatus.UNDER_REVIEW)

        assert not result.success
        assert "adjuster" in result.error

    def test_cancel_needs_no_adjuster(self, machine):
        result = machine.validate_transition(ClaimStatus.PENDING, ClaimStatus.CANCELLED)

        assert result.success
        assert result.transition.requires_adjuster is False

    def test_custom_transition_table(self):
        machine = ClaimStateMachine([Transition(ClaimStatus.PENDING, ClaimStatus.APPROVED)])

        assert machine.validate_transition(ClaimStatus.PENDING, ClaimStatus.APPROVED).success
        assert not machine.validate_transition(ClaimStatus.PENDING, ClaimStatus.CANCELLED).success

    def test_open_statuses_are_not_terminal(self):
        assert all(not is_terminal_status(s) for s in OPEN_STATUSES)
