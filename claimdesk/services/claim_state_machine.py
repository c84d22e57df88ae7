"""
Claim Status State Machine.

Provides:
- Valid status transitions
- Transition validation

State Diagram:
    PENDING -> UNDER_REVIEW            (assign adjuster)
    UNDER_REVIEW -> UNDER_REVIEW       (reassign adjuster)
    UNDER_REVIEW -> APPROVED | REJECTED (review)
    PENDING -> CANCELLED               (claimant withdraws)

APPROVED, REJECTED and CANCELLED are terminal.
"""

from dataclasses import dataclass
from typing import Optional

from claimdesk.core.enums import ClaimStatus


@dataclass(frozen=True)
class Transition:
    """Represents a valid state transition."""

    from_status: ClaimStatus
    to_status: ClaimStatus
    requires_adjuster: bool = False


@dataclass
class TransitionResult:
    """Result of a transition attempt."""

    success: bool
    from_status: ClaimStatus
    to_status: Optional[ClaimStatus] = None
    error: Optional[str] = None
    transition: Optional[Transition] = None


# =============================================================================
# Valid Transitions Definition
# =============================================================================


VALID_TRANSITIONS: list[Transition] = [
    # From PENDING
    Transition(
        from_status=ClaimStatus.PENDING,
        to_status=ClaimStatus.UNDER_REVIEW,
        requires_adjuster=True,
    ),
    Transition(
        from_status=ClaimStatus.PENDING,
        to_status=ClaimStatus.CANCELLED,
    ),

    # From UNDER_REVIEW
    Transition(
        from_status=ClaimStatus.UNDER_REVIEW,
        to_status=ClaimStatus.UNDER_REVIEW,
        requires_adjuster=True,
    ),
    Transition(
        from_status=ClaimStatus.UNDER_REVIEW,
        to_status=ClaimStatus.APPROVED,
        requires_adjuster=True,
    ),
    Transition(
        from_status=ClaimStatus.UNDER_REVIEW,
        to_status=ClaimStatus.REJECTED,
        requires_adjuster=True,
    ),
]


# =============================================================================
# State Machine
# =============================================================================


class ClaimStateMachine:
    """
    State machine for claim status transitions.

    Manages valid status transitions and validates transition requests.
    """

    def __init__(self, transitions: Optional[list[Transition]] = None):
        self._by_status_pair: dict[tuple[ClaimStatus, ClaimStatus], Transition] = {
            (t.from_status, t.to_status): t for t in transitions or VALID_TRANSITIONS
        }

    def validate_transition(
        self,
        from_status: ClaimStatus,
        to_status: ClaimStatus,
        has_adjuster: bool = False,
    ) -> TransitionResult:
        """
        Validate a transition attempt.

        Args:
            from_status: Current claim status
            to_status: Requested status
            has_adjuster: Whether the claim will have an adjuster after the change

        Returns:
            TransitionResult indicating success/failure
        """
        transition = self._by_status_pair.get((from_status, to_status))

        if transition is None:
            if is_terminal_status(from_status):
                error = f"Claim is {from_status.value}; no further transitions are allowed"
            else:
                error = f"Invalid transition: {from_status.value} -> {to_status.value}"
            return TransitionResult(success=False, from_status=from_status, error=error)

        if transition.requires_adjuster and not has_adjuster:
            return TransitionResult(
                success=False,
                from_status=from_status,
                error=f"An adjuster must be assigned before moving to {to_status.value}",
            )

        return TransitionResult(
            success=True,
            from_status=from_status,
            to_status=to_status,
            transition=transition,
        )


# =============================================================================
# Status Helpers
# =============================================================================


TERMINAL_STATUSES = frozenset({ClaimStatus.APPROVED, ClaimStatus.REJECTED, ClaimStatus.CANCELLED})
OPEN_STATUSES = (ClaimStatus.PENDING, ClaimStatus.UNDER_REVIEW)


def is_terminal_status(status: ClaimStatus) -> bool:
    """Check if status is terminal (no further transitions)."""
    return status in TERMINAL_STATUSES

