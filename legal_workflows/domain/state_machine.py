"""
State machine for the workflow instance lifecycle.

Enforces valid status transitions for activated workflows. All transitions
are caller-initiated; nothing moves an instance automatically.
"""

from typing import Dict, Set

from .enums import InstanceStatus


class InvalidTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_state: InstanceStatus, to_state: InstanceStatus):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid transition from {from_state.value} to {to_state.value}"
        )


class InstanceStateMachine:
    """
    State machine for workflow instance status transitions.

    Valid transitions:
    - ACTIVE → INACTIVE: Instance is paused
    - INACTIVE → ACTIVE: Instance is resumed
    - ACTIVE/INACTIVE → REMOVED: Instance is deleted

    Terminal states: REMOVED
    """

    TRANSITIONS: Dict[InstanceStatus, Set[InstanceStatus]] = {
        InstanceStatus.ACTIVE: {
            InstanceStatus.INACTIVE,
            InstanceStatus.REMOVED,
        },
        InstanceStatus.INACTIVE: {
            InstanceStatus.ACTIVE,
            InstanceStatus.REMOVED,
        },
        InstanceStatus.REMOVED: set(),  # Terminal state
    }

    TERMINAL_STATES: Set[InstanceStatus] = {
        InstanceStatus.REMOVED,
    }

    @classmethod
    def can_transition(
        cls,
        from_state: InstanceStatus,
        to_state: InstanceStatus,
    ) -> bool:
        """Check if a transition is valid."""
        return to_state in cls.TRANSITIONS.get(from_state, set())

    @classmethod
    def transition(
        cls,
        from_state: InstanceStatus,
        to_state: InstanceStatus,
    ) -> InstanceStatus:
        """
        Perform a state transition.

        Returns the new state if valid, raises InvalidTransitionError otherwise.
        """
        if not cls.can_transition(from_state, to_state):
            raise InvalidTransitionError(from_state, to_state)
        return to_state

    @classmethod
    def toggled(cls, state: InstanceStatus) -> InstanceStatus:
        """Return the state reached by toggling ACTIVE/INACTIVE."""
        target = (
            InstanceStatus.INACTIVE
            if state == InstanceStatus.ACTIVE
            else InstanceStatus.ACTIVE
        )
        return cls.transition(state, target)

    @classmethod
    def is_terminal(cls, state: InstanceStatus) -> bool:
        """Check if a state is terminal (no further transitions possible)."""
        return state in cls.TERMINAL_STATES
