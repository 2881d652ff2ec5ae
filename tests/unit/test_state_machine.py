"""
Unit tests for the instance state machine.
"""

import pytest

from legal_workflows.domain.enums import InstanceStatus
from legal_workflows.domain.state_machine import (
    InstanceStateMachine, InvalidTransitionError
)


class TestInstanceStateMachine:
    """Tests for InstanceStateMachine."""

    def test_valid_transition_active_to_inactive(self):
        """Test ACTIVE → INACTIVE transition."""
        result = InstanceStateMachine.transition(
            InstanceStatus.ACTIVE,
            InstanceStatus.INACTIVE,
        )
        assert result == InstanceStatus.INACTIVE

    def test_valid_transition_inactive_to_active(self):
        """Test INACTIVE → ACTIVE transition."""
        result = InstanceStateMachine.transition(
            InstanceStatus.INACTIVE,
            InstanceStatus.ACTIVE,
        )
        assert result == InstanceStatus.ACTIVE

    @pytest.mark.parametrize("state", [InstanceStatus.ACTIVE, InstanceStatus.INACTIVE])
    def test_any_live_state_can_be_removed(self, state):
        assert InstanceStateMachine.can_transition(state, InstanceStatus.REMOVED)

    @pytest.mark.parametrize("target", list(InstanceStatus))
    def test_removed_is_terminal(self, target):
        """Test that nothing leaves REMOVED."""
        with pytest.raises(InvalidTransitionError) as exc_info:
            InstanceStateMachine.transition(InstanceStatus.REMOVED, target)

        assert exc_info.value.from_state == InstanceStatus.REMOVED
        assert InstanceStateMachine.is_terminal(InstanceStatus.REMOVED)

    def test_same_state_is_not_a_transition(self):
        assert not InstanceStateMachine.can_transition(
            InstanceStatus.ACTIVE, InstanceStatus.ACTIVE
        )

    def test_toggled(self):
        assert InstanceStateMachine.toggled(InstanceStatus.ACTIVE) == InstanceStatus.INACTIVE
        assert InstanceStateMachine.toggled(InstanceStatus.INACTIVE) == InstanceStatus.ACTIVE

    def test_toggle_removed_raises(self):
        with pytest.raises(InvalidTransitionError):
            InstanceStateMachine.toggled(InstanceStatus.REMOVED)

    def test_live_states_are_not_terminal(self):
        assert not InstanceStateMachine.is_terminal(InstanceStatus.ACTIVE)
        assert not InstanceStateMachine.is_terminal(InstanceStatus.INACTIVE)
