"""
Error taxonomy for the workflow automation engine.

Condition and lookup errors propagate to the caller. Action errors are
recorded on ActionResult entries and never escape the dispatcher.
"""

from typing import Any, List, Optional


class WorkflowEngineError(Exception):
    """Base exception for workflow engine errors."""
    pass


class ConditionEvaluationError(WorkflowEngineError):
    """Raised when a condition cannot be evaluated (e.g. string > number)."""

    def __init__(self, condition: Any, message: str):
        self.condition = condition
        super().__init__(message)


class UnknownActionTypeError(WorkflowEngineError):
    """Raised when an action references a type with no registered handler."""

    def __init__(self, action_type: str):
        self.action_type = action_type
        super().__init__(f"No handler registered for action type: {action_type}")


class ActionExecutionError(WorkflowEngineError):
    """Raised when a registered handler fails or exceeds its time budget."""

    def __init__(self, action_type: str, message: str, timed_out: bool = False):
        self.action_type = action_type
        self.timed_out = timed_out
        super().__init__(f"Action '{action_type}' failed: {message}")


class NotFoundError(WorkflowEngineError):
    """Raised when a workflow instance or template is not found."""
    pass


class ValidationError(WorkflowEngineError):
    """Raised when a workflow definition is malformed."""

    def __init__(self, problems: List[str], definition_id: Optional[str] = None):
        self.problems = list(problems)
        self.definition_id = definition_id
        prefix = f"Invalid workflow '{definition_id}'" if definition_id else "Invalid workflow"
        super().__init__(f"{prefix}: {'; '.join(self.problems)}")
