# Domain models
from .enums import TriggerType, ActionType, ConditionOperator, ErrorKind, InstanceStatus
from .entities import (
    Condition,
    Trigger,
    Action,
    WorkflowDefinition,
    WorkflowInstance,
    DomainEvent,
    ActionResult,
    ExecutionResult,
)
from .errors import (
    WorkflowEngineError,
    ConditionEvaluationError,
    UnknownActionTypeError,
    ActionExecutionError,
    NotFoundError,
    ValidationError,
)
from .state_machine import InstanceStateMachine, InvalidTransitionError
from .validation import validate_definition

__all__ = [
    "TriggerType",
    "ActionType",
    "ConditionOperator",
    "ErrorKind",
    "InstanceStatus",
    "Condition",
    "Trigger",
    "Action",
    "WorkflowDefinition",
    "WorkflowInstance",
    "DomainEvent",
    "ActionResult",
    "ExecutionResult",
    "WorkflowEngineError",
    "ConditionEvaluationError",
    "UnknownActionTypeError",
    "ActionExecutionError",
    "NotFoundError",
    "ValidationError",
    "InstanceStateMachine",
    "InvalidTransitionError",
    "validate_definition",
]
