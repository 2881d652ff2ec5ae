"""
Validation of workflow definitions.

A definition is checked before it becomes a runnable instance, so a
partially valid workflow never enters the registry. Parameter requirements
are declared per action type; action types without a declaration are let
through and fail at dispatch with UnknownActionTypeError.
"""

from numbers import Real
from typing import Any, Callable, Dict, FrozenSet, List

from .entities import Action, WorkflowDefinition
from .enums import ActionType, ConditionOperator, TriggerType
from .errors import ValidationError


ASSIGNMENT_METHODS: FrozenSet[str] = frozenset({"round_robin", "menor_carga", "especifico"})

# Required parameters for each known action type
REQUIRED_PARAMETERS: Dict[ActionType, FrozenSet[str]] = {
    ActionType.ASSIGN_OWNER: frozenset({"metodo"}),
    ActionType.SEND_NOTIFICATION: frozenset({"destinatario", "mensagem"}),
    ActionType.SEND_EMAIL: frozenset({"destinatario", "assunto"}),
    ActionType.CREATE_ALERT: frozenset({"tipo", "mensagem"}),
    ActionType.ADD_TAG: frozenset({"tag"}),
    ActionType.ADD_COMMENT: frozenset({"texto"}),
    ActionType.CHANGE_STATUS: frozenset({"status"}),
}


def _check_assignment(parameters: Dict[str, Any]) -> List[str]:
    method = parameters.get("metodo")
    if not isinstance(method, str) or method not in ASSIGNMENT_METHODS:
        return [f"Unknown assignment method: {method!r}"]
    if method == "especifico" and not parameters.get("usuario_id"):
        return ["Assignment method 'especifico' requires 'usuario_id'"]
    return []


# Extra checks beyond presence of required parameters
PARAMETER_CHECKS: Dict[ActionType, Callable[[Dict[str, Any]], List[str]]] = {
    ActionType.ASSIGN_OWNER: _check_assignment,
}


def _blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def validate_action(action: Action, position: int) -> List[str]:
    """Return the problems found in one action (empty if valid)."""
    if _blank(action.type):
        return [f"Action {position}: type is required"]

    problems = []
    timeout = action.timeout_seconds
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, Real):
            problems.append(f"Action {position}: timeout_seconds must be a number")
        elif timeout <= 0:
            problems.append(f"Action {position}: timeout_seconds must be positive")
    if not isinstance(action.parameters, dict):
        problems.append(f"Action {position}: parameters must be an object")
        return problems

    action_type = action.action_type
    if action_type is None:
        return problems

    missing = sorted(
        name for name in REQUIRED_PARAMETERS[action_type]
        if action.parameters.get(name) in (None, "")
    )
    if missing:
        problems.append(
            f"Action {position} ({action_type.value}): missing parameters {', '.join(missing)}"
        )
        return problems

    check = PARAMETER_CHECKS.get(action_type)
    if check:
        problems.extend(f"Action {position}: {p}" for p in check(action.parameters))
    return problems


def validate_definition(definition: WorkflowDefinition) -> None:
    """
    Validate a workflow definition.

    Raises:
        ValidationError: listing every problem found
    """
    problems: List[str] = []

    if _blank(definition.id):
        problems.append("Workflow id is required")
    if _blank(definition.name):
        problems.append("Workflow name is required")
    if not isinstance(definition.description, str):
        problems.append("Workflow description must be a string")

    trigger = definition.trigger
    if trigger is None or not isinstance(trigger.type, TriggerType):
        problems.append("Trigger type is required")
    else:
        for i, condition in enumerate(trigger.conditions):
            if _blank(condition.field):
                problems.append(f"Condition {i}: field is required")
            if not isinstance(condition.operator, ConditionOperator):
                problems.append(f"Condition {i}: unknown operator {condition.operator!r}")

    if not definition.actions:
        problems.append("Workflow must have at least one action")
    for i, action in enumerate(definition.actions):
        problems.extend(validate_action(action, i))

    if problems:
        raise ValidationError(problems, definition_id=definition.id or None)
