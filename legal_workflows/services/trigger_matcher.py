"""
Trigger matching.

Decides whether a domain event fires a workflow's trigger.
"""

from legal_workflows.domain import DomainEvent, Trigger
from .conditions import evaluate


def matches(trigger: Trigger, event: DomainEvent) -> bool:
    """
    Check whether an event matches a trigger.

    Events of a different type never match, and their conditions are not
    evaluated. Otherwise the trigger's conditions are evaluated against the
    event entity merged over the event context (entity keys win).

    Raises:
        ConditionEvaluationError: If a condition cannot be evaluated
    """
    if trigger.type != event.type:
        return False
    return evaluate(trigger.conditions, event.condition_data())
