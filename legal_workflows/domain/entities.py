"""
Domain entities for workflow automation.

These are the core domain objects: workflow definitions (immutable
templates), activated workflow instances, the domain events they react to,
and the results they produce. They are independent of any transport or
persistence mechanism.
"""

import copy
import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple
from uuid import uuid4

from .enums import ActionType, ConditionOperator, ErrorKind, InstanceStatus, TriggerType
from .errors import ValidationError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _coerce(enum_cls, value):
    """Convert a raw value to enum_cls, leaving unknown values untouched."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except (TypeError, ValueError):
        return value


def _object(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError([f"{what} must be an object"])
    return data


def _list(data: Any, what: str) -> list:
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValidationError([f"{what} must be a list"])
    return data


def _parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if not isinstance(value, str):
        raise ValidationError([f"occurred_at must be an ISO-8601 string, got {value!r}"])
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError([f"occurred_at is not an ISO-8601 timestamp: {value!r}"])
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Condition:
    """
    A single field/operator/value clause.

    The field is resolved against the event's entity snapshot, falling back
    to the event context. A plain-string operator is converted to its
    ConditionOperator.
    """
    field: str
    operator: ConditionOperator
    value: Any = None

    def __post_init__(self):
        object.__setattr__(self, "operator", _coerce(ConditionOperator, self.operator))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Condition":
        data = _object(data, "Condition")
        condition = cls(field=data.get("field") or "", operator=data.get("operator"), value=data.get("value"))
        if not isinstance(condition.operator, ConditionOperator):
            raise ValidationError([f"Unknown condition operator: {condition.operator!r}"])
        return condition

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "operator": self.operator.value, "value": self.value}


@dataclass(frozen=True)
class Trigger:
    """
    The event type plus the conditions that must all hold.

    An empty condition list matches every event of the given type.
    """
    type: TriggerType
    conditions: Tuple[Condition, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "type", _coerce(TriggerType, self.type))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Trigger":
        trigger_type = data.get("type")
        if not trigger_type:
            raise ValidationError(["Trigger type is required"])
        trigger_type = _coerce(TriggerType, trigger_type)
        if not isinstance(trigger_type, TriggerType):
            raise ValidationError([f"Unknown trigger type: {trigger_type!r}"])
        conditions = tuple(
            Condition.from_dict(c) for c in _list(data.get("conditions"), "Trigger conditions")
        )
        return cls(type=trigger_type, conditions=conditions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "conditions": [c.to_dict() for c in self.conditions],
        }


@dataclass(frozen=True)
class Action:
    """
    One side-effecting step of a workflow.

    The type is kept as a plain string so that action types without a
    registered handler can still be loaded; they fail at dispatch time.
    """
    type: str
    parameters: Dict[str, Any] = field(default_factory=dict)
    timeout_seconds: Optional[float] = None  # Overrides the dispatcher default

    @property
    def action_type(self) -> Optional[ActionType]:
        """The known ActionType for this action, or None."""
        if not isinstance(self.type, str):
            return None
        return ActionType.resolve(self.type)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Action":
        data = _object(data, "Action")
        action_type = data.get("type") or ""
        if isinstance(action_type, ActionType):
            action_type = action_type.value
        return cls(
            type=action_type,
            parameters=dict(_object(data.get("parameters") or {}, "Action parameters")),
            timeout_seconds=data.get("timeout_seconds"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {"type": self.type, "parameters": copy.deepcopy(self.parameters)}
        if self.timeout_seconds is not None:
            data["timeout_seconds"] = self.timeout_seconds
        return data


@dataclass(frozen=True)
class WorkflowDefinition:
    """
    An immutable workflow template.

    Pairs one trigger with an ordered list of actions. Instances are
    created from definitions by the WorkflowRegistry.
    """
    id: str
    name: str
    description: str
    trigger: Trigger
    actions: Tuple[Action, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkflowDefinition":
        """
        Build a definition from a JSON-style payload.

        Raises ValidationError when the payload cannot be parsed. Semantic
        checks, including field types, are performed by validate_definition().
        """
        data = _object(data, "Workflow definition")
        definition_id = data.get("id")
        trigger_data = data.get("trigger")
        if not isinstance(trigger_data, dict):
            raise ValidationError(["Trigger is required"], definition_id=definition_id)
        try:
            trigger = Trigger.from_dict(trigger_data)
            actions = tuple(Action.from_dict(a) for a in _list(data.get("actions"), "Actions"))
        except ValidationError as e:
            raise ValidationError(e.problems, definition_id=definition_id)
        return cls(
            id=definition_id or "",
            name=data.get("name") or "",
            description=data.get("description") or "",
            trigger=trigger,
            actions=actions,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "trigger": self.trigger.to_dict(),
            "actions": [a.to_dict() for a in self.actions],
        }


@dataclass
class WorkflowInstance:
    """
    An activated copy of a workflow definition.

    Carries the mutable runtime fields. Instances are owned by the
    WorkflowRegistry; everything outside it only sees snapshots.
    """
    id: str
    definition: WorkflowDefinition
    status: InstanceStatus = InstanceStatus.ACTIVE
    execution_count: int = 0
    created_at: datetime = field(default_factory=_utcnow)
    last_executed_at: Optional[datetime] = None

    @classmethod
    def create(cls, definition: WorkflowDefinition) -> "WorkflowInstance":
        """Factory method to create a new active instance from a template."""
        return cls(
            id=str(uuid4()),
            definition=copy.deepcopy(definition),
            status=InstanceStatus.ACTIVE,
            execution_count=0,
            created_at=_utcnow(),
        )

    @property
    def active(self) -> bool:
        return self.status == InstanceStatus.ACTIVE

    @property
    def template_id(self) -> str:
        return self.definition.id

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def trigger(self) -> Trigger:
        return self.definition.trigger

    @property
    def actions(self) -> Tuple[Action, ...]:
        return self.definition.actions

    def record_execution(self) -> None:
        """Count one matched event."""
        self.execution_count += 1
        self.last_executed_at = _utcnow()


@dataclass(frozen=True)
class DomainEvent:
    """
    An immutable notification that something happened to an entity.

    entity is a snapshot of the subject record at event time; context holds
    auxiliary values such as the current user or computed days remaining.
    """
    type: TriggerType
    entity: Mapping[str, Any] = field(default_factory=dict)
    context: Mapping[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        object.__setattr__(self, "entity", MappingProxyType(dict(self.entity)))
        object.__setattr__(self, "context", MappingProxyType(dict(self.context)))

    def copy(self) -> "DomainEvent":
        """Same event with its own deep copies of entity and context."""
        return dataclasses.replace(
            self,
            entity=copy.deepcopy(dict(self.entity)),
            context=copy.deepcopy(dict(self.context)),
        )

    def condition_data(self) -> Dict[str, Any]:
        """Entity merged over context; entity keys win on collision."""
        data = dict(self.context)
        data.update(self.entity)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DomainEvent":
        data = _object(data, "Event")
        event_type = _coerce(TriggerType, data.get("type"))
        if not isinstance(event_type, TriggerType):
            raise ValidationError([f"Unknown event type: {event_type!r}"])
        entity = data.get("entity") or {}
        context = data.get("context") or {}
        if not isinstance(entity, dict) or not isinstance(context, dict):
            raise ValidationError(["Event entity and context must be objects"])
        kwargs: Dict[str, Any] = {"type": event_type, "entity": entity, "context": context}

        event_id = data.get("id")
        if event_id:
            if isinstance(event_id, bool) or not isinstance(event_id, (str, int)):
                raise ValidationError([f"Event id must be a string, got {event_id!r}"])
            kwargs["id"] = str(event_id)

        occurred_at = data.get("occurred_at")
        if occurred_at:
            kwargs["occurred_at"] = _parse_timestamp(occurred_at)
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "entity": dict(self.entity),
            "context": dict(self.context),
            "occurred_at": self.occurred_at.isoformat(),
        }


@dataclass(frozen=True)
class ActionResult:
    """Outcome of one action within one workflow run."""
    action_type: str
    success: bool
    error: Optional[ErrorKind] = None
    message: Optional[str] = None
    timed_out: bool = False


@dataclass(frozen=True)
class ExecutionResult:
    """
    Record of one workflow's response to one event.

    error, error_detail and failed_condition are only set when a condition
    could not be evaluated.
    """
    workflow_id: str
    matched: bool
    success: bool
    results: Tuple[ActionResult, ...] = ()
    error: Optional[ErrorKind] = None
    error_detail: Optional[str] = None
    failed_condition: Optional[Condition] = None
    executed_at: datetime = field(default_factory=_utcnow)

    @property
    def failed_actions(self) -> List[ActionResult]:
        return [r for r in self.results if not r.success]
