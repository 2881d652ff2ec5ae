"""
Domain enums for workflow automation.

These enums define the trigger types, action types and condition operators
a workflow definition may reference, plus the lifecycle states of an
activated workflow instance. Values are the wire identifiers used by the
practice-management application.
"""

from enum import Enum


class TriggerType(str, Enum):
    """
    Domain events a workflow can react to.

    - PROCESS_CREATED: A new legal process was registered
    - STATUS_CHANGED: The status of a process changed
    - DEADLINE_APPROACHING: A deadline is close to expiring
    - HEARING_APPROACHING: A court hearing is close
    - COMMENT_ADDED: Someone commented on a process
    """
    PROCESS_CREATED = "processo_criado"
    STATUS_CHANGED = "status_alterado"
    DEADLINE_APPROACHING = "prazo_proximo"
    HEARING_APPROACHING = "audiencia_proxima"
    COMMENT_ADDED = "comentario_adicionado"


class ActionType(str, Enum):
    """
    Side-effecting steps a workflow can execute.

    Each type maps to one host capability (assign_owner, send_notification,
    send_email, create_alert, add_tag, add_comment, change_status).
    """
    ASSIGN_OWNER = "atribuir_usuario"
    SEND_NOTIFICATION = "enviar_notificacao"
    SEND_EMAIL = "enviar_email"
    CREATE_ALERT = "criar_alerta"
    ADD_TAG = "adicionar_tag"
    ADD_COMMENT = "criar_comentario"
    CHANGE_STATUS = "alterar_status"

    @classmethod
    def resolve(cls, value: str):
        """Return the matching member, or None for unregistered types."""
        try:
            return cls(value)
        except ValueError:
            return None


class ConditionOperator(str, Enum):
    """Comparison operators available in trigger conditions."""
    EQ = "=="
    NE = "!="
    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"

    @property
    def is_ordering(self) -> bool:
        return self in (
            ConditionOperator.GT,
            ConditionOperator.GTE,
            ConditionOperator.LT,
            ConditionOperator.LTE,
        )


class ErrorKind(str, Enum):
    """
    Error kinds reported on execution and action results.

    A handler that exceeds its time budget is an ACTION_EXECUTION error
    with ActionResult.timed_out set.
    """
    CONDITION_EVALUATION = "ConditionEvaluationError"
    UNKNOWN_ACTION_TYPE = "UnknownActionTypeError"
    ACTION_EXECUTION = "ActionExecutionError"


class InstanceStatus(str, Enum):
    """
    Lifecycle status of an activated workflow instance.

    State machine transitions:
    ACTIVE ⇄ INACTIVE (toggle)
    ACTIVE/INACTIVE → REMOVED (terminal)
    """
    ACTIVE = "active"
    INACTIVE = "inactive"
    REMOVED = "removed"
