"""
Action handlers for the different workflow action types.

Each handler implements one side-effecting capability (assign owner,
notify, email, ...). The registry maps action types to handlers so the
dispatcher can resolve them without knowing any concrete type.
"""

import asyncio
import inspect
import logging
import string
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from legal_workflows.domain import ActionType, DomainEvent

logger = logging.getLogger(__name__)


# Host capability signature: (parameters, event) -> awaitable
HandlerFunction = Callable[[Dict[str, Any], DomainEvent], Union[Awaitable[None], None]]


class _KeepMissing(dict):
    def __missing__(self, key):
        return "{" + key + "}"


def render_template(text: str, data: Mapping[str, Any]) -> str:
    """
    Substitute {placeholders} in text with values from data.

    Unknown placeholders are left as they are.
    """
    try:
        return string.Formatter().vformat(text, (), _KeepMissing(data))
    except (AttributeError, IndexError, KeyError, ValueError):
        return text


class ActionHandler(ABC):
    """
    Base class for action handlers.

    Each action type (enviar_email, adicionar_tag, etc.) implements
    this interface to provide execution logic.
    """

    @property
    @abstractmethod
    def action_type(self) -> str:
        """Return the action type this handler processes."""
        pass

    @abstractmethod
    async def execute(
        self,
        parameters: Dict[str, Any],
        event: DomainEvent,
    ) -> None:
        """
        Execute the action.

        Args:
            parameters: The action's configured parameters
            event: The domain event that fired the workflow

        Raises:
            Exception: On any failure
        """
        pass


class FunctionActionHandler(ActionHandler):
    """
    Adapts a host-provided callable to the ActionHandler interface.

    The callable may be a coroutine function or a plain function. Plain
    functions run in a worker thread so the dispatcher timeout still applies
    to them; a timed-out thread is abandoned, not interrupted.
    """

    def __init__(self, action_type: Union[ActionType, str], func: HandlerFunction):
        self._action_type = action_type.value if isinstance(action_type, ActionType) else action_type
        self.func = func

    @property
    def action_type(self) -> str:
        return self._action_type

    async def execute(self, parameters: Dict[str, Any], event: DomainEvent) -> None:
        if inspect.iscoroutinefunction(self.func):
            await self.func(parameters, event)
            return

        result = await asyncio.to_thread(self.func, parameters, event)
        if inspect.isawaitable(result):
            await result


class ActionHandlerRegistry:
    """
    Registry for action handlers.

    Allows dynamic registration and lookup of handlers by action type.
    """

    def __init__(self):
        self._handlers: Dict[str, ActionHandler] = {}

    def register(self, handler: ActionHandler) -> None:
        """Register an action handler."""
        self._handlers[handler.action_type] = handler
        logger.info(f"Registered handler for action type: {handler.action_type}")

    def register_function(self, action_type: Union[ActionType, str], func: HandlerFunction) -> None:
        """Register a plain callable as the handler for an action type."""
        self.register(FunctionActionHandler(action_type, func))

    def get_handler(self, action_type: str) -> Optional[ActionHandler]:
        """Get a handler for an action type."""
        return self._handlers.get(action_type)

    def list_action_types(self) -> list:
        """List all registered action types."""
        return list(self._handlers.keys())


# ============================================
# HOST CAPABILITIES
# ============================================

CAPABILITIES: Dict[str, ActionType] = {
    "assign_owner": ActionType.ASSIGN_OWNER,
    "send_notification": ActionType.SEND_NOTIFICATION,
    "send_email": ActionType.SEND_EMAIL,
    "create_alert": ActionType.CREATE_ALERT,
    "add_tag": ActionType.ADD_TAG,
    "add_comment": ActionType.ADD_COMMENT,
    "change_status": ActionType.CHANGE_STATUS,
}


def create_handler_registry(**capabilities: HandlerFunction) -> ActionHandlerRegistry:
    """
    Create a registry from host capability callables.

    Keyword names are the capability names in CAPABILITIES. Capabilities
    that are not supplied are left unregistered; actions of those types
    fail at dispatch time.
    """
    unknown = set(capabilities) - set(CAPABILITIES)
    if unknown:
        raise TypeError(f"Unknown capabilities: {', '.join(sorted(unknown))}")

    registry = ActionHandlerRegistry()
    for name, func in capabilities.items():
        if func is not None:
            registry.register_function(CAPABILITIES[name], func)
    return registry


# ============================================
# BUILT-IN ACTION HANDLERS
# ============================================

class LoggingActionHandler(ActionHandler):
    """
    Handler that records the action in the application log.

    Text parameters are rendered against the event data first, so
    "Prazo em {dias_restantes} dias" becomes "Prazo em 3 dias". Used when no
    delivery transport is wired in.
    """

    def __init__(self, action_type: ActionType, level: str = "info"):
        self._action_type = action_type
        self.level = level

    @property
    def action_type(self) -> str:
        return self._action_type.value

    def render(self, parameters: Dict[str, Any], event: DomainEvent) -> Dict[str, Any]:
        data = event.condition_data()
        return {
            key: render_template(value, data) if isinstance(value, str) else value
            for key, value in parameters.items()
        }

    async def execute(self, parameters: Dict[str, Any], event: DomainEvent) -> None:
        rendered = self.render(parameters, event)
        log_func = getattr(logger, self.level, logger.info)
        log_func(f"[WorkflowAction] {self.action_type} for {event.type.value} event {event.id}: {rendered}")


def create_default_registry() -> ActionHandlerRegistry:
    """Create a registry with a logging handler for every action type."""
    registry = ActionHandlerRegistry()

    for action_type in ActionType:
        registry.register(LoggingActionHandler(action_type))

    return registry
