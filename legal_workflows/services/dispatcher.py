"""
Action dispatcher - runs a workflow's action chain.

Actions run strictly in declared order, one at a time. Each failure is
recorded on that action's result and the chain continues.
"""

import asyncio
import copy
import logging
from typing import List, Optional, Sequence

from legal_workflows.config import get_config
from legal_workflows.domain import (
    Action,
    ActionExecutionError,
    ActionResult,
    DomainEvent,
    ErrorKind,
    UnknownActionTypeError,
)
from .action_handlers import ActionHandlerRegistry

logger = logging.getLogger(__name__)


class ActionDispatcher:
    """
    Executes ordered action lists against registered handlers.

    Responsibilities:
    - Resolve each action's handler by type
    - Bound each handler call by a timeout
    - Contain every per-action failure in its ActionResult
    """

    def __init__(
        self,
        handler_registry: ActionHandlerRegistry,
        timeout: Optional[float] = None,
    ):
        self.handler_registry = handler_registry
        self.timeout = timeout if timeout is not None else get_config().ACTION_TIMEOUT_SECONDS

    async def dispatch(
        self,
        actions: Sequence[Action],
        event: DomainEvent,
    ) -> List[ActionResult]:
        """
        Execute actions in order.

        Never raises for action failures; the returned results are in the
        same order as the actions.
        """
        results: List[ActionResult] = []
        for position, action in enumerate(actions):
            result = await self._execute_action(action, event)
            if not result.success:
                logger.warning(
                    f"Action {position} '{action.type}' failed for event {event.id}: {result.message}"
                )
            results.append(result)
        return results

    async def _execute_action(self, action: Action, event: DomainEvent) -> ActionResult:
        """Execute a single action and convert its outcome into a result."""
        handler = self.handler_registry.get_handler(action.type)
        if handler is None:
            error = UnknownActionTypeError(action.type)
            return ActionResult(
                action_type=action.type,
                success=False,
                error=ErrorKind.UNKNOWN_ACTION_TYPE,
                message=str(error),
            )

        timeout = action.timeout_seconds or self.timeout
        try:
            await asyncio.wait_for(
                handler.execute(copy.deepcopy(action.parameters), event.copy()),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            error = ActionExecutionError(
                action.type, f"timed out after {timeout}s", timed_out=True
            )
            return self._failed(action, error)
        except asyncio.CancelledError:
            # Only swallow a cancellation the handler raised on its own
            if asyncio.current_task().cancelling():
                raise
            return self._failed(action, ActionExecutionError(action.type, "CancelledError"))
        except Exception as e:
            return self._failed(action, ActionExecutionError(action.type, f"{type(e).__name__}: {e}"))

        logger.debug(f"Action '{action.type}' completed for event {event.id}")
        return ActionResult(action_type=action.type, success=True)

    @staticmethod
    def _failed(action: Action, error: ActionExecutionError) -> ActionResult:
        return ActionResult(
            action_type=action.type,
            success=False,
            error=ErrorKind.ACTION_EXECUTION,
            message=str(error),
            timed_out=error.timed_out,
        )
