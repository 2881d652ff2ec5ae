"""
Execution result aggregation.

Runs one workflow instance against one event and folds the per-action
outcomes into a single ExecutionResult.
"""

import logging

from legal_workflows.domain import (
    ConditionEvaluationError,
    DomainEvent,
    ErrorKind,
    ExecutionResult,
    WorkflowInstance,
)
from .dispatcher import ActionDispatcher
from .trigger_matcher import matches

logger = logging.getLogger(__name__)


class ExecutionResultAggregator:
    """Matches, dispatches and counts one workflow run."""

    def __init__(self, dispatcher: ActionDispatcher):
        self.dispatcher = dispatcher

    async def run(self, instance: WorkflowInstance, event: DomainEvent) -> ExecutionResult:
        """
        Run an instance against an event.

        The instance's execution count is incremented once when the trigger
        matches, whatever the outcome of its actions. A condition that cannot
        be evaluated produces a failed, unmatched result instead of raising.
        """
        try:
            matched = matches(instance.trigger, event)
        except ConditionEvaluationError as e:
            logger.warning(
                f"Workflow {instance.id} ({instance.name}) condition error on event {event.id}: {e}"
            )
            return ExecutionResult(
                workflow_id=instance.id,
                matched=False,
                success=False,
                error=ErrorKind.CONDITION_EVALUATION,
                error_detail=str(e),
                failed_condition=e.condition,
            )

        if not matched:
            logger.debug(f"Workflow {instance.id} did not match event {event.id}")
            return ExecutionResult(workflow_id=instance.id, matched=False, success=False)

        logger.info(f"Workflow {instance.id} ({instance.name}) matched event {event.id}")
        results = await self.dispatcher.dispatch(instance.actions, event)
        instance.record_execution()

        return ExecutionResult(
            workflow_id=instance.id,
            matched=True,
            success=all(r.success for r in results),
            results=tuple(results),
        )
