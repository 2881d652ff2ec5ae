"""
Workflow registry - the live collection of activated workflows.

The host application constructs one registry and passes it to whatever
layer receives domain events. Instances live only inside the registry;
callers receive deep-copied snapshots.
"""

import copy
import logging
from typing import Dict, List, Optional

from legal_workflows.domain import (
    DomainEvent,
    ExecutionResult,
    InstanceStateMachine,
    InstanceStatus,
    NotFoundError,
    WorkflowDefinition,
    WorkflowInstance,
    validate_definition,
)
from .action_handlers import ActionHandlerRegistry, create_default_registry
from .aggregator import ExecutionResultAggregator
from .dispatcher import ActionDispatcher
from .template_catalog import TemplateCatalog

logger = logging.getLogger(__name__)


class WorkflowRegistry:
    """
    In-memory registry of workflow instances.

    Lifecycle per instance: ACTIVE ⇄ INACTIVE (toggle), then REMOVED
    (terminal). Events are handled by every active instance, one after
    another, in activation order.
    """

    def __init__(
        self,
        aggregator: Optional[ExecutionResultAggregator] = None,
        catalog: Optional[TemplateCatalog] = None,
        handler_registry: Optional[ActionHandlerRegistry] = None,
        action_timeout: Optional[float] = None,
    ):
        if aggregator is None:
            dispatcher = ActionDispatcher(
                handler_registry or create_default_registry(),
                timeout=action_timeout,
            )
            aggregator = ExecutionResultAggregator(dispatcher)
        self.aggregator = aggregator
        self.catalog = catalog or TemplateCatalog()
        self._instances: Dict[str, WorkflowInstance] = {}

    def activate(self, template: WorkflowDefinition) -> WorkflowInstance:
        """
        Create an active instance from a template.

        Raises:
            ValidationError: If the template is malformed
        """
        validate_definition(template)
        instance = WorkflowInstance.create(template)
        self._instances[instance.id] = instance
        logger.info(f"Activated workflow {instance.id} from template '{template.id}'")
        return self._snapshot(instance)

    def activate_template(self, template_id: str) -> WorkflowInstance:
        """Activate a template from the catalog by id."""
        return self.activate(self.catalog.get_template(template_id))

    def toggle(self, instance_id: str) -> WorkflowInstance:
        """Flip an instance between active and inactive."""
        instance = self._get(instance_id)
        instance.status = InstanceStateMachine.toggled(instance.status)
        logger.info(f"Workflow {instance_id} is now {instance.status.value}")
        return self._snapshot(instance)

    def remove(self, instance_id: str) -> None:
        """Delete an instance permanently."""
        instance = self._get(instance_id)
        instance.status = InstanceStateMachine.transition(
            instance.status, InstanceStatus.REMOVED
        )
        del self._instances[instance_id]
        logger.info(f"Removed workflow {instance_id}")

    def get(self, instance_id: str) -> WorkflowInstance:
        """Get a snapshot of one instance."""
        return self._snapshot(self._get(instance_id))

    def list_instances(self) -> List[WorkflowInstance]:
        """Snapshots of all instances, active or not."""
        return [self._snapshot(i) for i in self._instances.values()]

    def active_instances(self) -> List[WorkflowInstance]:
        """Snapshots of the currently active instances."""
        return [self._snapshot(i) for i in self._instances.values() if i.active]

    async def handle(self, event: DomainEvent) -> List[ExecutionResult]:
        """
        Run every active instance against an event.

        Returns one result per active instance, including unmatched ones.
        """
        results = []
        for instance in [i for i in self._instances.values() if i.active]:
            results.append(await self.aggregator.run(instance, event))

        matched = sum(1 for r in results if r.matched)
        logger.info(
            f"Event {event.id} ({event.type.value}) handled by {len(results)} workflows, "
            f"{matched} matched"
        )
        return results

    def __len__(self) -> int:
        return len(self._instances)

    def _get(self, instance_id: str) -> WorkflowInstance:
        instance = self._instances.get(instance_id)
        if instance is None:
            raise NotFoundError(f"Workflow instance {instance_id} not found")
        return instance

    @staticmethod
    def _snapshot(instance: WorkflowInstance) -> WorkflowInstance:
        return copy.deepcopy(instance)
