"""
Unit tests for the execution result aggregator.
"""

from legal_workflows.domain import (
    Action,
    ActionType,
    Condition,
    ConditionOperator,
    ErrorKind,
    Trigger,
    TriggerType,
    WorkflowDefinition,
    WorkflowInstance,
)


def make_instance(conditions=(), actions=None, trigger_type=TriggerType.STATUS_CHANGED):
    actions = actions or (Action(ActionType.ADD_TAG.value, {"tag": "x"}),)
    return WorkflowInstance.create(
        WorkflowDefinition(
            id="tpl",
            name="Template",
            description="",
            trigger=Trigger(type=trigger_type, conditions=tuple(conditions)),
            actions=tuple(actions),
        )
    )


class TestExecutionResultAggregator:
    """Tests for ExecutionResultAggregator.run."""

    async def test_matched_run(self, aggregator, make_event):
        instance = make_instance()

        result = await aggregator.run(instance, make_event(TriggerType.STATUS_CHANGED))

        assert result.workflow_id == instance.id
        assert result.matched is True
        assert result.success is True
        assert len(result.results) == 1
        assert instance.execution_count == 1
        assert instance.last_executed_at is not None

    async def test_unmatched_run_leaves_count(self, aggregator, make_event):
        instance = make_instance()

        result = await aggregator.run(instance, make_event(TriggerType.PROCESS_CREATED))

        assert result.matched is False
        assert result.success is False
        assert result.results == ()
        assert instance.execution_count == 0

    async def test_partial_failure_still_counts(self, aggregator, make_event):
        """Test that a matched run counts once even when an action fails."""
        instance = make_instance(actions=(
            Action("enviar_sms", {}),
            Action(ActionType.ADD_TAG.value, {"tag": "x"}),
        ))

        result = await aggregator.run(instance, make_event(TriggerType.STATUS_CHANGED))

        assert result.matched is True
        assert result.success is False
        assert [r.success for r in result.results] == [False, True]
        assert [r.action_type for r in result.failed_actions] == ["enviar_sms"]
        assert instance.execution_count == 1

    async def test_count_increments_once_per_matched_event(self, aggregator, make_event):
        instance = make_instance()

        for _ in range(3):
            await aggregator.run(instance, make_event(TriggerType.STATUS_CHANGED))
        await aggregator.run(instance, make_event(TriggerType.COMMENT_ADDED))

        assert instance.execution_count == 3

    async def test_condition_error_becomes_failed_result(self, aggregator, host, make_event):
        """Test that a condition error is reported instead of raised."""
        condition = Condition("status", ConditionOperator.GT, 3)
        instance = make_instance(conditions=[condition])

        result = await aggregator.run(
            instance, make_event(TriggerType.STATUS_CHANGED, {"status": "ativo"})
        )

        assert result.matched is False
        assert result.success is False
        assert result.error == ErrorKind.CONDITION_EVALUATION
        assert result.failed_condition == condition
        assert "status" in result.error_detail
        assert instance.execution_count == 0
        assert host.calls == []
