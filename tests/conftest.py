"""
Test configuration and fixtures.

Provides common fixtures for unit and integration tests.
"""

import os
from unittest.mock import patch

import pytest

# Set test environment before importing app modules
os.environ["FLASK_ENV"] = "testing"
os.environ["REDIS_URL"] = "redis://localhost:6379/1"
os.environ["QUEUE_NAME"] = "workflow_events_test"

from legal_workflows.domain import (  # noqa: E402
    Action,
    ActionType,
    Condition,
    ConditionOperator,
    DomainEvent,
    Trigger,
    TriggerType,
    WorkflowDefinition,
)
from legal_workflows.services import (  # noqa: E402
    ActionDispatcher,
    ExecutionResultAggregator,
    WorkflowRegistry,
    create_handler_registry,
)


class RecordingHost:
    """Host capabilities that record every call in order."""

    def __init__(self):
        self.calls = []

    def _recorder(self, name):
        async def handler(parameters, event):
            self.calls.append((name, parameters, event))
        return handler

    def capabilities(self) -> dict:
        return {
            name: self._recorder(name)
            for name in (
                "assign_owner",
                "send_notification",
                "send_email",
                "create_alert",
                "add_tag",
                "add_comment",
                "change_status",
            )
        }

    @property
    def names(self) -> list:
        return [name for name, _, _ in self.calls]


@pytest.fixture
def host():
    """Recording host capability set."""
    return RecordingHost()


@pytest.fixture
def handler_registry(host):
    """Handler registry wired to the recording host."""
    return create_handler_registry(**host.capabilities())


@pytest.fixture
def dispatcher(handler_registry):
    """Dispatcher with a short timeout."""
    return ActionDispatcher(handler_registry, timeout=0.5)


@pytest.fixture
def aggregator(dispatcher):
    return ExecutionResultAggregator(dispatcher)


@pytest.fixture
def registry(aggregator):
    """Workflow registry wired to the recording host."""
    return WorkflowRegistry(aggregator=aggregator)


@pytest.fixture
def make_event():
    """Factory for domain events."""
    def _make(event_type=TriggerType.PROCESS_CREATED, entity=None, context=None):
        return DomainEvent(type=event_type, entity=entity or {}, context=context or {})
    return _make


@pytest.fixture
def sample_definition():
    """A valid custom workflow definition."""
    return WorkflowDefinition(
        id="arquivado-tag",
        name="Arquivado → Tag",
        description="Tag archived processes",
        trigger=Trigger(
            type=TriggerType.STATUS_CHANGED,
            conditions=(Condition("status_novo", ConditionOperator.EQ, "arquivado"),),
        ),
        actions=(
            Action(ActionType.ADD_TAG.value, {"tag": "ARQUIVADO"}),
            Action(ActionType.ADD_COMMENT.value, {"texto": "Arquivado"}),
        ),
    )


@pytest.fixture
def sample_definition_data():
    """Sample workflow definition payload for API tests."""
    return {
        "id": "comentario-notificar",
        "name": "Comentário → Notificar",
        "description": "Notify the team about new comments",
        "trigger": {
            "type": "comentario_adicionado",
            "conditions": [
                {"field": "mencoes", "operator": "contains", "value": "@socio"},
            ],
        },
        "actions": [
            {
                "type": "enviar_notificacao",
                "parameters": {"destinatario": "socios", "mensagem": "Você foi mencionado"},
            },
        ],
    }


# ============================================
# Queue / API Fixtures
# ============================================

@pytest.fixture
def fake_redis():
    """In-memory Redis client for queue tests."""
    import fakeredis
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def event_queue(fake_redis):
    """EventQueue backed by fakeredis."""
    from legal_workflows.worker import EventQueue
    return EventQueue(queue_name="workflow_events_test", client=fake_redis)


@pytest.fixture
def app(registry):
    """Create Flask test application."""
    from legal_workflows.api.app import create_app
    from legal_workflows.config import TestConfig

    app = create_app(TestConfig(), registry=registry)
    app.config["TESTING"] = True
    yield app


@pytest.fixture
def client(app):
    """Create Flask test client."""
    return app.test_client()


@pytest.fixture
def queued_client(app, event_queue):
    """Flask test client whose event queue is backed by fakeredis."""
    with patch("legal_workflows.api.routes.get_queue", return_value=event_queue):
        yield app.test_client()
