"""
Unit tests for action handlers.
"""

import logging

import pytest

from legal_workflows.domain import ActionType, DomainEvent, TriggerType
from legal_workflows.services.action_handlers import (
    ActionHandlerRegistry,
    FunctionActionHandler,
    LoggingActionHandler,
    create_default_registry,
    create_handler_registry,
    render_template,
)


class TestActionHandlerRegistry:
    """Tests for ActionHandlerRegistry."""

    def test_register_handler(self):
        """Test registering a handler."""
        registry = ActionHandlerRegistry()
        handler = LoggingActionHandler(ActionType.ADD_TAG)

        registry.register(handler)

        assert registry.get_handler("adicionar_tag") is handler

    def test_get_unregistered_handler(self):
        """Test getting an unregistered handler returns None."""
        registry = ActionHandlerRegistry()

        assert registry.get_handler("enviar_sms") is None

    def test_default_registry_covers_every_action_type(self):
        registry = create_default_registry()

        assert set(registry.list_action_types()) == {t.value for t in ActionType}

    def test_register_function(self):
        registry = ActionHandlerRegistry()

        registry.register_function(ActionType.SEND_EMAIL, lambda parameters, event: None)

        assert registry.list_action_types() == ["enviar_email"]


class TestCreateHandlerRegistry:
    """Tests for building a registry from host capabilities."""

    def test_partial_capabilities(self):
        """Test that omitted capabilities stay unregistered."""
        async def send_email(parameters, event):
            pass

        registry = create_handler_registry(send_email=send_email, add_tag=None)

        assert registry.list_action_types() == ["enviar_email"]

    def test_unknown_capability_rejected(self):
        with pytest.raises(TypeError, match="send_sms"):
            create_handler_registry(send_sms=lambda p, e: None)


class TestFunctionActionHandler:
    """Tests for FunctionActionHandler."""

    async def test_awaits_coroutine_function(self):
        calls = []

        async def add_tag(parameters, event):
            calls.append(parameters["tag"])

        handler = FunctionActionHandler(ActionType.ADD_TAG, add_tag)
        await handler.execute({"tag": "URGENTE"}, DomainEvent(type=TriggerType.PROCESS_CREATED))

        assert handler.action_type == "adicionar_tag"
        assert calls == ["URGENTE"]

    async def test_accepts_plain_function(self):
        calls = []
        handler = FunctionActionHandler("alterar_status", lambda p, e: calls.append(p["status"]))

        await handler.execute({"status": "suspenso"}, DomainEvent(type=TriggerType.STATUS_CHANGED))

        assert calls == ["suspenso"]

    async def test_propagates_errors(self):
        async def fail(parameters, event):
            raise ConnectionError("smtp down")

        handler = FunctionActionHandler(ActionType.SEND_EMAIL, fail)

        with pytest.raises(ConnectionError):
            await handler.execute({}, DomainEvent(type=TriggerType.PROCESS_CREATED))


class TestRenderTemplate:
    """Tests for placeholder rendering."""

    def test_substitutes_known_placeholders(self):
        assert render_template("Prazo em {dias_restantes} dias", {"dias_restantes": 3}) == "Prazo em 3 dias"

    def test_keeps_unknown_placeholders(self):
        assert render_template("Audiência às {hora}", {}) == "Audiência às {hora}"

    def test_malformed_template_returned_as_is(self):
        assert render_template("Chave {aberta", {"aberta": 1}) == "Chave {aberta"


class TestLoggingActionHandler:
    """Tests for LoggingActionHandler."""

    def test_render_uses_event_data(self):
        handler = LoggingActionHandler(ActionType.CREATE_ALERT)
        event = DomainEvent(
            type=TriggerType.DEADLINE_APPROACHING,
            entity={"numero_processo": "0001"},
            context={"dias_restantes": 2},
        )

        rendered = handler.render(
            {"tipo": "prazo_urgente", "mensagem": "Prazo em {dias_restantes} dias ({numero_processo})"},
            event,
        )

        assert rendered == {"tipo": "prazo_urgente", "mensagem": "Prazo em 2 dias (0001)"}

    async def test_execute_logs(self, caplog):
        handler = LoggingActionHandler(ActionType.ADD_TAG)
        event = DomainEvent(type=TriggerType.PROCESS_CREATED)

        with caplog.at_level(logging.INFO, logger="legal_workflows.services.action_handlers"):
            await handler.execute({"tag": "URGENTE"}, event)

        assert "adicionar_tag" in caplog.text
        assert "URGENTE" in caplog.text
