# Service layer
from .conditions import evaluate, evaluate_condition
from .trigger_matcher import matches
from .action_handlers import (
    ActionHandler,
    ActionHandlerRegistry,
    FunctionActionHandler,
    LoggingActionHandler,
    create_default_registry,
    create_handler_registry,
)
from .dispatcher import ActionDispatcher
from .aggregator import ExecutionResultAggregator
from .template_catalog import TemplateCatalog
from .registry import WorkflowRegistry

__all__ = [
    "evaluate",
    "evaluate_condition",
    "matches",
    "ActionHandler",
    "ActionHandlerRegistry",
    "FunctionActionHandler",
    "LoggingActionHandler",
    "create_default_registry",
    "create_handler_registry",
    "ActionDispatcher",
    "ExecutionResultAggregator",
    "TemplateCatalog",
    "WorkflowRegistry",
]
