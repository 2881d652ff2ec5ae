# Worker layer
from .queue import EventQueue, QueueMessage
from .worker import EventWorker, build_registry, run_worker

__all__ = [
    "EventQueue",
    "QueueMessage",
    "EventWorker",
    "build_registry",
    "run_worker",
]
