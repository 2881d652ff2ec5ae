"""
Background worker for dispatching queued domain events.

Polls the event queue and runs each event through the workflow registry,
one event at a time, so events are never dispatched concurrently.
"""

import asyncio
import logging
import signal
import threading
import time
from typing import List, Optional

from legal_workflows.config import get_config
from legal_workflows.domain import ExecutionResult, ValidationError
from legal_workflows.services import WorkflowRegistry
from .queue import EventQueue, QueueMessage

logger = logging.getLogger(__name__)


class EventWorker:
    """
    Background worker for processing domain events.

    Features:
    - Graceful shutdown on SIGTERM/SIGINT
    - Sequential dispatch (one event in flight at a time)
    - Redelivery of messages that fail unexpectedly, then dead-lettering
    - Requeue of messages whose lease expired
    """

    def __init__(
        self,
        registry: WorkflowRegistry,
        queue: Optional[EventQueue] = None,
    ):
        self.config = get_config()
        self.registry = registry
        self.queue = queue or EventQueue()

        # Worker state
        self._running = False
        self._shutdown_event = threading.Event()
        self._current_message: Optional[QueueMessage] = None
        self._processed = 0

    def start(self) -> None:
        """Start the worker loop."""
        self._running = True
        self._setup_signal_handlers()

        logger.info("Worker started, waiting for events...")

        recovery_thread = threading.Thread(target=self._recovery_loop, daemon=True)
        recovery_thread.start()

        while self._running:
            try:
                self.process_one()
            except Exception as e:
                logger.exception(f"Error in worker loop: {e}")
                time.sleep(1)  # Brief pause on error

        logger.info("Worker stopped")

    def stop(self) -> None:
        """Stop the worker gracefully."""
        logger.info("Stopping worker...")
        self._running = False
        self._shutdown_event.set()

    def _setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""
        def handler(signum, frame):
            logger.info(f"Received signal {signum}, initiating shutdown...")
            self.stop()

        signal.signal(signal.SIGTERM, handler)
        signal.signal(signal.SIGINT, handler)

    def process_one(self, timeout: int = 5) -> bool:
        """
        Process a single event from the queue.

        Returns True if an event was dispatched, False otherwise. Failed
        actions are final and only logged; the message is redelivered only
        when dispatch itself fails.
        """
        message = self.queue.claim(timeout=timeout)

        if not message:
            return False

        self._current_message = message

        try:
            event = message.to_event()
        except ValidationError as e:
            logger.error(f"Message {message.id} carries an invalid event: {e}")
            self.queue.dead_letter(message, "invalid_event")
            self._current_message = None
            return False

        try:
            logger.info(
                f"Processing event {event.id} ({event.type.value}) "
                f"from message {message.id}, attempt {message.attempt}"
            )

            results = asyncio.run(self.registry.handle(event))
            self._report(results)

            self.queue.complete(message)
            self._processed += 1
            return True

        except Exception as e:
            logger.exception(f"Failed to process message {message.id}: {e}")

            if message.attempt >= self.config.MAX_RETRIES:
                self.queue.dead_letter(message, "max_attempts_exceeded")
            else:
                self.queue.retry(message)
            return False

        finally:
            self._current_message = None

    def _report(self, results: List[ExecutionResult]) -> None:
        """Log failed workflow runs and actions."""
        for result in results:
            if result.error:
                logger.warning(
                    f"Workflow {result.workflow_id} failed: {result.error.value}: {result.error_detail}"
                )
            for action in result.failed_actions:
                logger.warning(
                    f"Workflow {result.workflow_id} action {action.action_type} failed: "
                    f"{action.error.value if action.error else 'unknown'}"
                    f"{' (timed out)' if action.timed_out else ''}"
                )

    def _recovery_loop(self) -> None:
        """Periodically requeue messages whose lease expired."""
        recovery_interval = 60  # seconds

        while not self._shutdown_event.wait(recovery_interval):
            try:
                recovered = self.queue.requeue_expired()
                if recovered > 0:
                    logger.info(f"Requeued {recovered} expired messages")
            except Exception as e:
                logger.error(f"Error in recovery loop: {e}")

    @property
    def is_healthy(self) -> bool:
        """Check if the worker is healthy."""
        return self.queue.ping()

    def get_stats(self) -> dict:
        """Get worker statistics."""
        return {
            "running": self._running,
            "processed": self._processed,
            "active_workflows": len(self.registry.active_instances()),
            "queue": self.queue.depth(),
            "current_message": self._current_message.id if self._current_message else None,
        }


def build_registry(config=None) -> WorkflowRegistry:
    """Create a registry with the configured templates activated."""
    config = config or get_config()
    registry = WorkflowRegistry(action_timeout=config.ACTION_TIMEOUT_SECONDS)
    for template_id in config.active_template_ids:
        registry.activate_template(template_id)
    return registry


def run_worker() -> None:
    """Entry point for running the worker."""
    config = get_config()
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format=config.LOG_FORMAT,
    )

    worker = EventWorker(build_registry(config))
    worker.start()


if __name__ == "__main__":
    run_worker()
