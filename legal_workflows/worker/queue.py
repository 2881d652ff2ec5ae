"""
Redis-backed delivery of domain events to the workflow worker.

Keys under the queue name:
- <name>                 pending messages, oldest on the right
- <name>:processing      messages claimed by a worker
- <name>:lease:<msg id>  present while a claim is held; expires on its own
- <name>:delayed         messages scored by the time they become pending
- <name>:dlq             dead-lettered messages
- <name>:seen:<event id> duplicate guard for published events
"""

import dataclasses
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional
from uuid import uuid4

import redis

from legal_workflows.config import get_config
from legal_workflows.domain import DomainEvent

logger = logging.getLogger(__name__)

SEEN_TTL_SECONDS = 24 * 60 * 60


@dataclass
class QueueMessage:
    """A serialized domain event plus its delivery bookkeeping."""
    id: str
    event: Dict[str, Any]  # DomainEvent.to_dict() payload
    enqueued_at: float
    attempt: int = 1
    dead_letter_reason: Optional[str] = None

    @classmethod
    def create(cls, event: DomainEvent) -> "QueueMessage":
        return cls(id=str(uuid4()), event=event.to_dict(), enqueued_at=time.time())

    @classmethod
    def from_json(cls, raw: str) -> "QueueMessage":
        return cls(**json.loads(raw))

    def to_json(self) -> str:
        return json.dumps(dataclasses.asdict(self), default=str)

    def to_event(self) -> DomainEvent:
        """Rebuild the carried event; raises ValidationError if it is malformed."""
        return DomainEvent.from_dict(self.event)

    def next_attempt(self) -> "QueueMessage":
        return dataclasses.replace(self, attempt=self.attempt + 1)


class EventQueue:
    """
    At-least-once event queue for a single worker.

    A claimed message stays in the processing list until the worker
    completes, retries or dead-letters it. If the worker dies first, its
    lease expires and requeue_expired() puts the message back.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        queue_name: Optional[str] = None,
        client: Optional[redis.Redis] = None,
        lease_seconds: Optional[int] = None,
    ):
        config = get_config()
        self.redis_url = redis_url or config.REDIS_URL
        self.queue_name = queue_name or config.QUEUE_NAME
        self.lease_seconds = lease_seconds or config.QUEUE_PROCESSING_TIMEOUT

        self.pending_key = self.queue_name
        self.processing_key = f"{self.queue_name}:processing"
        self.delayed_key = f"{self.queue_name}:delayed"
        self.dead_letter_key = f"{self.queue_name}:dlq"

        self._redis: Optional[redis.Redis] = client

    @property
    def redis(self) -> redis.Redis:
        if self._redis is None:
            self._redis = redis.from_url(self.redis_url, decode_responses=True)
        return self._redis

    def _lease_key(self, message: QueueMessage) -> str:
        return f"{self.queue_name}:lease:{message.id}"

    # ============================================
    # PRODUCER
    # ============================================

    def publish(
        self,
        event: DomainEvent,
        delay_seconds: int = 0,
        deduplicate: bool = True,
    ) -> Optional[QueueMessage]:
        """
        Queue an event for the worker.

        Returns the queued message, or None when an event with the same id
        was already published within the last 24 hours.
        """
        message = QueueMessage.create(event)

        if deduplicate:
            seen_key = f"{self.queue_name}:seen:{event.id}"
            if not self.redis.set(seen_key, message.id, nx=True, ex=SEEN_TTL_SECONDS):
                logger.info(f"Duplicate event {event.id} not queued")
                return None

        if delay_seconds > 0:
            self.redis.zadd(self.delayed_key, {message.to_json(): time.time() + delay_seconds})
            logger.info(f"Event {event.id} queued as {message.id}, due in {delay_seconds}s")
        else:
            self.redis.lpush(self.pending_key, message.to_json())
            logger.info(f"Event {event.id} ({event.type.value}) queued as {message.id}")
        return message

    # ============================================
    # CONSUMER
    # ============================================

    def claim(self, timeout: int = 5) -> Optional[QueueMessage]:
        """Take the oldest pending message, waiting up to timeout seconds."""
        self._release_due_messages()

        raw = self.redis.brpoplpush(self.pending_key, self.processing_key, timeout=timeout)
        if not raw:
            return None

        message = QueueMessage.from_json(raw)
        self.redis.set(self._lease_key(message), "1", ex=self.lease_seconds)
        logger.debug(f"Claimed message {message.id} (attempt {message.attempt})")
        return message

    def complete(self, message: QueueMessage) -> None:
        """Drop a message that was handled."""
        self._release(message)

    def retry(self, message: QueueMessage) -> QueueMessage:
        """Put a claimed message back at the end of the queue."""
        self._release(message)
        retried = message.next_attempt()
        self.redis.lpush(self.pending_key, retried.to_json())
        logger.info(f"Message {message.id} requeued for attempt {retried.attempt}")
        return retried

    def dead_letter(self, message: QueueMessage, reason: str) -> None:
        """Move a claimed message to the dead letter list."""
        self._release(message)
        dead = dataclasses.replace(message, dead_letter_reason=reason)
        self.redis.lpush(self.dead_letter_key, dead.to_json())
        logger.warning(f"Message {message.id} dead-lettered: {reason}")

    def requeue_expired(self, max_attempts: Optional[int] = None) -> int:
        """
        Return messages whose lease expired to the queue.

        Messages that already used max_attempts deliveries are dead-lettered
        instead. Returns how many messages were moved.
        """
        max_attempts = max_attempts or get_config().MAX_RETRIES
        moved = 0

        for raw in self.redis.lrange(self.processing_key, 0, -1):
            message = QueueMessage.from_json(raw)
            if self.redis.exists(self._lease_key(message)):
                continue

            if message.attempt >= max_attempts:
                self.dead_letter(message, "lease_expired")
            else:
                self.retry(message)
            moved += 1

        return moved

    def _release(self, message: QueueMessage) -> None:
        # Matched by id: the stored JSON may differ from the caller's copy
        for raw in self.redis.lrange(self.processing_key, 0, -1):
            if QueueMessage.from_json(raw).id == message.id:
                self.redis.lrem(self.processing_key, 1, raw)
                break
        self.redis.delete(self._lease_key(message))

    def _release_due_messages(self) -> int:
        due = self.redis.zrangebyscore(self.delayed_key, 0, time.time())
        if not due:
            return 0

        pipe = self.redis.pipeline()
        for raw in due:
            pipe.zrem(self.delayed_key, raw)
            pipe.lpush(self.pending_key, raw)
        pipe.execute()
        return len(due)

    # ============================================
    # INSPECTION
    # ============================================

    def depth(self) -> Dict[str, int]:
        """Message counts per list."""
        return {
            "pending": self.redis.llen(self.pending_key),
            "processing": self.redis.llen(self.processing_key),
            "delayed": self.redis.zcard(self.delayed_key),
            "dead_letter": self.redis.llen(self.dead_letter_key),
        }

    def ping(self) -> bool:
        """Whether Redis answers."""
        try:
            return bool(self.redis.ping())
        except redis.RedisError as e:
            logger.error(f"Redis ping failed: {e}")
            return False
