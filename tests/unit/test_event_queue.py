"""
Unit tests for the Redis event queue.
"""

import json

from legal_workflows.domain import DomainEvent, TriggerType
from legal_workflows.worker import QueueMessage


def status_event(**entity):
    return DomainEvent(type=TriggerType.STATUS_CHANGED, entity=entity)


class TestQueueMessage:
    """Tests for QueueMessage serialization."""

    def test_json_round_trip(self):
        event = status_event(status_novo="arquivado")
        message = QueueMessage.create(event)

        restored = QueueMessage.from_json(message.to_json())

        assert restored == message
        assert restored.to_event().id == event.id
        assert dict(restored.to_event().entity) == {"status_novo": "arquivado"}

    def test_next_attempt(self):
        message = QueueMessage.create(status_event())

        retried = message.next_attempt()

        assert retried.id == message.id
        assert retried.attempt == 2
        assert message.attempt == 1


class TestEventQueue:
    """Tests for EventQueue against fakeredis."""

    def test_publish_and_claim(self, event_queue):
        event = status_event(status_novo="arquivado")

        published = event_queue.publish(event)
        message = event_queue.claim(timeout=1)

        assert message.id == published.id
        assert message.to_event().id == event.id
        assert event_queue.depth()["pending"] == 0
        assert event_queue.depth()["processing"] == 1
        assert event_queue.redis.exists(event_queue._lease_key(message))

    def test_claim_empty_queue(self, event_queue):
        assert event_queue.claim(timeout=1) is None

    def test_fifo_order(self, event_queue):
        first = status_event(n=1)
        second = status_event(n=2)
        event_queue.publish(first)
        event_queue.publish(second)

        assert event_queue.claim(timeout=1).to_event().id == first.id
        assert event_queue.claim(timeout=1).to_event().id == second.id

    def test_duplicate_event_not_queued(self, event_queue):
        event = status_event()

        assert event_queue.publish(event) is not None
        assert event_queue.publish(event) is None
        assert event_queue.depth()["pending"] == 1

    def test_duplicate_allowed_without_dedup(self, event_queue):
        event = status_event()

        event_queue.publish(event)
        event_queue.publish(event, deduplicate=False)

        assert event_queue.depth()["pending"] == 2

    def test_complete(self, event_queue):
        event_queue.publish(status_event())
        message = event_queue.claim(timeout=1)

        event_queue.complete(message)

        assert event_queue.depth()["processing"] == 0
        assert not event_queue.redis.exists(event_queue._lease_key(message))

    def test_retry_requeues_with_next_attempt(self, event_queue):
        event_queue.publish(status_event())
        message = event_queue.claim(timeout=1)

        event_queue.retry(message)
        redelivered = event_queue.claim(timeout=1)

        assert redelivered.id == message.id
        assert redelivered.attempt == 2

    def test_dead_letter(self, event_queue):
        event_queue.publish(status_event())
        message = event_queue.claim(timeout=1)

        event_queue.dead_letter(message, "invalid_event")

        assert event_queue.depth() == {"pending": 0, "processing": 0, "delayed": 0, "dead_letter": 1}
        dead = json.loads(event_queue.redis.lindex(event_queue.dead_letter_key, 0))
        assert dead["dead_letter_reason"] == "invalid_event"

    def test_delayed_message_not_claimable_yet(self, event_queue):
        event_queue.publish(status_event(), delay_seconds=60)

        assert event_queue.depth()["pending"] == 0
        assert event_queue.depth()["delayed"] == 1

    def test_due_delayed_message_is_claimed(self, event_queue):
        message = QueueMessage.create(status_event())
        event_queue.redis.zadd(event_queue.delayed_key, {message.to_json(): 0})

        claimed = event_queue.claim(timeout=1)

        assert claimed.id == message.id
        assert event_queue.depth()["delayed"] == 0

    def test_expired_lease_is_requeued(self, event_queue):
        event_queue.publish(status_event())
        message = event_queue.claim(timeout=1)
        event_queue.redis.delete(event_queue._lease_key(message))

        assert event_queue.requeue_expired(max_attempts=3) == 1
        assert event_queue.depth()["processing"] == 0
        assert event_queue.claim(timeout=1).attempt == 2

    def test_expired_lease_on_last_attempt_is_dead_lettered(self, event_queue):
        event_queue.publish(status_event())
        message = event_queue.claim(timeout=1)
        event_queue.redis.delete(event_queue._lease_key(message))

        event_queue.requeue_expired(max_attempts=1)

        assert event_queue.depth()["pending"] == 0
        assert event_queue.depth()["dead_letter"] == 1

    def test_held_lease_is_left_alone(self, event_queue):
        event_queue.publish(status_event())
        event_queue.claim(timeout=1)

        assert event_queue.requeue_expired() == 0
        assert event_queue.depth()["processing"] == 1

    def test_ping(self, event_queue):
        assert event_queue.ping() is True
