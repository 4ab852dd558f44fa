"""
Tests for DeliveryQueue.
"""

import pytest
import asyncio
from loguru import logger

from message_relay.errors import PersistenceError, QueueUninitializedError
from message_relay.message_queue import DeliveryQueue, QueuedMessage, QueueStatus


def make_message(body: str) -> QueuedMessage:
    return QueuedMessage(
        sender="+15551234567",
        recipient="+15557654321",
        kind="sms",
        body=body,
        messaging_provider_id=f"id-{body}",
    )


class TestDeliveryQueueLifecycle:
    """Start/stop behaviour."""

    def test_enqueue_before_start_raises(self):
        queue = DeliveryQueue(handler=lambda m: None)

        with pytest.raises(QueueUninitializedError):
            queue.enqueue(make_message("a"))

    def test_status_before_start_raises(self):
        queue = DeliveryQueue(handler=lambda m: None)

        with pytest.raises(QueueUninitializedError):
            queue.status()

    async def test_enqueue_after_stop_raises(self):
        queue = DeliveryQueue(handler=lambda m: None)
        queue.start()
        await queue.stop()

        assert queue.running is False
        with pytest.raises(QueueUninitializedError):
            queue.enqueue(make_message("a"))

    async def test_fresh_queue_is_idle(self):
        queue = DeliveryQueue(handler=lambda m: None)
        queue.start()

        assert queue.status() == QueueStatus(pending_count=0, draining=False)

    async def test_stop_waits_for_active_pass(self):
        handled = []

        async def slow_handler(message: QueuedMessage):
            await asyncio.sleep(0.05)
            handled.append(message.body)

        queue = DeliveryQueue(handler=slow_handler)
        queue.start()
        queue.enqueue(make_message("a"))
        queue.enqueue(make_message("b"))

        await queue.stop()

        assert handled == ["a", "b"]


class TestDeliveryQueueDraining:
    """Ordering and single-worker behaviour."""

    async def test_messages_handled_in_fifo_order(self):
        handled = []

        async def handler(message: QueuedMessage):
            handled.append(message.body)

        queue = DeliveryQueue(handler=handler)
        queue.start()

        for body in ["a", "b", "c", "d"]:
            queue.enqueue(make_message(body))
        await queue.wait_idle()

        assert handled == ["a", "b", "c", "d"]
        assert queue.status() == QueueStatus(pending_count=0, draining=False)

    async def test_enqueue_flips_to_draining_immediately(self):
        async def handler(message: QueuedMessage):
            pass

        queue = DeliveryQueue(handler=handler)
        queue.start()

        status = queue.enqueue(make_message("a"))

        assert status.pending_count == 1
        assert status.draining is True
        await queue.wait_idle()

    async def test_only_one_worker_runs(self):
        in_flight = 0
        max_in_flight = 0

        async def handler(message: QueuedMessage):
            nonlocal in_flight, max_in_flight
            in_flight += 1
            max_in_flight = max(max_in_flight, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1

        queue = DeliveryQueue(handler=handler)
        queue.start()

        for body in ["a", "b", "c", "d", "e"]:
            queue.enqueue(make_message(body))
        await queue.wait_idle()

        assert max_in_flight == 1

    async def test_pending_count_drops_as_messages_are_handled(self):
        snapshots = []
        queue = None

        async def handler(message: QueuedMessage):
            snapshots.append(queue.status())
            await asyncio.sleep(0)

        queue = DeliveryQueue(handler=handler)
        queue.start()

        for body in ["a", "b", "c"]:
            queue.enqueue(make_message(body))
        assert queue.status().pending_count == 3

        await queue.wait_idle()

        assert [s.pending_count for s in snapshots] == [2, 1, 0]
        assert all(s.draining for s in snapshots)
        assert queue.status() == QueueStatus(pending_count=0, draining=False)

    async def test_enqueue_during_pass_is_consumed_by_same_pass(self):
        handled = []
        tasks_seen = set()
        queue = None

        async def handler(message: QueuedMessage):
            handled.append(message.body)
            tasks_seen.add(id(asyncio.current_task()))
            if message.body == "a":
                queue.enqueue(make_message("late"))

        queue = DeliveryQueue(handler=handler)
        queue.start()
        queue.enqueue(make_message("a"))
        queue.enqueue(make_message("b"))
        await queue.wait_idle()

        assert handled == ["a", "b", "late"]
        assert len(tasks_seen) == 1

    async def test_enqueue_after_pass_finished_starts_new_pass(self):
        handled = []

        async def handler(message: QueuedMessage):
            handled.append(message.body)

        queue = DeliveryQueue(handler=handler)
        queue.start()

        queue.enqueue(make_message("a"))
        await queue.wait_idle()
        assert queue.status().draining is False

        queue.enqueue(make_message("b"))
        await queue.wait_idle()

        assert handled == ["a", "b"]


class TestDeliveryQueueFailures:
    """Re-queue at head and halt on handler failure."""

    async def test_failure_requeues_at_head_and_halts_pass(self):
        handled = []
        failures = {"b": 1}

        async def handler(message: QueuedMessage):
            if failures.get(message.body, 0) > 0:
                failures[message.body] -= 1
                raise PersistenceError("database unavailable")
            handled.append(message.body)

        queue = DeliveryQueue(handler=handler)
        queue.start()

        for body in ["a", "b", "c"]:
            queue.enqueue(make_message(body))
        await queue.wait_idle()

        # Halted at "b": "c" was not attempted
        assert handled == ["a"]
        assert queue.status() == QueueStatus(pending_count=2, draining=False)

        # Next trigger retries "b" first, then the rest in order
        queue.enqueue(make_message("d"))
        await queue.wait_idle()

        assert handled == ["a", "b", "c", "d"]
        assert queue.status().pending_count == 0

    async def test_sustained_failure_never_loses_messages(self):
        attempts = []

        async def failing_handler(message: QueuedMessage):
            attempts.append(message.body)
            raise PersistenceError("still down")

        queue = DeliveryQueue(handler=failing_handler)
        queue.start()

        queue.enqueue(make_message("a"))
        await queue.wait_idle()
        queue.enqueue(make_message("b"))
        await queue.wait_idle()

        # Head-of-line blocking: "a" is retried, "b" waits behind it
        assert attempts == ["a", "a"]
        assert queue.status() == QueueStatus(pending_count=2, draining=False)

    async def test_failure_keeps_original_message_object(self, inbound_message):
        seen = []

        async def handler(message: QueuedMessage):
            seen.append(message)
            if len(seen) == 1:
                raise RuntimeError("boom")

        queue = DeliveryQueue(handler=handler)
        queue.start()

        queue.enqueue(inbound_message)
        await queue.wait_idle()
        queue.enqueue(make_message("next"))
        await queue.wait_idle()

        assert seen[0] is inbound_message
        assert seen[1] is inbound_message
        assert seen[2].body == "next"

    async def test_failure_detail_with_braces_is_logged(self):
        detail = 'E11000 duplicate key error dup key: { participant_one: "+1", participant_two: "+2" }'
        records = []
        handler_id = logger.add(lambda m: records.append(m.record), level="ERROR")

        async def handler(message: QueuedMessage):
            raise PersistenceError(detail)

        queue = DeliveryQueue(handler=handler)
        queue.start()

        try:
            queue.enqueue(make_message("a"))
            drain_task = queue._drain_task
            await queue.wait_idle()
        finally:
            logger.remove(handler_id)

        assert drain_task.exception() is None
        assert queue.status() == QueueStatus(pending_count=1, draining=False)

        record = records[-1]
        assert record["message"] == f"Failed to process message: {detail}"
        assert record["extra"]["error"] == detail
        assert record["extra"]["sender"] == "+15551234567"

        # Shutdown still completes
        await queue.stop()
        assert not queue.running
