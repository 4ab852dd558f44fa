"""
Inbound Delivery Queue

Ordered in-memory buffer of inbound messages with a single drain worker.

The queue is either Idle or Draining. `enqueue` appends to the tail and,
when Idle, flips to Draining and spawns exactly one drain task. The drain
task hands messages to the handler head-first until the queue is empty or
the handler fails. On failure the message goes back to the head and the
pass stops; the next `enqueue` starts a new pass from that same message.
"""

import asyncio
from collections import deque
from typing import Awaitable, Callable, Optional
from loguru import logger

from message_relay.errors import QueueUninitializedError
from message_relay.message_queue.base import QueuedMessage, QueueStatus


class DeliveryQueue:
    """
    Single-flight FIFO delivery queue.

    Deque mutations never span an await, so the event loop serializes
    them; the Draining flag is set synchronously in `enqueue` so two
    enqueues can never start two workers.

    Attributes:
        handler: Async function that persists one message; raising means
            the message was not accepted
    """

    def __init__(self, handler: Callable[[QueuedMessage], Awaitable[None]]):
        self.handler = handler
        self._pending: deque[QueuedMessage] = deque()
        self._draining = False
        self._running = False
        self._drain_task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Open the queue for enqueues."""
        if self._running:
            logger.warning("Delivery queue already running")
            return

        self._running = True
        logger.info("Delivery queue started")

    async def stop(self) -> None:
        """
        Close the queue.

        Waits for an in-flight drain pass to reach its own stopping point;
        passes are never cancelled. Messages still pending are reported
        and dropped with the process.
        """
        if not self._running:
            return

        logger.info("Stopping delivery queue...")
        await self.wait_idle()
        self._running = False

        if self._pending:
            logger.warning(
                f"Delivery queue stopped with {len(self._pending)} undelivered messages",
                extra={"pending_count": len(self._pending)}
            )
        logger.info("Delivery queue stopped")

    def enqueue(self, message: QueuedMessage) -> QueueStatus:
        """
        Append a message to the tail and make sure a drain pass is running.

        Args:
            message: Inbound message to persist

        Returns:
            Queue status right after the append

        Raises:
            QueueUninitializedError: If the queue is not started
        """
        self._ensure_running()

        self._pending.append(message)
        logger.info(f"Message enqueued. Queue size: {len(self._pending)}")

        if not self._draining:
            self._draining = True
            self._drain_task = asyncio.create_task(self._drain())

        return self.status()

    def status(self) -> QueueStatus:
        """
        Current pending count and drain state.

        Raises:
            QueueUninitializedError: If the queue is not started
        """
        self._ensure_running()
        return QueueStatus(pending_count=len(self._pending), draining=self._draining)

    async def wait_idle(self) -> None:
        """Wait until the active drain pass, if any, has finished."""
        # A pass may be restarted by an enqueue while we wait on the old one
        while self._drain_task is not None and not self._drain_task.done():
            await asyncio.shield(self._drain_task)

    async def _drain(self) -> None:
        """Hand messages to the handler head-first until empty or a failure."""
        try:
            while self._pending:
                message = self._pending.popleft()
                length_before = len(self._pending) + 1

                try:
                    await self.handler(message)
                except Exception as e:
                    self._pending.appendleft(message)
                    # Error text is passed as an argument, never as the format string
                    logger.bind(
                        sender=message.sender,
                        recipient=message.recipient,
                        pending_count=len(self._pending),
                        error=str(e),
                    ).error("Failed to process message: {}", e)
                    break

                logger.info(
                    "Message processed successfully",
                    extra={
                        "from": message.sender,
                        "to": message.recipient,
                        "queue_length_before": length_before,
                        "queue_length_after": len(self._pending),
                    }
                )
        finally:
            self._draining = False

    def _ensure_running(self) -> None:
        if not self._running:
            raise QueueUninitializedError("Message queue not initialized")
