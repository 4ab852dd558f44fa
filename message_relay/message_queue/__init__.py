"""
Message Queue System

In-process delivery of inbound webhook messages to persistence:
- Transient QueuedMessage model and QueueStatus snapshot
- Single-flight FIFO DeliveryQueue with re-queue-at-head on failure
"""

from message_relay.message_queue.base import QueuedMessage, QueueStatus
from message_relay.message_queue.delivery_queue import DeliveryQueue

__all__ = [
    "QueuedMessage",
    "QueueStatus",
    "DeliveryQueue",
]
