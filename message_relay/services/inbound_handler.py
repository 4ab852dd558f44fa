"""
Inbound Delivery Handler

Turns a queued webhook message into a persisted `delivered` record.
"""
from message_relay.message_queue.base import QueuedMessage
from message_relay.models.message import Message, DeliveryStatus, ProviderName
from message_relay.repositories.base import MessageStore
from message_relay.utils.observability import log_delivery_event


def resolve_provider_name(message: QueuedMessage) -> ProviderName:
    """Name the provider from whichever provider id the webhook carried."""
    if message.messaging_provider_id:
        return ProviderName.MESSAGING_PROVIDER
    if message.xillio_id:
        return ProviderName.XILLIO_EMAIL
    return ProviderName.UNKNOWN


def to_message_record(message: QueuedMessage) -> Message:
    """Map inbound field names onto the stored Message shape."""
    return Message(
        from_address=message.sender,
        to_address=message.recipient,
        message_type=message.kind,
        body=message.body,
        attachments=message.attachments,
        provider_message_id=message.messaging_provider_id or message.xillio_id,
        provider_name=resolve_provider_name(message),
        status=DeliveryStatus.DELIVERED,
        timestamp=message.timestamp,
    )


class InboundDeliveryHandler:
    """
    Queue handler that persists each inbound message.

    Persistence errors propagate so the delivery queue can put the
    message back at the head.
    """

    def __init__(self, store: MessageStore):
        self.store = store

    async def __call__(self, message: QueuedMessage) -> None:
        saved = await self.store.save(to_message_record(message))

        log_delivery_event(
            "inbound_persisted",
            message_id=saved.id,
            provider_name=saved.provider_name,
            message_type=saved.message_type,
        )
