"""Services package."""
from message_relay.services.inbound_handler import (
    InboundDeliveryHandler,
    resolve_provider_name,
    to_message_record,
)
from message_relay.services.outbound_sender import (
    OutboundSender,
    OutboundRequest,
    SendResult,
)

__all__ = [
    "InboundDeliveryHandler",
    "resolve_provider_name",
    "to_message_record",
    "OutboundSender",
    "OutboundRequest",
    "SendResult",
]
