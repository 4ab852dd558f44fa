import datetime as dt
from enum import StrEnum
from typing import Optional
from pydantic import Field
from message_relay.models.base import MongoBaseModel


class MessageKind(StrEnum):
    SMS = "sms"
    MMS = "mms"
    EMAIL = "email"


class DeliveryStatus(StrEnum):
    PENDING = "pending"
    SENT = "sent"
    DELIVERED = "delivered"
    FAILED = "failed"

    def can_transition_to(self, target: "DeliveryStatus") -> bool:
        """Status only moves forward out of PENDING; terminal states never change."""
        return self is DeliveryStatus.PENDING and target is not DeliveryStatus.PENDING

    @classmethod
    def sources_for(cls, target: "DeliveryStatus") -> list["DeliveryStatus"]:
        """All statuses a record may be in for a move to `target` to be legal."""
        return [status for status in cls if status.can_transition_to(target)]


class ProviderName(StrEnum):
    MESSAGING_PROVIDER = "messaging_provider"
    XILLIO_EMAIL = "xillio_email"
    UNKNOWN = "unknown"


class Message(MongoBaseModel):
    """
    A relayed message, inbound or outbound.

    Field names match the stored document so records round-trip through
    the repository without a mapping layer.
    """
    conversation_id: Optional[str] = None
    from_address: str
    to_address: str
    message_type: MessageKind
    body: str
    attachments: Optional[list[str]] = None
    provider_message_id: Optional[str] = None
    provider_name: Optional[str] = None
    status: DeliveryStatus = DeliveryStatus.PENDING
    timestamp: dt.datetime = Field(
        default_factory=lambda: dt.datetime.now(dt.UTC),
        description="When the message was sent or received, as reported by the caller."
    )
