"""
Pydantic models for message send and webhook payloads.
"""
import datetime as dt
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional

from message_relay.message_queue.base import QueuedMessage
from message_relay.models.message import Message, MessageKind
from message_relay.services.outbound_sender import OutboundRequest

ALLOWED_TYPES = {kind.value for kind in MessageKind}


class MessagePayload(BaseModel):
    """
    Body of both send requests and inbound webhooks.

    Every field is optional at parse time; `validation_errors` reports
    what is missing so the caller gets the full list at once.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    sender: Optional[str] = Field(None, alias="from")
    recipient: Optional[str] = Field(None, alias="to")
    type: Optional[str] = None
    body: Optional[str] = None
    attachments: Optional[list[str]] = None
    messaging_provider_id: Optional[str] = None
    xillio_id: Optional[str] = None
    timestamp: Optional[dt.datetime] = None

    def validation_errors(self, outbound: bool) -> list[str]:
        """List field problems; outbound sends require an explicit type."""
        errors = []

        if not self.sender:
            errors.append("from is required")
        if not self.recipient:
            errors.append("to is required")
        if not self.body:
            errors.append("body is required")

        if outbound:
            if self.type not in ALLOWED_TYPES:
                errors.append("type must be sms, mms, or email")
        elif self.type is not None and self.type not in ALLOWED_TYPES:
            errors.append("type must be sms, mms, or email if provided")

        return errors

    def to_outbound_request(self) -> OutboundRequest:
        return OutboundRequest(
            sender=self.sender,
            recipient=self.recipient,
            kind=MessageKind(self.type),
            body=self.body,
            attachments=self.attachments,
            timestamp=self.timestamp or dt.datetime.now(dt.UTC),
        )

    def to_queued_message(self) -> QueuedMessage:
        """
        Build the queue entry, inferring the kind when the webhook omits it:
        a platform messaging id means sms, anything else is email.
        """
        kind = self.type or (
            MessageKind.SMS if self.messaging_provider_id else MessageKind.EMAIL
        )
        return QueuedMessage(
            sender=self.sender,
            recipient=self.recipient,
            kind=kind,
            body=self.body,
            attachments=self.attachments,
            messaging_provider_id=self.messaging_provider_id,
            xillio_id=self.xillio_id,
            timestamp=self.timestamp or dt.datetime.now(dt.UTC),
        )


class MessageView(BaseModel):
    """Message as returned by the conversation endpoints."""
    id: str
    sender: str = Field(..., serialization_alias="from")
    recipient: str = Field(..., serialization_alias="to")
    type: MessageKind
    body: str
    attachments: Optional[list[str]] = None
    status: str
    timestamp: dt.datetime
    providerMessageId: Optional[str] = None
    createdAt: dt.datetime

    @classmethod
    def from_message(cls, message: Message) -> "MessageView":
        return cls(
            id=message.id,
            sender=message.from_address,
            recipient=message.to_address,
            type=message.message_type,
            body=message.body,
            attachments=message.attachments,
            status=str(message.status),
            timestamp=message.timestamp,
            providerMessageId=message.provider_message_id,
            createdAt=message.created_at,
        )
