"""
Queue Data Types

Transient inbound message and queue status snapshot.
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from message_relay.models.message import MessageKind


class QueuedMessage(BaseModel):
    """
    Inbound message waiting to be persisted.

    Field aliases match the webhook payload (`from`, `to`, `type`).

    Attributes:
        sender: Sender address (phone number or email)
        recipient: Recipient address
        kind: sms, mms or email
        body: Message content
        attachments: Attachment URLs, if any
        messaging_provider_id: Id assigned by the messaging platform
        xillio_id: Id assigned by the third-party email gateway
        timestamp: When the message was received
    """
    model_config = ConfigDict(populate_by_name=True)

    sender: str = Field(..., alias="from")
    recipient: str = Field(..., alias="to")
    kind: MessageKind = Field(..., alias="type")
    body: str
    attachments: Optional[list[str]] = None
    messaging_provider_id: Optional[str] = None
    xillio_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class QueueStatus(BaseModel):
    """
    Snapshot of the delivery queue.

    Attributes:
        pending_count: Messages received and not yet persisted
        draining: Whether a drain pass is currently running
    """
    pending_count: int = 0
    draining: bool = False
