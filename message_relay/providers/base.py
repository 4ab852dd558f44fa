"""
Provider Transport Interface

A provider takes one message and either returns the id it assigned or
raises ProviderError. Retry decisions belong to the caller.
"""
from dataclasses import dataclass
from typing import Optional, Protocol

from message_relay.models.message import MessageKind


@dataclass
class ProviderResult:
    """Successful provider send."""
    provider_id: str


class MessageProvider(Protocol):
    """
    Protocol for outbound delivery channels.

    Implement this to add new transports (push, voice, etc.)
    """

    async def send(
        self,
        kind: MessageKind,
        sender: str,
        recipient: str,
        body: str,
        attachments: Optional[list[str]] = None,
    ) -> ProviderResult:
        """
        Deliver one message.

        Returns:
            ProviderResult with the provider-assigned id

        Raises:
            ProviderError: With `retry_status` set for transient failures
        """
        ...
