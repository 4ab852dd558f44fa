"""
Provider Router

Picks the transport for a message kind.
"""
from typing import Optional
from loguru import logger

from message_relay.errors import ProviderError
from message_relay.models.message import MessageKind
from message_relay.providers.base import MessageProvider, ProviderResult


class ProviderRouter:
    """
    MessageProvider that dispatches sms and mms to the messaging transport
    and email to the email transport.
    """

    def __init__(self, messaging: MessageProvider, email: MessageProvider):
        self._routes: dict[MessageKind, MessageProvider] = {
            MessageKind.SMS: messaging,
            MessageKind.MMS: messaging,
            MessageKind.EMAIL: email,
        }

    async def send(
        self,
        kind: MessageKind,
        sender: str,
        recipient: str,
        body: str,
        attachments: Optional[list[str]] = None,
    ) -> ProviderResult:
        provider = self._routes.get(kind)
        if provider is None:
            logger.error(f"No provider for message type {kind!r}")
            raise ProviderError(f"Unsupported message type: {kind}", status_code=400)

        return await provider.send(kind, sender, recipient, body, attachments)
