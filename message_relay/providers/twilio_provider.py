"""
Twilio SMS/MMS transport.
Sends messages via the Twilio Messages API.
"""
import asyncio
from typing import Optional
from twilio.rest import Client
from twilio.base.exceptions import TwilioRestException
from loguru import logger

from message_relay.config import get_settings
from message_relay.errors import ProviderError, provider_error_from_status
from message_relay.models.message import MessageKind
from message_relay.providers.base import ProviderResult


class TwilioProvider:
    """
    Sends sms and mms through Twilio.

    The Twilio client is synchronous, so each call runs in a worker thread
    to keep the event loop free. Twilio's HTTP status decides whether a
    failure is retryable.
    """

    def __init__(self, client: Optional[Client] = None, from_number: Optional[str] = None):
        settings = get_settings()
        if client is not None:
            self.client = client
        elif settings.twilio_account_sid and settings.twilio_auth_token:
            self.client = Client(
                settings.twilio_account_sid,
                settings.twilio_auth_token
            )
        else:
            self.client = None
            logger.warning("Twilio credentials not configured - sms/mms sends will fail")

        self.from_number = from_number or settings.twilio_from_number

    async def send(
        self,
        kind: MessageKind,
        sender: str,
        recipient: str,
        body: str,
        attachments: Optional[list[str]] = None,
    ) -> ProviderResult:
        if self.client is None:
            raise ProviderError("Twilio client not configured - missing credentials")

        params = {
            "body": body,
            "from_": sender or self.from_number,
            "to": recipient,
        }
        if kind == MessageKind.MMS and attachments:
            params["media_url"] = attachments

        logger.info(
            f"📱 Sending {kind} to provider",
            extra={"to": recipient, "message_length": len(body)}
        )

        try:
            response = await asyncio.to_thread(self.client.messages.create, **params)
        except TwilioRestException as e:
            raise provider_error_from_status(e.status, e.msg or str(e)) from e

        logger.info(
            "✅ Message accepted by Twilio",
            extra={"message_sid": response.sid, "status": response.status}
        )
        return ProviderResult(provider_id=response.sid)
