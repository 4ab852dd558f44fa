"""
HTTP email gateway transport.
Posts outbound email to a JSON gateway endpoint.
"""
import httpx
from typing import Optional
from loguru import logger

from message_relay.config import get_settings
from message_relay.errors import (
    ProviderError,
    ProviderTransientError,
    RetryableStatus,
    provider_error_from_status,
)
from message_relay.models.message import MessageKind
from message_relay.providers.base import ProviderResult


class EmailGatewayProvider:
    """
    Email transport over a JSON HTTP gateway.

    The gateway answers `{"id": "..."}` on success. HTTP status codes are
    classified for retry; connection-level failures count as provider
    faults.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self._url = url or settings.email_gateway_url
        self._api_key = api_key or settings.email_gateway_api_key
        self._timeout = timeout or settings.email_gateway_timeout_seconds
        self._transport = transport

        if not self.is_configured:
            logger.warning("Email gateway URL not configured - email sends will fail")

    @property
    def is_configured(self) -> bool:
        """Check if the gateway URL is configured."""
        return bool(self._url)

    async def send(
        self,
        kind: MessageKind,
        sender: str,
        recipient: str,
        body: str,
        attachments: Optional[list[str]] = None,
    ) -> ProviderResult:
        if not self.is_configured:
            raise ProviderError("Email gateway not configured - missing URL")

        headers = {}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        payload = {
            "from": sender,
            "to": recipient,
            "body": body,
            "attachments": attachments or [],
        }

        logger.info(
            "📧 Sending email to provider",
            extra={"to": recipient, "attachments": len(payload["attachments"])}
        )

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    self._url,
                    json=payload,
                    headers=headers,
                    timeout=self._timeout
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise provider_error_from_status(
                e.response.status_code,
                f"Email gateway returned {e.response.status_code}"
            ) from e
        except httpx.TransportError as e:
            raise ProviderTransientError(
                f"Email gateway unreachable: {e}",
                RetryableStatus.PROVIDER_FAULT
            ) from e

        provider_id = response.json().get("id")
        if not provider_id:
            raise ProviderError("Email gateway response missing id", status_code=502)

        logger.info(
            "✅ Email accepted by gateway",
            extra={"provider_id": provider_id}
        )
        return ProviderResult(provider_id=str(provider_id))
