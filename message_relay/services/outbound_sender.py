"""
Outbound Sender

Persists an outbound message as pending, then drives the provider send
through a bounded retry loop with linear backoff.
"""
import asyncio
import datetime as dt
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional
from loguru import logger

from message_relay.config import get_settings
from message_relay.errors import (
    DEFAULT_ERROR_STATUS,
    ProviderError,
    ProviderTerminalError,
)
from message_relay.models.message import Message, MessageKind, DeliveryStatus
from message_relay.providers.base import MessageProvider
from message_relay.repositories.base import MessageStore
from message_relay.utils.observability import log_delivery_event


@dataclass
class OutboundRequest:
    """A message the caller wants delivered."""
    sender: str
    recipient: str
    kind: MessageKind
    body: str
    attachments: Optional[list[str]] = None
    timestamp: dt.datetime = field(default_factory=lambda: dt.datetime.now(dt.UTC))


@dataclass
class SendResult:
    """Outcome of a successful send."""
    message_id: str
    provider_id: str
    timestamp: dt.datetime
    attempts: int


class OutboundSender:
    """
    Retry orchestrator around a provider send.

    Flow:
    1. Save a `pending` record (a failure here aborts; no provider call)
    2. Call the provider up to `max_attempts` times
    3. Retry only failures tagged retryable (rate limit, provider fault),
       sleeping `k * base_delay_ms` after failed attempt k
    4. Mark the record `sent` or `failed` exactly once

    Usage:
        sender = OutboundSender(store=message_repo, provider=router)
        result = await sender.send(OutboundRequest(...))
    """

    def __init__(
        self,
        store: MessageStore,
        provider: MessageProvider,
        max_attempts: Optional[int] = None,
        base_delay_ms: Optional[int] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            store: Persistence for the outbound record
            provider: Transport that performs the actual send
            max_attempts: Total provider attempts (default from settings)
            base_delay_ms: Backoff unit in milliseconds (default from settings)
            sleep: Awaitable sleep taking seconds; swap out in tests
        """
        settings = get_settings()
        self.store = store
        self.provider = provider
        self.max_attempts = max_attempts if max_attempts is not None else settings.max_send_attempts
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        self.base_delay_ms = base_delay_ms if base_delay_ms is not None else settings.retry_base_delay_ms
        self._sleep = sleep

    def backoff_ms(self, failed_attempt: int) -> int:
        """Delay before the attempt that follows failed attempt `failed_attempt` (1-indexed)."""
        return failed_attempt * self.base_delay_ms

    async def send(self, request: OutboundRequest) -> SendResult:
        """
        Persist and deliver one outbound message.

        Args:
            request: Message to send

        Returns:
            SendResult with the provider id

        Raises:
            PersistenceError: If the pending record cannot be saved, or a
                final status update fails
            ProviderTerminalError: If the provider failed terminally or
                attempts ran out; the record is marked failed
        """
        saved = await self.store.save(Message(
            from_address=request.sender,
            to_address=request.recipient,
            message_type=request.kind,
            body=request.body,
            attachments=request.attachments,
            status=DeliveryStatus.PENDING,
            timestamp=request.timestamp,
        ))

        attempt = 0
        while True:
            attempt += 1
            try:
                result = await self.provider.send(
                    request.kind,
                    request.sender,
                    request.recipient,
                    request.body,
                    request.attachments,
                )
                break
            except ProviderError as e:
                error = e
            except Exception as e:
                error = ProviderError(str(e))

            if error.retryable and attempt < self.max_attempts:
                delay_ms = self.backoff_ms(attempt)
                logger.warning(
                    f"Provider returned {error.retry_status.name}, retrying in {delay_ms}ms",
                    extra={
                        "message_id": saved.id,
                        "attempt": attempt,
                        "max_attempts": self.max_attempts,
                        "status_code": error.status_code,
                    }
                )
                await self._sleep(delay_ms / 1000)
                continue

            await self.store.update_status(saved.id, DeliveryStatus.FAILED)
            status_code = error.status_code or DEFAULT_ERROR_STATUS

            log_delivery_event(
                "outbound_failed",
                message_id=saved.id,
                success=False,
                attempts=attempt,
                status_code=status_code,
                error=error.detail,
            )
            raise ProviderTerminalError(
                message_id=saved.id,
                status_code=status_code,
                detail=error.detail,
                attempts=attempt,
            ) from error

        await self.store.update_status(saved.id, DeliveryStatus.SENT)

        log_delivery_event(
            "outbound_sent",
            message_id=saved.id,
            attempts=attempt,
            provider_id=result.provider_id,
        )

        return SendResult(
            message_id=saved.id,
            provider_id=result.provider_id,
            timestamp=request.timestamp,
            attempts=attempt,
        )
