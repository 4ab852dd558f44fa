"""
Relay Error Taxonomy

Tagged exceptions shared by the queue, the retry orchestrator, the
providers and the API layer. Provider failures carry a structured
retry classification; nothing inspects error message text.
"""
from enum import IntEnum
from typing import Optional


class RetryableStatus(IntEnum):
    """Provider failure codes that are worth another attempt."""
    RATE_LIMITED = 429
    PROVIDER_FAULT = 500


DEFAULT_ERROR_STATUS = 500


class RelayError(Exception):
    """Base class for all relay errors."""
    pass


class ValidationError(RelayError):
    """
    Request payload is missing or has invalid fields.

    Attributes:
        details: Human-readable list of field problems
    """

    def __init__(self, details: list[str]):
        self.details = details
        super().__init__("Validation failed: " + "; ".join(details))


class PersistenceError(RelayError):
    """A save or status update against the message store failed."""
    pass


class QueueUninitializedError(RelayError):
    """The delivery queue was used outside its start/stop lifecycle."""
    pass


class ProviderError(RelayError):
    """
    Failure reported by a provider transport.

    Attributes:
        detail: Human-readable description
        status_code: HTTP-like status reported by the provider, if any
        retry_status: Set when the failure is transient (rate limit or
            provider fault); None means terminal
    """

    def __init__(
        self,
        detail: str,
        status_code: Optional[int] = None,
        retry_status: Optional[RetryableStatus] = None,
    ):
        self.detail = detail
        self.status_code = status_code
        self.retry_status = retry_status
        super().__init__(detail)

    @property
    def retryable(self) -> bool:
        return self.retry_status is not None


class ProviderTransientError(ProviderError):
    """Rate-limit or provider-side fault; eligible for retry."""

    def __init__(self, detail: str, retry_status: RetryableStatus):
        super().__init__(detail, status_code=int(retry_status), retry_status=retry_status)


class ProviderTerminalError(RelayError):
    """
    Outbound send gave up: non-retryable failure or attempts exhausted.

    Attributes:
        message_id: Id of the persisted record (now marked failed)
        status_code: Classified status of the last failure
        detail: Human-readable description of the last failure
        attempts: Number of provider attempts made
    """

    def __init__(self, message_id: str, status_code: int, detail: str, attempts: int = 1):
        self.message_id = message_id
        self.status_code = status_code
        self.detail = detail
        self.attempts = attempts
        super().__init__(f"Failed to send message {message_id}: {detail}")


def provider_error_from_status(status_code: Optional[int], detail: str) -> ProviderError:
    """
    Classify a provider status code into a retryable or terminal error.

    Args:
        status_code: Status reported by the provider (None if unknown)
        detail: Error description

    Returns:
        ProviderTransientError for 429/500, plain ProviderError otherwise
    """
    try:
        retry_status = RetryableStatus(status_code)
    except ValueError:
        return ProviderError(detail, status_code=status_code)
    return ProviderTransientError(detail, retry_status)
