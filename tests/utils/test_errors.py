"""Tests for provider failure classification."""

import pytest

from message_relay.errors import (
    ProviderError,
    ProviderTransientError,
    ProviderTerminalError,
    RetryableStatus,
    ValidationError,
    provider_error_from_status,
)


class TestProviderErrorFromStatus:

    @pytest.mark.parametrize("status,expected", [
        (429, RetryableStatus.RATE_LIMITED),
        (500, RetryableStatus.PROVIDER_FAULT),
    ])
    def test_retryable_codes(self, status, expected):
        error = provider_error_from_status(status, "boom")

        assert isinstance(error, ProviderTransientError)
        assert error.retry_status == expected
        assert error.status_code == status
        assert error.retryable is True

    @pytest.mark.parametrize("status", [400, 401, 404, 502, 503])
    def test_other_codes_are_terminal(self, status):
        error = provider_error_from_status(status, "boom")

        assert error.retryable is False
        assert error.status_code == status

    def test_missing_code_is_terminal(self):
        error = provider_error_from_status(None, "boom")

        assert error.retryable is False
        assert error.status_code is None

    def test_classification_ignores_message_text(self):
        error = ProviderError("Provider returned 500 error (429)")

        assert error.retryable is False


class TestErrorPayloads:

    def test_validation_error_keeps_details(self):
        error = ValidationError(["from is required", "to is required"])

        assert error.details == ["from is required", "to is required"]
        assert "from is required" in str(error)

    def test_terminal_error_carries_context(self):
        error = ProviderTerminalError("m1", 429, "Rate limit exceeded", attempts=3)

        assert error.message_id == "m1"
        assert error.status_code == 429
        assert error.attempts == 3
