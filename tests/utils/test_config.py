"""
Tests for centralized configuration system.
Verifies environment variable loading and default values.
"""
import pytest
from message_relay.config import Settings, get_settings


@pytest.fixture(autouse=True)
def fresh_settings_cache():
    """Keep env-specific Settings instances from leaking into other tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestConfigurationSystem:
    """Test suite for configuration management."""

    def test_default_values(self):
        """Verify all configuration fields have sensible defaults."""
        settings = Settings()

        # Retry policy
        assert settings.max_send_attempts == 3
        assert settings.retry_base_delay_ms == 1000

        # API paging
        assert settings.default_conversation_page_size == 10
        assert settings.max_conversation_page_size == 50

        # Providers are optional
        assert settings.email_gateway_timeout_seconds == 10.0

        # Logging
        assert settings.log_level == "INFO"
        assert settings.enable_structured_logging is False

        # Environment (when not explicitly set in conftest.py for tests)
        assert settings.environment in ["development", "test"]

    def test_environment_variable_override(self, monkeypatch):
        """Verify environment variables override defaults."""
        monkeypatch.setenv("MONGODB_URI", "mongodb://db.internal:27017")
        monkeypatch.setenv("MONGODB_DATABASE", "relay_prod")
        monkeypatch.setenv("MAX_SEND_ATTEMPTS", "5")
        monkeypatch.setenv("RETRY_BASE_DELAY_MS", "250")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("ENVIRONMENT", "production")

        settings = get_settings()

        assert settings.mongodb_uri == "mongodb://db.internal:27017"
        assert settings.mongodb_database == "relay_prod"
        assert settings.max_send_attempts == 5
        assert settings.retry_base_delay_ms == 250
        assert settings.log_level == "DEBUG"
        assert settings.environment == "production"

    def test_boolean_environment_variables(self, monkeypatch):
        """Verify boolean environment variables parse correctly."""
        monkeypatch.setenv("ENABLE_STRUCTURED_LOGGING", "true")

        settings = get_settings()

        assert settings.enable_structured_logging is True

    def test_singleton_pattern(self):
        """Verify get_settings() returns same instance."""
        settings1 = get_settings()
        settings2 = get_settings()

        assert settings1 is settings2

    def test_provider_configuration(self, monkeypatch):
        """Verify provider credentials load from the environment."""
        monkeypatch.setenv("TWILIO_ACCOUNT_SID", "AC123")
        monkeypatch.setenv("TWILIO_AUTH_TOKEN", "token")
        monkeypatch.setenv("TWILIO_FROM_NUMBER", "+15550000000")
        monkeypatch.setenv("EMAIL_GATEWAY_URL", "https://mail.example.com/send")

        settings = get_settings()

        assert settings.twilio_account_sid == "AC123"
        assert settings.twilio_from_number == "+15550000000"
        assert settings.email_gateway_url == "https://mail.example.com/send"

    def test_invalid_log_level_rejected(self, monkeypatch):
        """Verify unknown log levels fail validation."""
        monkeypatch.setenv("LOG_LEVEL", "CHATTY")

        with pytest.raises(Exception):
            get_settings()
