"""
Centralized Configuration System
Environment-aware settings for the relay, its collaborators and the API.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal, Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow"
    )
    """
    Production-grade configuration management.
    Loads from environment variables with sensible defaults.
    """

    # ============================================
    # MONGODB
    # ============================================
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "message_relay"
    mongodb_max_pool_size: int = 10
    mongodb_min_pool_size: int = 1
    mongodb_server_selection_timeout_ms: int = 5000

    # ============================================
    # PROVIDERS
    # ============================================
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_from_number: Optional[str] = None

    email_gateway_url: Optional[str] = None
    email_gateway_api_key: Optional[str] = None
    email_gateway_timeout_seconds: float = 10.0

    # ============================================
    # OUTBOUND RETRY POLICY
    # ============================================
    max_send_attempts: int = 3      # Total attempts, first one included
    retry_base_delay_ms: int = 1000  # Delay before attempt k+1 is k * base

    # ============================================
    # API
    # ============================================
    default_conversation_page_size: int = 10
    max_conversation_page_size: int = 50

    # ============================================
    # LOGGING
    # ============================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    enable_structured_logging: bool = False  # Set to True for production JSON logs

    # ============================================
    # ENVIRONMENT
    # ============================================
    environment: Literal["development", "test", "staging", "production"] = "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Singleton pattern for settings.
    Uses LRU cache to ensure only one Settings instance exists.
    """
    return Settings()


# Convenience accessor for common use
settings = get_settings()
