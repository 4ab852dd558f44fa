"""
Structured Logging & Observability
Logging that's both human-readable and machine-parseable.
"""
import sys
from loguru import logger
from typing import Any, Optional
from message_relay.config import get_settings


def configure_logging():
    """
    Configure loguru for the relay.

    In development: Human-readable colorized output
    In production: Structured JSON logs for ingestion (ELK, Datadog, etc.)
    """
    settings = get_settings()

    # Remove default handler
    logger.remove()

    if not settings.enable_structured_logging:
        logger.add(
            sys.stderr,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "{message}"
            ),
            level=settings.log_level,
            colorize=True,
        )
    else:
        logger.add(
            sys.stderr,
            format="{message}",
            level=settings.log_level,
            serialize=True,  # Output as JSON
        )

    logger.info(f"Logging configured: level={settings.log_level}, structured={settings.enable_structured_logging}")


def log_delivery_event(
    event_type: str,
    message_id: Optional[str] = None,
    success: bool = True,
    **details: Any
):
    """
    Structured logging for message hand-offs and send outcomes.

    Args:
        event_type: Type of event (e.g., "inbound_persisted", "outbound_sent")
        message_id: Persisted record id, when one exists
        success: Whether the step succeeded
        **details: Event-specific data (queue lengths, attempts, status codes)

    Example:
        >>> log_delivery_event(
        ...     "outbound_sent",
        ...     message_id="65f0c0ffee",
        ...     attempts=2,
        ...     provider_id="SM123"
        ... )
    """
    log_data = {
        "event_type": event_type,
        "success": success,
        **details
    }

    if message_id is not None:
        log_data["message_id"] = message_id

    level = "INFO" if success else "ERROR"
    logger.bind(**log_data).log(level, f"Delivery Event: {event_type}")
