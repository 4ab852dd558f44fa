"""Provider transports."""
from message_relay.providers.base import MessageProvider, ProviderResult
from message_relay.providers.email_gateway import EmailGatewayProvider
from message_relay.providers.router import ProviderRouter
from message_relay.providers.twilio_provider import TwilioProvider

__all__ = [
    "MessageProvider",
    "ProviderResult",
    "EmailGatewayProvider",
    "ProviderRouter",
    "TwilioProvider",
]
