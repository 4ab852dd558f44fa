"""
FastAPI Application

Main entry point for the message relay API.
Owns the lifecycle of the database connection, the delivery queue and
the outbound sender, and mounts the routers.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from loguru import logger

from message_relay.message_queue import DeliveryQueue
from message_relay.providers import EmailGatewayProvider, ProviderRouter, TwilioProvider
from message_relay.repositories import DatabaseManager, ConversationRepository, MessageRepository
from message_relay.services import InboundDeliveryHandler, OutboundSender
from message_relay.utils.observability import configure_logging
from message_relay.api.routes import health_router, messages_router, metrics_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle: startup and shutdown events.

    Startup:
    - Connect to MongoDB and create indexes
    - Build repositories and provider transports
    - Start the delivery queue

    Shutdown:
    - Let the active drain pass finish, then stop the queue
    - Disconnect from MongoDB
    """
    configure_logging()
    logger.info("Starting Message Relay API server...")

    db_manager = DatabaseManager()
    await db_manager.connect()
    await db_manager.create_indexes()

    conversation_repo = ConversationRepository(db_manager.database)
    message_repo = MessageRepository(db_manager.database, conversation_repo)

    queue = DeliveryQueue(handler=InboundDeliveryHandler(message_repo))
    queue.start()

    provider = ProviderRouter(
        messaging=TwilioProvider(),
        email=EmailGatewayProvider()
    )
    sender = OutboundSender(store=message_repo, provider=provider)

    # Store in app state for access in routes
    app.state.db_manager = db_manager
    app.state.conversation_repo = conversation_repo
    app.state.message_repo = message_repo
    app.state.queue = queue
    app.state.sender = sender

    logger.info("API server ready to relay messages")

    yield

    logger.info("Shutting down API server...")
    await queue.stop()
    await db_manager.disconnect()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Message Relay API",
    description="Store-and-forward relay for SMS, MMS and email",
    version="1.0.0",
    lifespan=lifespan
)

# Mount routers
app.include_router(health_router)
app.include_router(messages_router)
app.include_router(metrics_router)
