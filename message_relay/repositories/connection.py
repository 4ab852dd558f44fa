"""
MongoDB Connection Management
Motor client with connection pooling and an explicit lifecycle.
"""
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from typing import Optional
from loguru import logger

from message_relay.config import settings


class DatabaseManager:
    """
    MongoDB client manager with async Motor.
    Handles connection lifecycle, pooling, and graceful shutdown.
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        database_name: Optional[str] = None,
    ):
        self.uri = uri or settings.mongodb_uri
        self.database_name = database_name or settings.mongodb_database
        self._client: Optional[AsyncIOMotorClient] = None
        self._database: Optional[AsyncIOMotorDatabase] = None

    async def connect(self) -> None:
        """
        Initialize MongoDB connection with configured pool settings.
        Idempotent - safe to call multiple times.
        """
        if self._client is not None:
            logger.debug("MongoDB client already connected")
            return

        logger.info(
            f"Connecting to MongoDB at {self.uri}",
            extra={
                "database": self.database_name,
                "max_pool_size": settings.mongodb_max_pool_size,
                "environment": settings.environment
            }
        )
        self._client = AsyncIOMotorClient(
            self.uri,
            maxPoolSize=settings.mongodb_max_pool_size,
            minPoolSize=settings.mongodb_min_pool_size,
            serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
        )
        self._database = self._client[self.database_name]

    async def disconnect(self) -> None:
        """
        Close MongoDB connection and cleanup resources.
        Idempotent - safe to call multiple times.
        """
        if self._client is None:
            logger.debug("MongoDB client already disconnected")
            return

        logger.info("Closing MongoDB connection")
        self._client.close()
        self._client = None
        self._database = None
        logger.info("MongoDB connection closed")

    async def ping(self) -> None:
        """Round-trip to the server; raises if unreachable."""
        await self.client.admin.command("ping")

    @property
    def database(self) -> AsyncIOMotorDatabase:
        """
        Get the database instance.
        Raises RuntimeError if not connected.
        """
        if self._database is None:
            raise RuntimeError(
                "Database not connected. Call await db_manager.connect() first."
            )
        return self._database

    @property
    def client(self) -> AsyncIOMotorClient:
        """
        Get the Motor client instance.
        Raises RuntimeError if not connected.
        """
        if self._client is None:
            raise RuntimeError(
                "Database client not connected. Call await db_manager.connect() first."
            )
        return self._client

    async def create_indexes(self) -> None:
        """
        Create all required indexes for optimal query performance.
        Should be called during application startup.
        """
        db = self.database

        logger.info("Creating MongoDB indexes")

        # Conversations: one document per unordered participant pair
        await db.conversations.create_index(
            [("participant_one", 1), ("participant_two", 1)],
            unique=True,
            name="idx_participants_unique"
        )
        await db.conversations.create_index(
            [("updated_at", -1)],
            name="idx_conversation_updated"
        )

        # Messages
        await db.messages.create_index(
            [("conversation_id", 1), ("timestamp", -1)],
            name="idx_conversation_messages"
        )
        await db.messages.create_index(
            "provider_message_id",
            name="idx_provider_message_id",
            sparse=True
        )

        logger.info("MongoDB indexes created successfully")
