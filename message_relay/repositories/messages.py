"""
Message Repository
Message storage, status transitions and conversation history retrieval.
"""
from typing import List
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError
import datetime as dt
from loguru import logger

from message_relay.errors import PersistenceError
from message_relay.models.message import Message, DeliveryStatus
from message_relay.repositories.base import BaseRepository, to_object_id
from message_relay.repositories.conversations import ConversationRepository


class MessageRepository(BaseRepository[Message]):
    """
    Repository for Message persistence.

    Implements the MessageStore protocol used by the delivery queue and
    the outbound sender: `save` and `update_status`.
    """

    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        conversations: ConversationRepository
    ):
        super().__init__(database, "messages", Message)
        self.conversations = conversations

    async def save(self, record: Message) -> Message:
        """
        Persist a message into the conversation between its two addresses.

        Args:
            record: Message to store; conversation_id is resolved here

        Returns:
            The stored message with id and conversation_id populated

        Raises:
            PersistenceError: If the conversation lookup or insert fails
        """
        record.conversation_id = await self.conversations.get_or_create(
            record.from_address, record.to_address
        )
        saved = await self.create(record)
        await self.conversations.touch(saved.conversation_id)

        logger.debug(
            "Message saved",
            extra={
                "message_id": saved.id,
                "conversation_id": saved.conversation_id,
                "status": saved.status,
            }
        )
        return saved

    async def update_status(self, message_id: str, status: DeliveryStatus) -> Message:
        """
        Move a message to a new delivery status.

        Only legal one-way transitions are applied; the check happens in
        the update filter so concurrent writers cannot reverse a status.

        Args:
            message_id: Id of the stored message
            status: Target status

        Returns:
            The updated message

        Raises:
            PersistenceError: If the message is missing, the transition is
                illegal, or the update fails
        """
        sources = DeliveryStatus.sources_for(status)
        if not sources:
            raise PersistenceError(f"No status can transition to {status}")

        try:
            doc = await self.collection.find_one_and_update(
                {
                    "_id": to_object_id(message_id),
                    "status": {"$in": [s.value for s in sources]},
                },
                {"$set": {"status": status.value, "updated_at": dt.datetime.now(dt.UTC)}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise PersistenceError(f"Failed to update message {message_id}: {e}") from e

        if doc is None:
            raise PersistenceError(
                f"Message {message_id} not found or cannot transition to {status}"
            )

        logger.debug(
            "Message status updated",
            extra={"message_id": message_id, "status": status.value}
        )
        return self._to_model(doc)

    async def get_conversation_messages(
        self,
        conversation_id: str,
        limit: int = 10,
        skip: int = 0
    ) -> List[Message]:
        """
        Page through a conversation, newest first.

        Args:
            conversation_id: Conversation to read
            limit: Page size
            skip: Number of messages to skip

        Returns:
            List of Message instances sorted by timestamp (newest first)
        """
        return await self.find_many(
            filter_dict={"conversation_id": conversation_id},
            limit=limit,
            skip=skip,
            sort=[("timestamp", -1)]
        )
