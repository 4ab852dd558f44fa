"""
Conversation Repository
Threads keyed by their unordered participant pair.
"""
from typing import List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError
import datetime as dt
from loguru import logger

from message_relay.errors import PersistenceError
from message_relay.models.conversation import Conversation
from message_relay.repositories.base import BaseRepository, to_object_id


class ConversationRepository(BaseRepository[Conversation]):
    """Repository for Conversation persistence and listing."""

    def __init__(self, database: AsyncIOMotorDatabase):
        super().__init__(database, "conversations", Conversation)

    async def get_or_create(self, address_a: str, address_b: str) -> str:
        """
        Resolve the conversation between two addresses, creating it if needed.

        Args:
            address_a: One participant (sender or recipient)
            address_b: The other participant

        Returns:
            Conversation id
        """
        participant_one, participant_two = Conversation.participants_for(address_a, address_b)
        now = dt.datetime.now(dt.UTC)

        pair = {"participant_one": participant_one, "participant_two": participant_two}
        update = {"$setOnInsert": {**pair, "created_at": now, "updated_at": now}}

        try:
            try:
                doc = await self._upsert(pair, update)
            except DuplicateKeyError:
                # A concurrent upsert inserted the pair first; the retry matches it
                logger.debug("Conversation upsert raced, retrying", extra={"participants": list(pair.values())})
                doc = await self._upsert(pair, update)
        except PyMongoError as e:
            raise PersistenceError(f"Failed to resolve conversation: {e}") from e

        logger.debug(
            "Conversation resolved",
            extra={"conversation_id": str(doc["_id"]), "participants": [participant_one, participant_two]}
        )
        return str(doc["_id"])

    async def _upsert(self, pair: dict, update: dict) -> dict:
        return await self.collection.find_one_and_update(
            pair,
            update,
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

    async def touch(self, conversation_id: str) -> None:
        """Mark a conversation as the most recently active one."""
        try:
            await self.collection.update_one(
                {"_id": to_object_id(conversation_id)},
                {"$set": {"updated_at": dt.datetime.now(dt.UTC)}}
            )
        except PyMongoError as e:
            raise PersistenceError(f"Failed to touch conversation: {e}") from e

    async def list_with_counts(self) -> List[Conversation]:
        """
        List all conversations, most recently active first,
        each annotated with its message count.
        """
        pipeline = [
            {"$sort": {"updated_at": -1}},
            {"$lookup": {
                "from": "messages",
                "let": {"conversation_id": {"$toString": "$_id"}},
                "pipeline": [
                    {"$match": {"$expr": {"$eq": ["$conversation_id", "$$conversation_id"]}}},
                    {"$count": "n"},
                ],
                "as": "counts",
            }},
            {"$addFields": {"message_count": {"$ifNull": [{"$first": "$counts.n"}, 0]}}},
            {"$project": {"counts": 0}},
        ]

        try:
            docs = await self.collection.aggregate(pipeline).to_list(length=None)
        except PyMongoError as e:
            raise PersistenceError(f"Failed to list conversations: {e}") from e

        return [self._to_model(doc) for doc in docs]

    async def find_nth_recent(self, position: int) -> Optional[Conversation]:
        """
        Get the nth most recently active conversation (1-indexed).

        Returns:
            Conversation or None if there are fewer than `position` threads
        """
        if position < 1:
            return None

        conversations = await self.find_many(
            filter_dict={},
            limit=1,
            skip=position - 1,
            sort=[("updated_at", -1)]
        )
        return conversations[0] if conversations else None

