"""
Generic Repository Base Class
DRY foundation for async CRUD operations on MongoDB collections.
"""
from typing import Generic, TypeVar, Type, Optional, List, Dict, Any, Protocol
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import PyMongoError
from loguru import logger

from message_relay.errors import PersistenceError
from message_relay.models.base import MongoBaseModel, utc_now
from message_relay.models.message import Message, DeliveryStatus

# Generic type for domain models
T = TypeVar("T", bound=MongoBaseModel)


def to_object_id(document_id: str) -> ObjectId:
    """Parse a string id, turning malformed input into a PersistenceError."""
    try:
        return ObjectId(document_id)
    except (InvalidId, TypeError) as e:
        raise PersistenceError(f"Invalid document id: {document_id!r}") from e


class BaseRepository(Generic[T]):
    """
    Generic async repository for MongoDB collections.
    Typed insert and paged query operations for domain models.

    Driver failures surface as PersistenceError so callers handle one
    error type regardless of what went wrong underneath.

    Usage:
        class ConversationRepository(BaseRepository[Conversation]):
            def __init__(self, database: AsyncIOMotorDatabase):
                super().__init__(database, "conversations", Conversation)
    """

    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        collection_name: str,
        model_class: Type[T]
    ):
        """
        Initialize repository with database connection and model type.

        Args:
            database: Motor database instance
            collection_name: MongoDB collection name
            model_class: Pydantic model class for type safety
        """
        self.database = database
        self.collection: AsyncIOMotorCollection = database[collection_name]
        self.model_class = model_class
        self.collection_name = collection_name

    async def create(self, document: T) -> T:
        """
        Insert a new document into the collection.

        Args:
            document: Domain model instance to persist

        Returns:
            The created document with `_id` populated

        Raises:
            PersistenceError: If the insert fails
        """
        now = utc_now()
        document.created_at = now
        document.updated_at = now

        doc_dict = document.to_document()

        try:
            result = await self.collection.insert_one(doc_dict)
        except PyMongoError as e:
            raise PersistenceError(
                f"Failed to insert into {self.collection_name}: {e}"
            ) from e

        logger.debug(
            f"Created document in {self.collection_name}",
            extra={"document_id": str(result.inserted_id)}
        )

        document.id = str(result.inserted_id)
        return document

    async def find_many(
        self,
        filter_dict: Dict[str, Any],
        limit: int = 100,
        skip: int = 0,
        sort: Optional[List[tuple]] = None
    ) -> List[T]:
        """
        Retrieve multiple documents matching the filter.

        Args:
            filter_dict: MongoDB query filter
            limit: Maximum number of documents to return
            skip: Number of documents to skip (pagination)
            sort: List of (field, direction) tuples for sorting

        Returns:
            List of domain model instances
        """
        cursor = self.collection.find(filter_dict)

        if sort:
            cursor = cursor.sort(sort)

        cursor = cursor.skip(skip).limit(limit)

        try:
            docs = await cursor.to_list(length=limit)
        except PyMongoError as e:
            raise PersistenceError(
                f"Failed to query {self.collection_name}: {e}"
            ) from e

        return [self._to_model(doc) for doc in docs]

    def _to_model(self, doc: Dict[str, Any]) -> T:
        """
        Convert MongoDB document to Pydantic model instance.

        Args:
            doc: Raw MongoDB document dict

        Returns:
            Domain model instance
        """
        if "_id" in doc:
            doc["_id"] = str(doc["_id"])

        model_fields = self.model_class.model_fields.keys()

        cleaned_doc = {
            k: v for k, v in doc.items()
            if k in model_fields or k == "_id"
        }

        return self.model_class.model_validate(cleaned_doc)


class MessageStore(Protocol):
    """
    Persistence capability used by the delivery queue and outbound sender.

    Both operations raise PersistenceError on failure.
    """

    async def save(self, record: Message) -> Message:
        ...

    async def update_status(self, message_id: str, status: DeliveryStatus) -> Message:
        ...
