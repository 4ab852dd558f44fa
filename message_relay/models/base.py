import datetime as dt
from typing import Annotated, Any, ClassVar, Dict, Optional
from pydantic import BaseModel, Field, ConfigDict, BeforeValidator, field_serializer

# Stored ObjectIds surface as plain strings
PyObjectId = Annotated[str, BeforeValidator(str)]


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class MongoBaseModel(BaseModel):
    """Document shape shared by every stored collection."""
    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        extra='forbid'
    )

    # Fields computed at read time (aggregations) and never written back
    read_only_fields: ClassVar[frozenset[str]] = frozenset()

    id: Optional[PyObjectId] = Field(None, alias="_id")
    created_at: dt.datetime = Field(default_factory=utc_now)
    updated_at: dt.datetime = Field(default_factory=utc_now)

    def to_document(self) -> Dict[str, Any]:
        """Dict ready for insert_one: no `_id`, no unset optionals, no read-only fields."""
        return self.model_dump(
            by_alias=True,
            exclude={"id", *self.read_only_fields},
            exclude_none=True
        )

    @field_serializer("created_at", "updated_at", when_used="json")
    def serialize_dt(self, value: dt.datetime):
        return value.isoformat()
