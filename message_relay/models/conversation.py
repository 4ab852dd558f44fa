from typing import ClassVar, Optional
from pydantic import model_validator
from message_relay.models.base import MongoBaseModel


class Conversation(MongoBaseModel):
    """
    Thread between two addresses.

    Participants are kept sorted so a->b and b->a land in the same thread.
    """
    participant_one: str
    participant_two: str
    message_count: Optional[int] = None

    read_only_fields: ClassVar[frozenset[str]] = frozenset({"message_count"})

    @model_validator(mode="after")
    def order_participants(self) -> "Conversation":
        if self.participant_one > self.participant_two:
            self.participant_one, self.participant_two = self.participant_two, self.participant_one
        return self

    @staticmethod
    def participants_for(address_a: str, address_b: str) -> tuple[str, str]:
        return tuple(sorted((address_a, address_b)))
