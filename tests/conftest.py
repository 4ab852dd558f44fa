import os

os.environ.setdefault("ENVIRONMENT", "test")

import pytest
import datetime as dt
from unittest.mock import AsyncMock

from message_relay.message_queue import QueuedMessage
from message_relay.models.message import Message, MessageKind


@pytest.fixture
def inbound_message():
    """Returns an inbound sms as the webhook would queue it."""
    return QueuedMessage(
        sender="+15551234567",
        recipient="+15557654321",
        kind=MessageKind.SMS,
        body="hi",
        messaging_provider_id="abc",
        timestamp=dt.datetime(2024, 1, 1, 12, 0, tzinfo=dt.UTC),
    )


@pytest.fixture
def message_store():
    """Returns a MessageStore double that assigns ids on save."""
    store = AsyncMock()

    def _save(record: Message) -> Message:
        return record.model_copy(update={"id": "65a000000000000000000001"})

    store.save = AsyncMock(side_effect=_save)
    store.update_status = AsyncMock()
    return store
