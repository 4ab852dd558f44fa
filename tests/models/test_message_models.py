"""Tests for message and conversation models."""
import pytest

from message_relay.models.conversation import Conversation
from message_relay.models.message import DeliveryStatus, Message, MessageKind


class TestDeliveryStatus:

    @pytest.mark.parametrize("target", [
        DeliveryStatus.SENT, DeliveryStatus.DELIVERED, DeliveryStatus.FAILED
    ])
    def test_pending_moves_forward(self, target):
        assert DeliveryStatus.PENDING.can_transition_to(target)

    @pytest.mark.parametrize("source", [
        DeliveryStatus.SENT, DeliveryStatus.DELIVERED, DeliveryStatus.FAILED
    ])
    def test_terminal_statuses_never_change(self, source):
        assert not any(source.can_transition_to(target) for target in DeliveryStatus)

    def test_nothing_goes_back_to_pending(self):
        assert DeliveryStatus.sources_for(DeliveryStatus.PENDING) == []

    def test_sources_for_sent(self):
        assert DeliveryStatus.sources_for(DeliveryStatus.SENT) == [DeliveryStatus.PENDING]


class TestMessage:

    def test_defaults(self):
        message = Message(
            from_address="+1", to_address="+2", message_type=MessageKind.SMS, body="hi"
        )

        assert message.status == DeliveryStatus.PENDING
        assert message.id is None
        assert message.timestamp.tzinfo is not None

    def test_rejects_unknown_kind(self):
        with pytest.raises(ValueError):
            Message(from_address="+1", to_address="+2", message_type="fax", body="hi")

    def test_to_document_drops_id_and_unset_fields(self):
        message = Message(
            _id="65a000000000000000000001",
            from_address="+1",
            to_address="+2",
            message_type=MessageKind.SMS,
            body="hi",
        )

        document = message.to_document()

        assert "_id" not in document
        assert "attachments" not in document
        assert document["status"] == "pending"


class TestConversation:

    def test_participants_are_sorted(self):
        conversation = Conversation(participant_one="b@x.com", participant_two="a@x.com")

        assert conversation.participant_one == "a@x.com"
        assert conversation.participant_two == "b@x.com"

    def test_participants_for_is_order_independent(self):
        assert Conversation.participants_for("+2", "+1") == Conversation.participants_for("+1", "+2")

    def test_message_count_is_never_stored(self):
        conversation = Conversation(participant_one="+1", participant_two="+2", message_count=3)

        document = conversation.to_document()

        assert "message_count" not in document
        assert document["participant_one"] == "+1"
