"""Tests for data models."""

from datetime import datetime, timezone

import pytest

from coachbot.models import (
    BusMessage,
    ConversationHistory,
    HistoryTurn,
    InboundMessage,
    MessageKind,
    ReminderTier,
    Reply,
    Session,
    Topic,
    TraceEvent,
)

TS = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


class TestReply:
    """Tests for Reply model."""

    def test_create_text_only(self):
        """Test creating a reply without buttons."""
        reply = Reply("Hello")
        assert reply.text == "Hello"
        assert reply.buttons == []

    def test_three_buttons_allowed(self):
        """Test the button limit boundary."""
        reply = Reply("Pick", ["A", "B", "C"])
        assert len(reply.buttons) == 3

    def test_four_buttons_rejected(self):
        """Test that more than three buttons raises."""
        with pytest.raises(ValueError, match="At most 3"):
            Reply("Pick", ["A", "B", "C", "D"])

    def test_dict_form(self):
        """Test the payload form used on the bus."""
        reply = Reply("Pick", ["Yes", "No"])
        assert reply.to_dict() == {"text": "Pick", "buttons": ["Yes", "No"]}
        assert Reply.from_dict({"text": "Pick", "buttons": None}) == Reply("Pick")

    def test_to_dict_copies_buttons(self):
        """Test that the payload does not alias the reply's list."""
        reply = Reply("Pick", ["Yes"])
        reply.to_dict()["buttons"].append("No")
        assert reply.buttons == ["Yes"]


class TestInboundMessage:
    """Tests for InboundMessage model."""

    def test_defaults_to_text(self):
        msg = InboundMessage(user_id="972500000001", body="hi")
        assert msg.kind == MessageKind.TEXT

    def test_button_reply(self):
        msg = InboundMessage(user_id="972500000001", body="Yes", kind=MessageKind.BUTTON_REPLY)
        assert msg.kind == "button_reply"


class TestConversationHistory:
    """Tests for ConversationHistory."""

    def test_drops_oldest_when_full(self):
        """Test that the history never exceeds its limit."""
        history = ConversationHistory(limit=3)
        for i in range(5):
            history.add(HistoryTurn("user", str(i), TS))

        assert [t.content for t in history.get_all()] == ["2", "3", "4"]
        assert len(history) == 3

    def test_window_opens_on_user_turn(self):
        """Test that a leading assistant turn is trimmed from the window."""
        history = ConversationHistory()
        history.add(HistoryTurn("user", "q1", TS))
        history.add(HistoryTurn("assistant", "a1", TS))
        history.add(HistoryTurn("user", "q2", TS))
        history.add(HistoryTurn("assistant", "a2", TS))

        assert [t.content for t in history.window(3)] == ["q2", "a2"]
        assert [t.content for t in history.window(4)] == ["q1", "a1", "q2", "a2"]

    def test_empty_window(self):
        history = ConversationHistory()
        history.add(HistoryTurn("user", "q1", TS))
        assert history.window(0) == []

    def test_clear(self):
        history = ConversationHistory()
        history.add(HistoryTurn("user", "q1", TS))
        history.clear()
        assert len(history) == 0


class TestSession:
    """Tests for Session model."""

    def test_defaults(self):
        session = Session(user_id="u1", current_stage="verification", created_at=TS, last_interaction_at=TS)
        assert session.stage_data == {}
        assert session.profile == {}
        assert session.reminder_tier == ReminderTier.NONE
        assert len(session.history) == 0

    def test_snapshot(self):
        """Test the JSON-friendly view."""
        session = Session(
            user_id="u1",
            current_stage="checkin",
            created_at=TS,
            last_interaction_at=TS,
            stage_data={"checkin": {"state": "idle", "entries": []}},
            profile={"name": "Dana Levi"},
            reminder_tier=ReminderTier.FIRST,
        )
        session.history.add(HistoryTurn("user", "hi", TS))

        snapshot = session.snapshot()

        assert snapshot["current_stage"] == "checkin"
        assert snapshot["reminder_tier"] == "first"
        assert snapshot["profile"] == {"name": "Dana Levi"}
        assert snapshot["created_at"] == "2024-01-01T09:00:00+00:00"
        assert snapshot["history"] == [
            {"role": "user", "content": "hi", "timestamp": "2024-01-01T09:00:00+00:00"}
        ]


class TestBusMessage:
    """Tests for BusMessage model."""

    def test_topic_values(self):
        """Test topic string values."""
        assert Topic.TURN == "turn"
        assert Topic.OUTPUT == "output"
        assert Topic("output") is Topic.OUTPUT

    def test_create_bus_message(self):
        msg = BusMessage(
            id="bus1",
            topic=Topic.OUTPUT,
            payload={"user_id": "u1", "reply": {"text": "hi", "buttons": []}},
            source="deferred_scheduler",
            timestamp=TS,
        )
        assert msg.topic == Topic.OUTPUT
        assert msg.payload["user_id"] == "u1"


class TestTraceEvent:
    """Tests for TraceEvent model."""

    def test_create_trace_event(self):
        event = TraceEvent(
            id="trace1",
            event_type="stage_handoff",
            actor="orchestrator",
            data={"user_id": "u1", "from": "verification", "to": "goal_intake"},
            timestamp=TS,
        )
        assert event.event_type == "stage_handoff"
        assert event.data["to"] == "goal_intake"
