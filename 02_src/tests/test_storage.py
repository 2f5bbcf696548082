"""Tests for Storage."""

from datetime import datetime, timedelta, timezone

import pytest

from coachbot.models import BusMessage, Topic, TraceEvent
from coachbot.storage import Storage

TS = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


def _event(i: int, event_type: str = "message_received", actor: str = "orchestrator") -> TraceEvent:
    return TraceEvent(
        id=f"trace{i}",
        event_type=event_type,
        actor=actor,
        data={"user_id": "u1", "n": i},
        timestamp=TS + timedelta(seconds=i),
    )


class TestStorageInit:
    """Tests for Storage initialization."""

    async def test_init_creates_tables(self, storage):
        """Test that init creates the audit tables."""
        async with storage._conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table'"
        ) as cursor:
            tables = [row[0] for row in await cursor.fetchall()]
        assert "trace_events" in tables
        assert "bus_messages" in tables

    async def test_uninitialized_storage_raises(self):
        """Test that use before init fails loudly."""
        storage = Storage(":memory:")
        with pytest.raises(RuntimeError, match="not initialized"):
            await storage.save_trace_event(_event(1))

    async def test_close_is_idempotent(self):
        storage = Storage(":memory:")
        await storage.init()
        await storage.close()
        await storage.close()


class TestStorageTraceEvents:
    """Tests for trace event storage."""

    async def test_round_trip(self, storage):
        """Test that a saved event is read back unchanged."""
        await storage.save_trace_event(_event(1))

        [event] = await storage.get_trace_events()

        assert event.id == "trace1"
        assert event.data == {"user_id": "u1", "n": 1}
        assert event.timestamp == TS + timedelta(seconds=1)

    async def test_newest_first(self, storage):
        for i in range(3):
            await storage.save_trace_event(_event(i))

        events = await storage.get_trace_events()

        assert [e.id for e in events] == ["trace2", "trace1", "trace0"]

    async def test_limit(self, storage):
        for i in range(10):
            await storage.save_trace_event(_event(i))

        events = await storage.get_trace_events(limit=5)

        assert len(events) == 5

    async def test_filter_by_actor(self, storage):
        await storage.save_trace_event(_event(1, actor="orchestrator"))
        await storage.save_trace_event(_event(2, actor="output_router"))

        events = await storage.get_trace_events(actor="output_router")

        assert [e.id for e in events] == ["trace2"]

    async def test_filter_by_type(self, storage):
        await storage.save_trace_event(_event(1, event_type="stage_handoff"))
        await storage.save_trace_event(_event(2, event_type="reminder_sent"))
        await storage.save_trace_event(_event(3, event_type="fallback_used"))

        events = await storage.get_trace_events(event_types=["stage_handoff", "fallback_used"])

        assert {e.id for e in events} == {"trace1", "trace3"}

    async def test_filter_after(self, storage):
        for i in range(4):
            await storage.save_trace_event(_event(i))

        events = await storage.get_trace_events(after=TS + timedelta(seconds=1))

        assert {e.id for e in events} == {"trace2", "trace3"}


class TestStorageBusMessages:
    """Tests for bus message storage."""

    async def test_round_trip(self, storage):
        msg = BusMessage(
            id="bus1",
            topic=Topic.OUTPUT,
            payload={"user_id": "u1", "reply": {"text": "hi", "buttons": ["Yes"]}},
            source="reminder_engine",
            timestamp=TS,
        )
        await storage.save_bus_message(msg)

        [stored] = await storage.get_bus_messages()

        assert stored == msg


class TestStorageClear:
    """Tests for clearing storage."""

    async def test_clear_all_data(self, storage):
        await storage.save_trace_event(_event(1))
        await storage.save_bus_message(
            BusMessage(id="bus1", topic=Topic.TURN, payload={}, source="orchestrator", timestamp=TS)
        )

        await storage.clear()

        assert await storage.get_trace_events() == []
        assert await storage.get_bus_messages() == []
