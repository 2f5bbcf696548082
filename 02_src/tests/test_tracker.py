"""Tests for Tracker."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

from coachbot.models import BusMessage, Topic


class TestTrackerTrack:
    """Tests for Tracker.track() method."""

    async def test_track_creates_event(self, tracker, storage):
        """Test that track() creates a TraceEvent."""
        await tracker.track(
            event_type="stage_handoff",
            actor="orchestrator",
            data={"user_id": "u1", "from": "verification", "to": "goal_intake"},
        )

        events = await storage.get_trace_events()
        assert len(events) == 1
        assert events[0].event_type == "stage_handoff"
        assert events[0].actor == "orchestrator"
        assert events[0].data["to"] == "goal_intake"

    async def test_track_generates_id_and_timestamp(self, tracker, storage):
        before = datetime.now(timezone.utc)
        await tracker.track(event_type="reminder_sent", actor="reminder_engine", data={})
        after = datetime.now(timezone.utc)

        [event] = await storage.get_trace_events()
        assert event.id
        assert before <= event.timestamp <= after

    async def test_storage_failure_is_logged_not_raised(self, event_bus, caplog):
        """Test that a broken audit store never breaks a turn."""
        from coachbot.tracker import Tracker

        broken = AsyncMock()
        broken.save_trace_event.side_effect = RuntimeError("disk full")
        tracker = Tracker(event_bus=event_bus, storage=broken)

        await tracker.track(event_type="message_received", actor="orchestrator", data={})

        assert "disk full" in caplog.text


class TestTrackerSubscription:
    """Tests for Tracker EventBus subscription."""

    async def test_subscription_event_data(self, tracker, event_bus, storage):
        """Test that bus traffic on every topic becomes a TraceEvent."""
        await tracker.start()

        for topic, source in ((Topic.TURN, "orchestrator"), (Topic.OUTPUT, "reminder_engine")):
            await event_bus.publish(
                BusMessage(
                    id=f"bus-{topic.value}",
                    topic=topic,
                    payload={"user_id": "u1"},
                    source=source,
                    timestamp=datetime.now(timezone.utc),
                )
            )

        events = await storage.get_trace_events(event_types=["bus_message_published"])
        assert {e.data["topic"] for e in events} == {"turn", "output"}
        assert {e.data["source"] for e in events} == {"orchestrator", "reminder_engine"}
        assert all(e.actor == "event_bus" for e in events)

        await tracker.stop()

    async def test_stop_unsubscribes(self, tracker, event_bus, storage):
        await tracker.start()
        await tracker.stop()

        await event_bus.publish(
            BusMessage(
                id="bus1",
                topic=Topic.TURN,
                payload={},
                source="orchestrator",
                timestamp=datetime.now(timezone.utc),
            )
        )

        assert await storage.get_trace_events() == []
