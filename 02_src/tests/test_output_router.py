"""Tests for OutputRouter."""

from datetime import datetime, timezone

import httpx

from coachbot.errors import DeliveryError
from coachbot.models import BusMessage, Reply, Topic
from coachbot.output_router import OutputRouter


def _output(payload: dict, source: str = "reminder_engine") -> BusMessage:
    return BusMessage(
        id="bus1",
        topic=Topic.OUTPUT,
        payload=payload,
        source=source,
        timestamp=datetime.now(timezone.utc),
    )


class TestOutputRouterStart:
    """Tests for OutputRouter start/stop."""

    async def test_start_and_stop(self, event_bus, transport, tracker):
        router = OutputRouter(event_bus, transport, tracker)

        await router.start()
        assert len(event_bus._subscribers[Topic.OUTPUT]) == 1

        await router.stop()
        assert event_bus._subscribers[Topic.OUTPUT] == []


class TestOutputRouterDeliver:
    """Tests for OutputRouter.deliver()."""

    async def test_deliver_success(self, output_router, transport, storage):
        ok = await output_router.deliver("u1", Reply("Hello", ["Yes", "No"]), source="orchestrator")

        assert ok is True
        assert transport.sent == [("u1", Reply("Hello", ["Yes", "No"]))]
        [event] = await storage.get_trace_events(event_types=["output_delivered"])
        assert event.data["target_user_id"] == "u1"
        assert event.data["source"] == "orchestrator"

    async def test_delivery_error_is_reported_not_raised(self, output_router, transport, storage):
        transport.fail_with = DeliveryError("400 Bad Request")

        ok = await output_router.deliver("u1", Reply("Hello"), source="orchestrator")

        assert ok is False
        [event] = await storage.get_trace_events(event_types=["output_failed"])
        assert "400 Bad Request" in event.data["error"]

    async def test_http_error_is_reported_not_raised(self, output_router, transport):
        transport.fail_with = httpx.ConnectError("connection refused")

        assert await output_router.deliver("u1", Reply("Hello"), source="orchestrator") is False


class TestOutputRouterBus:
    """Tests for OUTPUT bus messages."""

    async def test_output_message_is_delivered(self, output_router, event_bus, transport, storage):
        await event_bus.publish(
            _output({"user_id": "u1", "reply": {"text": "Reminder", "buttons": ["Continue"]}})
        )

        assert transport.sent == [("u1", Reply("Reminder", ["Continue"]))]
        [event] = await storage.get_trace_events(event_types=["output_delivered"])
        assert event.data["source"] == "reminder_engine"

    async def test_output_without_user_is_dropped(self, output_router, event_bus, transport):
        await event_bus.publish(_output({"reply": {"text": "Nobody"}}))

        assert transport.sent == []
