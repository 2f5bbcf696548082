"""Tests for EventBus."""

from datetime import datetime, timezone

from coachbot.models import BusMessage, Topic


def _message(topic: Topic = Topic.OUTPUT, payload: dict | None = None, id: str = "bus1") -> BusMessage:
    return BusMessage(
        id=id,
        topic=topic,
        payload=payload if payload is not None else {"user_id": "u1", "reply": {"text": "hi"}},
        source="test",
        timestamp=datetime.now(timezone.utc),
    )


class TestEventBusSubscribe:
    """Tests for EventBus subscription."""

    async def test_every_topic_has_a_handler_list(self, event_bus):
        assert set(event_bus._subscribers) == set(Topic)

    async def test_subscribe_multiple_handlers(self, event_bus):
        """Test subscribing multiple handlers to same topic."""

        async def handler1(msg: BusMessage):
            pass

        async def handler2(msg: BusMessage):
            pass

        event_bus.subscribe(Topic.OUTPUT, handler1)
        event_bus.subscribe(Topic.OUTPUT, handler2)

        assert len(event_bus._subscribers[Topic.OUTPUT]) == 2

    async def test_unsubscribe(self, event_bus):
        """Test that an unsubscribed handler no longer receives messages."""
        calls = []

        async def handler(msg: BusMessage):
            calls.append(msg)

        event_bus.subscribe(Topic.OUTPUT, handler)
        event_bus.unsubscribe(Topic.OUTPUT, handler)
        await event_bus.publish(_message())

        assert calls == []

    async def test_unsubscribe_unknown_handler_is_noop(self, event_bus):
        async def handler(msg: BusMessage):
            pass

        event_bus.unsubscribe(Topic.TURN, handler)


class TestEventBusPublish:
    """Tests for EventBus publishing."""

    async def test_publish_multiple_subscribers(self, event_bus):
        """Test publishing to multiple subscribers in subscription order."""
        calls = []

        async def handler1(msg: BusMessage):
            calls.append(("h1", msg.id))

        async def handler2(msg: BusMessage):
            calls.append(("h2", msg.id))

        event_bus.subscribe(Topic.OUTPUT, handler1)
        event_bus.subscribe(Topic.OUTPUT, handler2)

        await event_bus.publish(_message())

        assert calls == [("h1", "bus1"), ("h2", "bus1")]

    async def test_publish_different_topics(self, event_bus):
        """Test that subscribers only receive messages from their topic."""
        turn_calls = []
        output_calls = []

        async def turn_handler(msg: BusMessage):
            turn_calls.append(msg)

        async def output_handler(msg: BusMessage):
            output_calls.append(msg)

        event_bus.subscribe(Topic.TURN, turn_handler)
        event_bus.subscribe(Topic.OUTPUT, output_handler)

        await event_bus.publish(_message(topic=Topic.TURN, payload={"user_id": "u1"}))

        assert len(turn_calls) == 1
        assert output_calls == []

    async def test_publish_persists_message(self, event_bus, storage):
        """Test that published messages are persisted, even without subscribers."""
        await event_bus.publish(_message())

        [stored] = await storage.get_bus_messages()
        assert stored.id == "bus1"
        assert stored.topic == Topic.OUTPUT

    async def test_publish_assigns_missing_id(self, event_bus, storage):
        message = _message(id="")

        await event_bus.publish(message)

        assert message.id
        assert (await storage.get_bus_messages())[0].id == message.id

    async def test_publish_error_in_handler(self, event_bus, storage, caplog):
        """Test that errors in one handler don't affect others or the publisher."""
        calls = []

        async def failing_handler(msg: BusMessage):
            calls.append("failing")
            raise RuntimeError("Test error")

        async def normal_handler(msg: BusMessage):
            calls.append("normal")

        event_bus.subscribe(Topic.OUTPUT, failing_handler)
        event_bus.subscribe(Topic.OUTPUT, normal_handler)

        await event_bus.publish(_message())

        assert calls == ["failing", "normal"]
        assert "Test error" in caplog.text
        assert len(await storage.get_bus_messages()) == 1
