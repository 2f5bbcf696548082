"""OutputRouter implementation."""

from typing import Protocol

import httpx

from ..errors import DeliveryError
from ..event_bus import IEventBus
from ..logging_config import get_logger
from ..models import BusMessage, Reply, Topic
from ..tracker import ITracker
from ..transport import ITransport

logger = get_logger(__name__)


class IOutputRouter(Protocol):
    """Single outbound path to users."""

    async def start(self) -> None:
        """Subscribe to EventBus topic: OUTPUT."""
        ...

    async def stop(self) -> None:
        """Unsubscribe from EventBus."""
        ...

    async def deliver(self, user_id: str, reply: Reply, source: str) -> bool:
        """Send ``reply`` through the transport. Failures are logged, not raised."""
        ...


class OutputRouter:
    """Delivers direct replies and OUTPUT bus messages through the transport."""

    def __init__(
        self,
        event_bus: IEventBus,
        transport: ITransport,
        tracker: ITracker,
    ):
        self._event_bus = event_bus
        self._transport = transport
        self._tracker = tracker

    async def start(self) -> None:
        """Subscribe to OUTPUT topic."""
        self._event_bus.subscribe(Topic.OUTPUT, self._handle_output)

    async def stop(self) -> None:
        """Unsubscribe from OUTPUT topic."""
        self._event_bus.unsubscribe(Topic.OUTPUT, self._handle_output)

    async def deliver(self, user_id: str, reply: Reply, source: str) -> bool:
        """Send one reply. Returns False when the transport rejected it (no retry)."""
        try:
            await self._transport.send(user_id, reply)
        except (DeliveryError, httpx.HTTPError) as e:
            logger.error("Delivery to %s failed (%s): %s", user_id, source, e)
            await self._tracker.track(
                event_type="output_failed",
                actor="output_router",
                data={"target_user_id": user_id, "source": source, "error": str(e)},
            )
            return False

        await self._tracker.track(
            event_type="output_delivered",
            actor="output_router",
            data={
                "target_user_id": user_id,
                "source": source,
                "content_summary": reply.text[:100],
            },
        )
        return True

    async def _handle_output(self, bus_message: BusMessage) -> None:
        """Handle incoming output BusMessage."""
        payload = bus_message.payload
        user_id = payload.get("user_id")
        if not user_id:
            logger.warning("OUTPUT message without user_id from %s", bus_message.source)
            return
        reply = Reply.from_dict(payload.get("reply") or {})
        await self.deliver(user_id, reply, source=bus_message.source)
