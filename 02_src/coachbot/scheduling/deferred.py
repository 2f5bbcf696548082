"""Deferred message scheduler: deliver a reply at a later wall-clock time."""

import asyncio
import heapq
import itertools
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from ..clock import IClock
from ..event_bus import IEventBus
from ..logging_config import get_logger
from ..models import BusMessage, Reply, Topic
from ..tracker import ITracker

logger = get_logger(__name__)


@dataclass(order=True)
class DeferredMessage:
    """A reply waiting for its delivery time."""

    deliver_at: datetime
    seq: int
    user_id: str = field(compare=False)
    reply: Reply = field(compare=False)


class IDeferredScheduler(Protocol):
    """Queue of (deliver_at -> message) drained by a periodic poll."""

    def schedule(self, user_id: str, reply: Reply, deliver_at: datetime) -> DeferredMessage:
        """Queue ``reply`` for ``user_id`` at ``deliver_at``."""
        ...

    def discard(self, user_id: str) -> int:
        """Drop every pending message for a user. Returns how many were dropped."""
        ...


class DeferredScheduler:
    """
    Min-heap of pending messages.

    Due entries are removed before they are published, so a message is
    handed to delivery at most once and never retried.
    """

    def __init__(
        self,
        event_bus: IEventBus,
        tracker: ITracker,
        clock: IClock,
        poll_seconds: float = 60,
    ):
        self._event_bus = event_bus
        self._tracker = tracker
        self._clock = clock
        self._poll_seconds = poll_seconds
        self._queue: list[DeferredMessage] = []
        self._seq = itertools.count()
        self._task: asyncio.Task | None = None
        self._running = False

    def schedule(self, user_id: str, reply: Reply, deliver_at: datetime) -> DeferredMessage:
        message = DeferredMessage(
            deliver_at=deliver_at, seq=next(self._seq), user_id=user_id, reply=reply
        )
        heapq.heappush(self._queue, message)
        logger.info("Deferred message for %s scheduled at %s", user_id, deliver_at.isoformat())
        return message

    def discard(self, user_id: str) -> int:
        kept = [m for m in self._queue if m.user_id != user_id]
        dropped = len(self._queue) - len(kept)
        if dropped:
            heapq.heapify(kept)
            self._queue = kept
        return dropped

    def clear(self) -> None:
        """Drop every pending message."""
        self._queue.clear()

    def pending_count(self, user_id: str | None = None) -> int:
        if user_id is None:
            return len(self._queue)
        return sum(1 for m in self._queue if m.user_id == user_id)

    def pending(self) -> list[DeferredMessage]:
        return sorted(self._queue)

    async def poll_once(self) -> int:
        """Publish every due message. Returns how many were published."""
        now = self._clock.now()
        due: list[DeferredMessage] = []
        while self._queue and self._queue[0].deliver_at <= now:
            due.append(heapq.heappop(self._queue))

        for message in due:
            try:
                await self._event_bus.publish(
                    BusMessage(
                        id=str(uuid.uuid4()),
                        topic=Topic.OUTPUT,
                        payload={
                            "user_id": message.user_id,
                            "reply": message.reply.to_dict(),
                        },
                        source="deferred_scheduler",
                        timestamp=now,
                    )
                )
            except Exception as e:
                logger.error("Deferred message for %s not delivered: %s", message.user_id, e)
                continue

            await self._tracker.track(
                event_type="deferred_delivered",
                actor="deferred_scheduler",
                data={
                    "user_id": message.user_id,
                    "scheduled_for": message.deliver_at.isoformat(),
                    "text": message.reply.text[:100],
                },
            )

        return len(due)

    def start(self) -> None:
        """Start the background poll loop."""
        if self._task is None:
            self._running = True
            self._task = asyncio.create_task(self._poll_loop())

    async def stop(self) -> None:
        """Stop the poll loop. Pending messages are dropped with the process."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _poll_loop(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self._poll_seconds)
                await self.poll_once()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Deferred poll error: %s", e, exc_info=True)
