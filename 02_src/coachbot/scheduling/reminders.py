"""Inactivity reminders: nudge members who stopped answering."""

import asyncio
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

from ..clock import IClock
from ..event_bus import IEventBus
from ..logging_config import get_logger
from ..models import BusMessage, ReminderTier, Reply, Topic
from ..sessions import ISessionStore
from ..stages import messages as msg
from ..tracker import ITracker

logger = get_logger(__name__)


@dataclass
class ReminderRecord:
    """Armed reminder for one user."""

    user_id: str
    tier: ReminderTier
    scheduled_at: datetime


def reminder_text(stage: str, tier: ReminderTier) -> str:
    return msg.REMINDERS.get(stage, msg.DEFAULT_REMINDERS)[tier.value]


class IReminderEngine(Protocol):
    """Tiered re-engagement driven by the last user activity."""

    def arm(self, user_id: str, now: datetime) -> None:
        """Start watching the user for inactivity."""
        ...

    def clear(self, user_id: str) -> None:
        """Stop watching the user and reset their tier."""
        ...


class ReminderEngine:
    """
    Sends FIRST after ``first_after`` of silence and SECOND after
    ``second_after``. One tier per pass; the record is dropped once SECOND
    has been sent.
    """

    def __init__(
        self,
        sessions: ISessionStore,
        event_bus: IEventBus,
        tracker: ITracker,
        clock: IClock,
        first_after_hours: float = 12,
        second_after_hours: float = 24,
        poll_seconds: float = 60,
    ):
        if second_after_hours <= first_after_hours:
            raise ValueError("second_after_hours must be greater than first_after_hours")
        self._sessions = sessions
        self._event_bus = event_bus
        self._tracker = tracker
        self._clock = clock
        self._first_after = timedelta(hours=first_after_hours)
        self._second_after = timedelta(hours=second_after_hours)
        self._poll_seconds = poll_seconds
        self._records: dict[str, ReminderRecord] = {}
        self._task: asyncio.Task | None = None
        self._running = False

    def arm(self, user_id: str, now: datetime) -> None:
        self._records[user_id] = ReminderRecord(
            user_id=user_id, tier=ReminderTier.NONE, scheduled_at=now
        )

    def clear(self, user_id: str) -> None:
        self._records.pop(user_id, None)
        session = self._sessions.get(user_id)
        if session is not None:
            session.reminder_tier = ReminderTier.NONE

    def reset(self) -> None:
        """Forget every armed reminder."""
        self._records.clear()

    def tier_of(self, user_id: str) -> ReminderTier:
        record = self._records.get(user_id)
        return record.tier if record else ReminderTier.NONE

    def is_armed(self, user_id: str) -> bool:
        return user_id in self._records

    def _next_tier(self, record: ReminderRecord, elapsed: timedelta) -> ReminderTier | None:
        if record.tier == ReminderTier.NONE and elapsed >= self._first_after:
            return ReminderTier.FIRST
        if record.tier == ReminderTier.FIRST and elapsed >= self._second_after:
            return ReminderTier.SECOND
        return None

    async def poll_once(self) -> int:
        """Advance every due user by one tier. Returns how many reminders were sent."""
        sent = 0
        for user_id in list(self._records):
            async with self._sessions.lock(user_id):
                record = self._records.get(user_id)
                session = self._sessions.get(user_id)
                if record is None:
                    continue
                if session is None:
                    self._records.pop(user_id, None)
                    continue

                now = self._clock.now()
                tier = self._next_tier(record, now - session.last_interaction_at)
                if tier is None:
                    continue

                record.tier = tier
                session.reminder_tier = tier
                if tier == ReminderTier.SECOND:
                    self._records.pop(user_id, None)

                reply = Reply(reminder_text(session.current_stage, tier))
                await self._event_bus.publish(
                    BusMessage(
                        id=str(uuid.uuid4()),
                        topic=Topic.OUTPUT,
                        payload={"user_id": user_id, "reply": reply.to_dict()},
                        source="reminder_engine",
                        timestamp=now,
                    )
                )
                await self._tracker.track(
                    event_type="reminder_sent",
                    actor="reminder_engine",
                    data={
                        "user_id": user_id,
                        "tier": tier.value,
                        "stage": session.current_stage,
                    },
                )
                sent += 1
        return sent

    def start(self) -> None:
        """Start the background poll loop."""
        if self._task is None:
            self._running = True
            self._task = asyncio.create_task(self._poll_loop())

    async def stop(self) -> None:
        """Stop the poll loop."""
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
                logger.error("Reminder poll error: %s", e, exc_info=True)
