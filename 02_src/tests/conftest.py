"""Pytest configuration and fixtures."""

import sys
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from coachbot.config import Settings  # noqa: E402
from coachbot.directory import Member, match_members  # noqa: E402
from coachbot.errors import DirectoryError  # noqa: E402


class FakeTransport:
    """Records every reply instead of calling WhatsApp."""

    def __init__(self):
        self.sent: list[tuple[str, object]] = []
        self.fail_with: Exception | None = None
        self.closed = False

    async def send(self, user_id, reply) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append((user_id, reply))

    async def close(self) -> None:
        self.closed = True

    def texts_for(self, user_id: str) -> list[str]:
        return [reply.text for uid, reply in self.sent if uid == user_id]


class FakeDirectory:
    """In-memory member directory."""

    def __init__(self, members: list[Member]):
        self.members = members
        self.fail = False
        self.calls: list[str] = []

    async def search(self, name_query: str) -> list[Member]:
        self.calls.append(name_query)
        if self.fail:
            raise DirectoryError("directory down")
        return match_members(self.members, name_query)

    async def close(self) -> None:
        pass


MEMBERS = [
    Member("Dana", "Levi", "0501111111", "1990-04-12", "101"),
    Member("Noam", "Cohen", "0502222222", "1985-09-30", "102"),
    Member("Maya", "Katz", "0503333333", "1995-01-05", "103"),
    Member("Maya", "Peretz", "0504444444", "1993-07-21", "104"),
]


@pytest.fixture
def settings():
    """Settings with deterministic values, independent of the environment."""
    return replace(
        Settings(),
        whatsapp_token="test-token",
        phone_number_id="PHONE_ID",
        verify_token="verify-me",
        coach_phone="+972-50-999-9999",
        timezone="UTC",
        pre_workout_hours=(6, 12),
        post_workout_hours=(17, 23),
        exercises=("BACK SQUAT", "BENCH PRESS", "DEADLIFT"),
        reset_keywords=("restart",),
        escalation_keywords=("coach", "human"),
        summary_keywords=("summary",),
        strict_handoffs=False,
        history_window=5,
        history_limit=10,
        database_url=":memory:",
    )


@pytest.fixture
def clock():
    """Manual clock starting Monday 2024-01-01 09:00 UTC."""
    from coachbot.clock import ManualClock

    return ManualClock(datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc))


@pytest_asyncio.fixture
async def storage():
    """Create in-memory storage for testing."""
    from coachbot.storage import Storage

    st = Storage(":memory:")
    await st.init()
    yield st
    await st.close()


@pytest.fixture
def event_bus(storage):
    """Create EventBus with storage."""
    from coachbot.event_bus import EventBus

    return EventBus(storage)


@pytest.fixture
def tracker(storage, event_bus):
    """Create Tracker with storage and event bus."""
    from coachbot.tracker import Tracker

    return Tracker(event_bus=event_bus, storage=storage)


@pytest.fixture
def mock_llm():
    """Create mock LLM provider."""
    llm = Mock()
    llm.complete = AsyncMock(return_value="Test response")
    return llm


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def directory():
    return FakeDirectory(list(MEMBERS))


@pytest.fixture
def registry():
    from coachbot.stages import build_default_registry

    return build_default_registry()


@pytest.fixture
def sessions(registry, clock, settings):
    from coachbot.sessions import SessionStore

    return SessionStore(registry, clock, history_limit=settings.history_limit)


@pytest_asyncio.fixture
async def output_router(event_bus, transport, tracker):
    from coachbot.output_router import OutputRouter

    router = OutputRouter(event_bus, transport, tracker)
    await router.start()
    yield router
    await router.stop()


@pytest.fixture
def scheduler(event_bus, tracker, clock):
    from coachbot.scheduling import DeferredScheduler

    return DeferredScheduler(event_bus, tracker, clock, poll_seconds=60)


@pytest.fixture
def reminders(sessions, event_bus, tracker, clock):
    from coachbot.scheduling import ReminderEngine

    return ReminderEngine(sessions, event_bus, tracker, clock, 12, 24, poll_seconds=60)


@pytest.fixture
def orchestrator(
    registry, sessions, mock_llm, scheduler, reminders, output_router,
    event_bus, tracker, clock, settings, directory,
):
    """Orchestrator wired to fakes; the poll loops are not started."""
    from coachbot.dialogue import FallbackDelegate, Orchestrator

    return Orchestrator(
        registry=registry,
        sessions=sessions,
        fallback=FallbackDelegate(mock_llm, clock, window=settings.history_window),
        scheduler=scheduler,
        reminders=reminders,
        output_router=output_router,
        event_bus=event_bus,
        tracker=tracker,
        clock=clock,
        settings=settings,
        directory=directory,
    )


@pytest.fixture
def stage_ctx(settings, clock, directory):
    """Build a StageContext for direct stage tests."""
    from coachbot.stages import StageContext

    def _make(profile: dict | None = None, now: datetime | None = None):
        return StageContext(
            user_id="972500000001",
            profile=profile if profile is not None else {},
            now=now or clock.now(),
            settings=settings,
            directory=directory,
        )

    return _make


@pytest_asyncio.fixture
async def application(settings, mock_llm, transport, directory, clock):
    """Started Application with every external collaborator faked."""
    from coachbot.app import Application

    app = Application(
        settings=settings,
        db_path=":memory:",
        llm_provider=mock_llm,
        transport=transport,
        directory=directory,
        clock=clock,
    )
    await app.start()
    yield app
    await app.stop()
