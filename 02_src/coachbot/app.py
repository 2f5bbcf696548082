"""Application bootstrap and lifecycle management."""

from typing import Protocol

from .clock import IClock, SystemClock
from .config import Settings, load_settings, resolve_db_path
from .dialogue import FallbackDelegate, Orchestrator
from .directory import ArboxDirectory, IMemberDirectory
from .event_bus import EventBus
from .llm import ILLMProvider, LLMProvider
from .logging_config import get_logger
from .output_router import OutputRouter
from .scheduling import DeferredScheduler, ReminderEngine
from .sessions import SessionStore
from .stages import StageRegistry, build_default_registry
from .storage import IStorage, Storage
from .tracker import ITracker, Tracker
from .transport import ITransport, WhatsAppTransport

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...

    async def reset(self) -> None:
        """Reset data between test runs."""
        ...


class Application:
    """
    Main application bootstrap.

    External collaborators (LLM, transport, directory, clock) are built from
    settings unless injected, which is how tests run without network access.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        db_path: str | None = None,
        llm_provider: ILLMProvider | None = None,
        transport: ITransport | None = None,
        directory: IMemberDirectory | None = None,
        clock: IClock | None = None,
        registry: StageRegistry | None = None,
    ):
        self._settings = settings or load_settings()
        env_db_path = self._settings.database_url if db_path is None else db_path
        self._db_path = resolve_db_path(env_db_path)

        self._llm = llm_provider
        self._transport = transport
        self._directory = directory
        self._clock = clock or SystemClock()
        self._registry = registry
        self._owns_transport = transport is None
        self._owns_directory = directory is None

        # Components (will be initialized in start())
        self._storage: IStorage | None = None
        self._event_bus: EventBus | None = None
        self._tracker: ITracker | None = None
        self._output_router: OutputRouter | None = None
        self._sessions: SessionStore | None = None
        self._scheduler: DeferredScheduler | None = None
        self._reminders: ReminderEngine | None = None
        self._orchestrator: Orchestrator | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")
        settings = self._settings

        # 1. Storage (no dependencies)
        self._storage = Storage(self._db_path)
        await self._storage.init()
        logger.info("Storage initialized")

        # 2. EventBus (depends on Storage for persistence)
        self._event_bus = EventBus(self._storage)

        # 3. Tracker (depends on EventBus + Storage)
        self._tracker = Tracker(self._event_bus, self._storage)
        await self._tracker.start()

        # 4. External collaborators
        if self._llm is None:
            self._llm = LLMProvider(model=settings.llm_model, timeout=settings.llm_timeout_seconds)
        if self._transport is None:
            self._transport = WhatsAppTransport(
                token=settings.whatsapp_token,
                phone_number_id=settings.phone_number_id,
                base_url=settings.whatsapp_api_url,
            )
        if self._directory is None:
            self._directory = ArboxDirectory(
                api_key=settings.arbox_api_key, base_url=settings.arbox_api_url
            )
        logger.info("External clients initialized")

        # 5. OutputRouter (depends on EventBus + transport)
        self._output_router = OutputRouter(self._event_bus, self._transport, self._tracker)
        await self._output_router.start()

        # 6. Stages and sessions
        if self._registry is None:
            self._registry = build_default_registry()
        else:
            self._registry.validate()
        self._sessions = SessionStore(
            self._registry, self._clock, history_limit=settings.history_limit
        )

        # 7. Timers
        self._scheduler = DeferredScheduler(
            self._event_bus,
            self._tracker,
            self._clock,
            poll_seconds=settings.deferred_poll_seconds,
        )
        self._reminders = ReminderEngine(
            self._sessions,
            self._event_bus,
            self._tracker,
            self._clock,
            first_after_hours=settings.reminder_first_after_hours,
            second_after_hours=settings.reminder_second_after_hours,
            poll_seconds=settings.reminder_poll_seconds,
        )

        # 8. Orchestrator
        self._orchestrator = Orchestrator(
            registry=self._registry,
            sessions=self._sessions,
            fallback=FallbackDelegate(self._llm, self._clock, window=settings.history_window),
            scheduler=self._scheduler,
            reminders=self._reminders,
            output_router=self._output_router,
            event_bus=self._event_bus,
            tracker=self._tracker,
            clock=self._clock,
            settings=settings,
            directory=self._directory,
        )

        self._scheduler.start()
        self._reminders.start()
        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if self._reminders:
            await self._reminders.stop()
        if self._scheduler:
            await self._scheduler.stop()
        if self._output_router:
            await self._output_router.stop()
        if self._tracker:
            await self._tracker.stop()
        if self._transport and self._owns_transport:
            await self._transport.close()
        if self._directory and self._owns_directory:
            await self._directory.close()
        if self._storage:
            await self._storage.close()
            logger.info("Storage closed")

    async def reset(self) -> None:
        """Reset data between test runs."""
        # 1. Pause timers
        if self._reminders:
            await self._reminders.stop()
        if self._scheduler:
            await self._scheduler.stop()

        # 2. Forget sessions and pending messages
        if self._sessions:
            self._sessions.clear()
        if self._scheduler:
            self._scheduler.clear()
        if self._reminders:
            self._reminders.reset()

        # 3. Clear storage
        if self._storage:
            await self._storage.clear()
            logger.info("Storage cleared")

        # 4. Restart timers
        if self._scheduler:
            self._scheduler.start()
        if self._reminders:
            self._reminders.start()
        logger.info("Reset complete")

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def clock(self) -> IClock:
        return self._clock

    @property
    def storage(self) -> IStorage:
        """Get storage instance."""
        if not self._storage:
            raise RuntimeError("Application not started")
        return self._storage

    @property
    def tracker(self) -> ITracker:
        """Get tracker instance."""
        if not self._tracker:
            raise RuntimeError("Application not started")
        return self._tracker

    @property
    def orchestrator(self) -> Orchestrator:
        """Get orchestrator instance."""
        if not self._orchestrator:
            raise RuntimeError("Application not started")
        return self._orchestrator

    @property
    def sessions(self) -> SessionStore:
        """Get session store instance."""
        if not self._sessions:
            raise RuntimeError("Application not started")
        return self._sessions

    @property
    def scheduler(self) -> DeferredScheduler:
        """Get deferred scheduler instance."""
        if not self._scheduler:
            raise RuntimeError("Application not started")
        return self._scheduler

    @property
    def reminders(self) -> ReminderEngine:
        """Get reminder engine instance."""
        if not self._reminders:
            raise RuntimeError("Application not started")
        return self._reminders
