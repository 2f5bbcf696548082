"""Fitness coach bot core."""

from .app import Application, IApplication
from .clock import IClock, ManualClock, SystemClock
from .config import Settings, load_settings
from .dialogue import FallbackDelegate, IOrchestrator, Orchestrator
from .event_bus import EventBus, IEventBus
from .llm import ILLMProvider, LLMProvider
from .models import (
    BusMessage,
    InboundMessage,
    MessageKind,
    ReminderTier,
    Reply,
    Session,
    Topic,
    TraceEvent,
)
from .output_router import IOutputRouter, OutputRouter
from .scheduling import DeferredScheduler, ReminderEngine
from .sessions import ISessionStore, SessionStore
from .stages import Outcome, StageRegistry, build_default_registry
from .storage import IStorage, Storage
from .tracker import ITracker, Tracker

__all__ = [
    # Application
    "Application",
    "IApplication",
    "Settings",
    "load_settings",
    # Models
    "BusMessage",
    "InboundMessage",
    "MessageKind",
    "ReminderTier",
    "Reply",
    "Session",
    "Topic",
    "TraceEvent",
    # Conversation
    "IOrchestrator",
    "Orchestrator",
    "FallbackDelegate",
    "Outcome",
    "StageRegistry",
    "build_default_registry",
    "ISessionStore",
    "SessionStore",
    "DeferredScheduler",
    "ReminderEngine",
    # Components
    "IClock",
    "SystemClock",
    "ManualClock",
    "IStorage",
    "Storage",
    "IEventBus",
    "EventBus",
    "ITracker",
    "Tracker",
    "ILLMProvider",
    "LLMProvider",
    "IOutputRouter",
    "OutputRouter",
]
