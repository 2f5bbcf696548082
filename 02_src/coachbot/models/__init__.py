"""Core data models for the coach bot."""

from .bus import BusMessage, Topic
from .history import ConversationHistory, HistoryTurn
from .messages import BUTTON_TITLE_LIMIT, MAX_BUTTONS, InboundMessage, MessageKind, Reply
from .session import ReminderTier, Session
from .tracing import TraceEvent

__all__ = [
    # Messages
    "InboundMessage",
    "MessageKind",
    "Reply",
    "MAX_BUTTONS",
    "BUTTON_TITLE_LIMIT",
    # Sessions
    "Session",
    "ReminderTier",
    "ConversationHistory",
    "HistoryTurn",
    # Bus
    "BusMessage",
    "Topic",
    # Tracing
    "TraceEvent",
]
