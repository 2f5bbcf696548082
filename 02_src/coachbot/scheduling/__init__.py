"""Timed outbound messages: deferred replies and inactivity reminders."""

from .deferred import DeferredMessage, DeferredScheduler, IDeferredScheduler
from .reminders import IReminderEngine, ReminderEngine, ReminderRecord, reminder_text

__all__ = [
    "DeferredMessage",
    "DeferredScheduler",
    "IDeferredScheduler",
    "IReminderEngine",
    "ReminderEngine",
    "ReminderRecord",
    "reminder_text",
]
