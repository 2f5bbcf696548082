"""Tracing and observability data models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class TraceEvent:
    """A single observability event (turns, handoffs, deliveries)."""

    id: str
    event_type: str  # e.g. "message_received", "stage_handoff"
    actor: str  # component that created this event
    data: dict  # self-contained data for display
    timestamp: datetime
