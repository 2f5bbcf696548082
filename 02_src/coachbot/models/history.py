"""Bounded conversation history used as AI context."""

from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Literal


@dataclass
class HistoryTurn:
    """A single message in the conversation."""

    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime


class ConversationHistory:
    """Ordered turns, capped at ``limit`` entries (oldest dropped first)."""

    def __init__(self, limit: int = 10):
        self._turns: deque[HistoryTurn] = deque(maxlen=limit)

    def add(self, turn: HistoryTurn) -> None:
        """Add a turn, dropping the oldest one when full."""
        self._turns.append(turn)

    def window(self, size: int) -> list[HistoryTurn]:
        """Get the last ``size`` turns, trimmed so the window opens on a user turn."""
        recent = list(self._turns)[-size:] if size > 0 else []
        while recent and recent[0].role != "user":
            recent.pop(0)
        return recent

    def get_all(self) -> list[HistoryTurn]:
        """Get all retained turns."""
        return list(self._turns)

    def clear(self) -> None:
        """Clear the history."""
        self._turns.clear()

    def __len__(self) -> int:
        return len(self._turns)
