"""Per-user conversation session."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .history import ConversationHistory


class ReminderTier(str, Enum):
    """Escalation level of the inactivity reminder."""

    NONE = "none"
    FIRST = "first"
    SECOND = "second"


@dataclass
class Session:
    """Where a user is in the conversation and what they have told us."""

    user_id: str
    current_stage: str
    created_at: datetime
    last_interaction_at: datetime
    stage_data: dict[str, dict] = field(default_factory=dict)
    profile: dict = field(default_factory=dict)  # identity-level facts, kept on reset
    reminder_tier: ReminderTier = ReminderTier.NONE
    history: ConversationHistory = field(default_factory=ConversationHistory)

    def snapshot(self) -> dict:
        """JSON-friendly view for the observability API."""
        return {
            "user_id": self.user_id,
            "current_stage": self.current_stage,
            "stage_data": self.stage_data,
            "profile": self.profile,
            "reminder_tier": self.reminder_tier.value,
            "created_at": self.created_at.isoformat(),
            "last_interaction_at": self.last_interaction_at.isoformat(),
            "history": [
                {"role": t.role, "content": t.content, "timestamp": t.timestamp.isoformat()}
                for t in self.history.get_all()
            ],
        }
