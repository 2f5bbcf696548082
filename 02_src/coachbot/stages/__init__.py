"""Scripted dialogue stages."""

from .base import (
    REMIND_TOMORROW_DELAY,
    DeferredRequest,
    Outcome,
    OutcomeKind,
    Stage,
    StageContext,
    Turn,
)
from .checkin import CheckinStage
from .escalation import EscalationStage, coach_link
from .goal_intake import GoalIntakeStage
from .performance import PerformanceStage
from .registry import StageRegistry
from .verification import VerificationStage

ENTRY_STAGE = "verification"
ESCALATION_STAGE = "escalation"


def build_default_registry() -> StageRegistry:
    """Register the standard coaching flow and validate it."""
    registry = StageRegistry(entry=ENTRY_STAGE)
    registry.register(VerificationStage(next_stage="goal_intake"))
    registry.register(GoalIntakeStage(next_stage="performance"))
    registry.register(PerformanceStage(next_stage="checkin"))
    registry.register(CheckinStage())
    registry.register(EscalationStage(default_return=ENTRY_STAGE))
    registry.validate()
    return registry


__all__ = [
    "ENTRY_STAGE",
    "ESCALATION_STAGE",
    "REMIND_TOMORROW_DELAY",
    "CheckinStage",
    "DeferredRequest",
    "EscalationStage",
    "GoalIntakeStage",
    "Outcome",
    "OutcomeKind",
    "PerformanceStage",
    "Stage",
    "StageContext",
    "StageRegistry",
    "Turn",
    "VerificationStage",
    "build_default_registry",
    "coach_link",
]
