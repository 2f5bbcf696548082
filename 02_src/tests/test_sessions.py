"""Tests for the session store and the stage registry."""

import pytest

from coachbot.errors import StageRegistrationError, UnknownStageError
from coachbot.models import ReminderTier
from coachbot.stages import (
    CheckinStage,
    GoalIntakeStage,
    StageRegistry,
    VerificationStage,
    build_default_registry,
)


class TestSessionStore:
    """Tests for SessionStore."""

    def test_get_or_create_is_idempotent(self, sessions):
        first = sessions.get_or_create("u1")
        second = sessions.get_or_create("u1")

        assert first is second
        assert len(sessions) == 1

    def test_new_session_starts_at_entry_stage(self, sessions, clock):
        session = sessions.get_or_create("u1")

        assert session.current_stage == "verification"
        assert session.stage_data == {"verification": {"state": "initial", "matches": [], "selected": None}}
        assert session.created_at == clock.now()
        assert session.reminder_tier == ReminderTier.NONE
        assert session.profile == {}

    def test_history_limit_applied(self, registry, clock):
        from coachbot.sessions import SessionStore

        store = SessionStore(registry, clock, history_limit=4)
        assert store.get_or_create("u1").history._turns.maxlen == 4

    def test_get_unknown_returns_none(self, sessions):
        assert sessions.get("nobody") is None

    def test_lock_is_stable_per_user(self, sessions):
        assert sessions.lock("u1") is sessions.lock("u1")
        assert sessions.lock("u1") is not sessions.lock("u2")

    def test_clear(self, sessions):
        sessions.get_or_create("u1")
        sessions.get_or_create("u2")
        assert sorted(sessions.user_ids()) == ["u1", "u2"]

        sessions.clear()

        assert len(sessions) == 0


class TestStageRegistry:
    """Tests for StageRegistry."""

    def test_default_registry(self):
        registry = build_default_registry()

        assert registry.entry == "verification"
        assert set(registry.names()) == {
            "verification", "goal_intake", "performance", "checkin", "escalation"
        }

    def test_duplicate_name_rejected(self):
        registry = StageRegistry(entry="checkin")
        registry.register(CheckinStage())

        with pytest.raises(StageRegistrationError):
            registry.register(CheckinStage())

    def test_missing_entry_rejected(self):
        registry = StageRegistry(entry="verification")
        registry.register(CheckinStage())

        with pytest.raises(StageRegistrationError, match="Entry stage"):
            registry.validate()

    def test_unknown_handoff_target_rejected(self):
        registry = StageRegistry(entry="verification")
        registry.register(VerificationStage(next_stage="goal_intake"))

        with pytest.raises(StageRegistrationError, match="goal_intake"):
            registry.validate()

    def test_valid_chain(self):
        registry = StageRegistry(entry="goal_intake")
        registry.register(GoalIntakeStage(next_stage="checkin"))
        registry.register(CheckinStage())

        registry.validate()

        assert "checkin" in registry
        assert len(registry) == 2

    def test_get_unknown_lists_registered(self):
        registry = StageRegistry(entry="checkin")
        registry.register(CheckinStage())

        with pytest.raises(UnknownStageError, match="checkin"):
            registry.get("nowhere")
