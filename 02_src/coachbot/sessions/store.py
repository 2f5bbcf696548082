"""In-memory session store with per-user locks."""

import asyncio
from typing import Protocol

from ..clock import IClock
from ..logging_config import get_logger
from ..models import ConversationHistory, Session
from ..stages import StageRegistry

logger = get_logger(__name__)


class ISessionStore(Protocol):
    """Per-user sessions for the lifetime of the process."""

    def get_or_create(self, user_id: str) -> Session:
        """Get the user's session, creating it at the entry stage."""
        ...

    def get(self, user_id: str) -> Session | None:
        """Get the user's session if it exists."""
        ...

    def lock(self, user_id: str) -> asyncio.Lock:
        """The mutex that serializes work on this user's session."""
        ...


class SessionStore:
    """
    Sessions keyed by user id, never evicted.

    Lookups and creation are synchronous, so two concurrent first messages
    from one user can never create two sessions.
    """

    def __init__(self, registry: StageRegistry, clock: IClock, history_limit: int = 10):
        self._registry = registry
        self._clock = clock
        self._history_limit = history_limit
        self._sessions: dict[str, Session] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def get_or_create(self, user_id: str) -> Session:
        session = self._sessions.get(user_id)
        if session is None:
            now = self._clock.now()
            entry = self._registry.entry
            session = Session(
                user_id=user_id,
                current_stage=entry,
                created_at=now,
                last_interaction_at=now,
                stage_data={entry: self._registry.get(entry).new_sub_session()},
                history=ConversationHistory(limit=self._history_limit),
            )
            self._sessions[user_id] = session
            logger.info("Session created for %s", user_id)
        return session

    def get(self, user_id: str) -> Session | None:
        return self._sessions.get(user_id)

    def lock(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()
        return lock

    def user_ids(self) -> list[str]:
        return list(self._sessions.keys())

    def clear(self) -> None:
        """Drop every session (control API reset)."""
        self._sessions.clear()
        self._locks.clear()

    def __len__(self) -> int:
        return len(self._sessions)
