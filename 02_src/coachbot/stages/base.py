"""Dialogue stage contract: turns in, outcomes out."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

from ..models import MessageKind, Reply

if TYPE_CHECKING:
    from ..config import Settings
    from ..directory import IMemberDirectory


REMIND_TOMORROW_DELAY = timedelta(hours=24)


class OutcomeKind(str, Enum):
    REPLY = "reply"
    HANDOFF = "handoff"
    NONE = "none"
    ABSORB = "absorb"


@dataclass(frozen=True)
class DeferredRequest:
    """Ask the orchestrator to deliver ``reply`` after ``delay``."""

    delay: timedelta
    reply: Reply


@dataclass
class Outcome:
    """What a stage decided about a turn."""

    kind: OutcomeKind
    reply: Reply | None = None
    next_stage: str | None = None
    carry: dict[str, Any] = field(default_factory=dict)
    resume: bool = False
    expects_reply: bool = False
    deferred: list[DeferredRequest] = field(default_factory=list)
    captured: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def say(
        cls,
        text: str,
        buttons: list[str] | None = None,
        *,
        expects_reply: bool = True,
        deferred: list[DeferredRequest] | None = None,
        captured: dict[str, Any] | None = None,
    ) -> "Outcome":
        """Stay in the stage and answer."""
        return cls(
            kind=OutcomeKind.REPLY,
            reply=Reply(text=text, buttons=list(buttons or [])),
            expects_reply=expects_reply,
            deferred=list(deferred or []),
            captured=dict(captured or {}),
        )

    @classmethod
    def handoff(
        cls,
        next_stage: str,
        text: str = "",
        *,
        carry: dict[str, Any] | None = None,
        resume: bool = False,
        deferred: list[DeferredRequest] | None = None,
        captured: dict[str, Any] | None = None,
    ) -> "Outcome":
        """Advance to ``next_stage``; ``text`` is prepended to its entry message."""
        return cls(
            kind=OutcomeKind.HANDOFF,
            reply=Reply(text=text) if text else None,
            next_stage=next_stage,
            carry=dict(carry or {}),
            resume=resume,
            deferred=list(deferred or []),
            captured=dict(captured or {}),
        )

    @classmethod
    def none(cls) -> "Outcome":
        """Input not recognized; let the AI fallback answer."""
        return cls(kind=OutcomeKind.NONE)

    @classmethod
    def absorb(cls) -> "Outcome":
        """Consume the turn without answering."""
        return cls(kind=OutcomeKind.ABSORB)


@dataclass(frozen=True)
class Turn:
    """A normalized user message: original text plus a case-folded copy."""

    text: str
    folded: str
    kind: MessageKind = MessageKind.TEXT

    @classmethod
    def from_raw(cls, raw: str, kind: MessageKind = MessageKind.TEXT) -> "Turn":
        text = " ".join((raw or "").split())
        return cls(text=text, folded=text.casefold(), kind=kind)


@dataclass
class StageContext:
    """Everything a stage may read while handling a turn."""

    user_id: str
    profile: dict[str, Any]
    now: datetime
    settings: "Settings"
    directory: "IMemberDirectory | None" = None


class Stage(Protocol):
    """A self-contained scripted dialogue over its own sub-session."""

    name: str
    handoff_targets: tuple[str, ...]

    def new_sub_session(self) -> dict:
        """Fresh private state for one user."""
        ...

    def enter(self, sub: dict, ctx: StageContext) -> Outcome:
        """Entry message when a handoff lands here."""
        ...

    def resume(self, sub: dict, ctx: StageContext) -> Outcome:
        """Re-ask whatever the stage is waiting for."""
        ...

    async def accept(self, turn: Turn, sub: dict, ctx: StageContext) -> Outcome:
        """Handle one user turn."""
        ...
