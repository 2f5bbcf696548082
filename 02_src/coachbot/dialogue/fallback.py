"""AI fallback for anything the scripted stages do not recognize."""

import json
from typing import Protocol

from ..clock import IClock
from ..llm import ILLMProvider
from ..logging_config import get_logger
from ..models import HistoryTurn, Session
from ..stages import messages as msg

logger = get_logger(__name__)

COACH_PERSONA = (
    "You are a friendly digital fitness coach at a gym, chatting with a member on WhatsApp. "
    "Answer briefly (two or three sentences), in the member's language, and steer them back "
    "to the question they are currently being asked when that makes sense. "
    "Never invent workout results or personal data."
)

FALLBACK_MAX_TOKENS = 200
FALLBACK_TEMPERATURE = 0.7


class IFallbackDelegate(Protocol):
    """Free-text answer for unrecognized input."""

    async def generate(self, session: Session, user_text: str) -> str:
        """Answer ``user_text`` in the context of ``session``. Never raises."""
        ...


def build_system_prompt(session: Session) -> str:
    """Persona plus what we currently know about the member."""
    context = {
        "current_stage": session.current_stage,
        "profile": session.profile,
        "stage_data": session.stage_data,
    }
    return (
        f"{COACH_PERSONA}\n\n"
        f"Conversation state:\n{json.dumps(context, ensure_ascii=False, default=str)}"
    )


class FallbackDelegate:
    """Calls the LLM with a bounded window of the session history."""

    def __init__(self, llm_provider: ILLMProvider, clock: IClock, window: int = 5):
        self._llm = llm_provider
        self._clock = clock
        self._window = window

    async def generate(self, session: Session, user_text: str) -> str:
        messages = [
            {"role": turn.role, "content": turn.content}
            for turn in session.history.window(self._window)
        ]
        messages.append({"role": "user", "content": user_text})

        try:
            answer = await self._llm.complete(
                messages=messages,
                system=build_system_prompt(session),
                max_tokens=FALLBACK_MAX_TOKENS,
                temperature=FALLBACK_TEMPERATURE,
            )
        except Exception as e:
            logger.error("LLM fallback failed for %s: %s", session.user_id, e, exc_info=True)
            answer = msg.AI_FALLBACK_APOLOGY

        now = self._clock.now()
        session.history.add(HistoryTurn(role="user", content=user_text, timestamp=now))
        session.history.add(HistoryTurn(role="assistant", content=answer, timestamp=now))
        return answer
