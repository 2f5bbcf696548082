"""Hand the member over to a human coach, then let them come back."""

from urllib.parse import quote

from ..logging_config import get_logger
from . import messages as msg
from .base import Outcome, StageContext, Turn

logger = get_logger(__name__)


def coach_link(coach_phone: str, name: str | None) -> str:
    """Build a ``wa.me`` click-to-chat link with a prefilled first message."""
    prefill = msg.ESCALATION_PREFILL.format(name=name) if name else msg.ESCALATION_PREFILL_ANONYMOUS
    phone = "".join(ch for ch in coach_phone if ch.isdigit())
    return f"https://wa.me/{phone}?text={quote(prefill)}"


class EscalationStage:
    """
    Entered by keyword from any stage.

    The orchestrator records the stage the user came from in
    ``sub["return_to"]``; a resume word hands back to it.
    """

    name = "escalation"

    def __init__(
        self,
        returns_to: tuple[str, ...] = ("verification", "goal_intake", "performance", "checkin"),
        default_return: str = "verification",
    ):
        self.handoff_targets = tuple(returns_to)
        self._default_return = default_return

    def new_sub_session(self) -> dict:
        return {"state": "with_coach", "return_to": None}

    def enter(self, sub: dict, ctx: StageContext) -> Outcome:
        sub["state"] = "with_coach"
        logger.info("Escalated to coach from stage %s", sub.get("return_to"))
        if not ctx.settings.coach_phone:
            return Outcome.say(msg.ESCALATION_NO_CONTACT, expects_reply=False)
        link = coach_link(ctx.settings.coach_phone, ctx.profile.get("name"))
        return Outcome.say(msg.ESCALATION.format(link=link), expects_reply=False)

    def resume(self, sub: dict, ctx: StageContext) -> Outcome:
        return self.enter(sub, ctx)

    async def accept(self, turn: Turn, sub: dict, ctx: StageContext) -> Outcome:
        if turn.folded in msg.RESUME_WORDS:
            target = sub.get("return_to") or self._default_return
            return Outcome.handoff(target, msg.ESCALATION_RESUMED, resume=True)
        return Outcome.none()
