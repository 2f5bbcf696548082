"""Identity verification: find the member in the directory and confirm."""

from dataclasses import asdict

from ..directory import Member
from ..errors import DirectoryError
from ..logging_config import get_logger
from ..models import BUTTON_TITLE_LIMIT, MAX_BUTTONS
from . import messages as msg
from .base import Outcome, StageContext, Turn
from .validators import is_no_response, is_yes_response, match_option_index

logger = get_logger(__name__)


class VerificationStage:
    """initial -> ask_name -> (select_member) -> confirm_member -> handoff."""

    name = "verification"

    def __init__(self, next_stage: str = "goal_intake"):
        self._next_stage = next_stage
        self.handoff_targets = (next_stage,)

    def new_sub_session(self) -> dict:
        return {"state": "initial", "matches": [], "selected": None}

    def enter(self, sub: dict, ctx: StageContext) -> Outcome:
        sub["state"] = "ask_name"
        return Outcome.say(msg.GREETING)

    def resume(self, sub: dict, ctx: StageContext) -> Outcome:
        state = sub.get("state")
        if state == "select_member":
            return Outcome.say(msg.SELECT_MEMBER, self._match_buttons(sub))
        if state == "confirm_member" and sub.get("selected"):
            return self._confirm(Member(**sub["selected"]))
        return self.enter(sub, ctx)

    async def accept(self, turn: Turn, sub: dict, ctx: StageContext) -> Outcome:
        state = sub.get("state", "initial")

        if state == "initial":
            return self.enter(sub, ctx)

        if state == "ask_name":
            return await self._search(turn, sub, ctx)

        if state == "select_member":
            index = match_option_index(turn.folded, self._match_buttons(sub))
            if index is None:
                return Outcome.say(msg.SELECT_MEMBER_INVALID, self._match_buttons(sub))
            sub["selected"] = sub["matches"][index]
            sub["state"] = "confirm_member"
            return self._confirm(Member(**sub["selected"]))

        if state == "confirm_member":
            if is_yes_response(turn.folded):
                member = Member(**sub["selected"])
                sub["state"] = "verified"
                logger.info("Member verified: %s", member.external_id)
                return Outcome.handoff(
                    self._next_stage,
                    msg.VERIFIED,
                    carry={
                        "name": member.full_name,
                        "first_name": member.first_name,
                        "member_id": member.external_id,
                    },
                    captured={"member_id": member.external_id},
                )
            if is_no_response(turn.folded):
                sub.update(self.new_sub_session(), state="ask_name")
                return Outcome.say(msg.ASK_NAME_AGAIN)

        return Outcome.none()

    async def _search(self, turn: Turn, sub: dict, ctx: StageContext) -> Outcome:
        if not turn.text:
            return Outcome.say(msg.NAME_EMPTY)
        if ctx.directory is None:
            logger.error("No member directory configured")
            return Outcome.say(msg.DIRECTORY_UNAVAILABLE)

        try:
            matches = await ctx.directory.search(turn.text)
        except DirectoryError as e:
            logger.error("Directory lookup failed: %s", e)
            return Outcome.say(msg.DIRECTORY_UNAVAILABLE)

        if not matches:
            return Outcome.say(msg.NO_MEMBER_FOUND)

        if len(matches) == 1:
            sub["selected"] = asdict(matches[0])
            sub["state"] = "confirm_member"
            return self._confirm(matches[0])

        if len(matches) > MAX_BUTTONS:
            return Outcome.say(msg.TOO_MANY_MEMBERS)

        sub["matches"] = [asdict(m) for m in matches]
        sub["state"] = "select_member"
        return Outcome.say(msg.SELECT_MEMBER, self._match_buttons(sub))

    @staticmethod
    def _match_buttons(sub: dict) -> list[str]:
        """Button labels for the candidates; namesakes get a phone suffix."""
        members = [Member(**m) for m in sub.get("matches", [])]
        names = [m.full_name for m in members]
        labels = []
        for position, member in enumerate(members, start=1):
            if names.count(member.full_name) == 1:
                labels.append(member.full_name)
                continue
            suffix = f" ({member.phone[-4:] or position})"
            name = member.full_name[: BUTTON_TITLE_LIMIT - len(suffix)].rstrip()
            labels.append(name + suffix)
        return labels

    @staticmethod
    def _confirm(member: Member) -> Outcome:
        text = msg.CONFIRM_MEMBER.format(
            full_name=member.full_name,
            phone=member.phone,
            birthday=member.birthday,
        )
        return Outcome.say(text, [msg.YES, msg.NO])
