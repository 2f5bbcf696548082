"""Goal intake: one multiple-choice question per turn."""

from ..models import Reply
from . import messages as msg
from .base import REMIND_TOMORROW_DELAY, DeferredRequest, Outcome, StageContext, Turn
from .validators import is_no_response, is_yes_response, match_option

YES_NO = [msg.YES, msg.NO]


class GoalIntakeStage:
    """start -> ask_goal -> (ask_nutrition) -> ask_frequency -> handoff."""

    name = "goal_intake"

    def __init__(self, next_stage: str = "performance"):
        self._next_stage = next_stage
        self.handoff_targets = (next_stage,)

    def new_sub_session(self) -> dict:
        return {
            "state": "start",
            "goal": None,
            "needs_nutritionist": None,
            "weekly_sessions": None,
        }

    def enter(self, sub: dict, ctx: StageContext) -> Outcome:
        sub["state"] = "start"
        first_name = ctx.profile.get("first_name") or "there"
        return Outcome.say(msg.INTAKE_INTRO.format(first_name=first_name), YES_NO)

    def resume(self, sub: dict, ctx: StageContext) -> Outcome:
        return self._question(sub.get("state", "start"), ctx) or self.enter(sub, ctx)

    async def accept(self, turn: Turn, sub: dict, ctx: StageContext) -> Outcome:
        state = sub.get("state", "start")

        if state == "start":
            if is_yes_response(turn.folded):
                sub["state"] = "ask_goal"
                return self._question("ask_goal", ctx)
            if is_no_response(turn.folded):
                later = DeferredRequest(
                    delay=REMIND_TOMORROW_DELAY,
                    reply=Reply(msg.INTAKE_START_REMINDER, YES_NO),
                )
                return Outcome.say(msg.INTAKE_LATER, expects_reply=False, deferred=[later])
            return Outcome.none()

        if state == "ask_goal":
            choice = match_option(turn.folded, msg.GOAL_OPTIONS)
            if choice is None:
                return Outcome.say(msg.GOAL_INVALID, msg.GOAL_OPTIONS)
            sub["goal"] = msg.GOAL_CODES[choice]
            sub["state"] = "ask_nutrition" if sub["goal"] == "health" else "ask_frequency"
            outcome = self._question(sub["state"], ctx)
            outcome.captured["goal"] = sub["goal"]
            return outcome

        if state == "ask_nutrition":
            if is_yes_response(turn.folded):
                sub["needs_nutritionist"] = True
            elif is_no_response(turn.folded):
                sub["needs_nutritionist"] = False
            else:
                return self._question("ask_nutrition", ctx)
            sub["state"] = "ask_frequency"
            outcome = self._question("ask_frequency", ctx)
            outcome.captured["needs_nutritionist"] = sub["needs_nutritionist"]
            return outcome

        if state == "ask_frequency":
            choice = match_option(turn.folded, msg.FREQUENCY_OPTIONS)
            if choice is None:
                return self._question("ask_frequency", ctx)
            sub["weekly_sessions"] = choice
            sub["state"] = "done"
            return self._finish(sub)

        return Outcome.none()

    def _question(self, state: str, ctx: StageContext) -> Outcome | None:
        if state == "ask_goal":
            return Outcome.say(msg.ASK_GOAL, msg.GOAL_OPTIONS)
        if state == "ask_nutrition":
            return Outcome.say(msg.ASK_NUTRITION, YES_NO)
        if state == "ask_frequency":
            return Outcome.say(msg.ASK_FREQUENCY, msg.FREQUENCY_OPTIONS)
        return None

    def _finish(self, sub: dict) -> Outcome:
        text = msg.INTAKE_DONE[sub["goal"]]
        if sub["needs_nutritionist"]:
            text = f"{msg.NUTRITIONIST_NOTED}\n{text}"
        answers = {
            "goal": sub["goal"],
            "needs_nutritionist": sub["needs_nutritionist"],
            "weekly_sessions": sub["weekly_sessions"],
        }
        return Outcome.handoff(self._next_stage, text, carry=answers, captured=answers)
