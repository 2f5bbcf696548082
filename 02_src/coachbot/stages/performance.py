"""Performance logging: one benchmark exercise per turn."""

from typing import Sequence

from ..models import Reply
from . import messages as msg
from .base import REMIND_TOMORROW_DELAY, DeferredRequest, Outcome, StageContext, Turn
from .validators import is_performance_value


class PerformanceStage:
    """
    Walks the exercise list in order.

    Sub-session:
        state: "exercise" (prompt shown), "value" (number requested) or "done"
        index: position in the exercise list, never decreases
        results: exercise -> answer as typed
        postponed: exercises the user asked to be reminded about
    """

    name = "performance"

    def __init__(self, next_stage: str = "checkin", exercises: Sequence[str] | None = None):
        self._next_stage = next_stage
        self._exercises = tuple(exercises) if exercises else None
        self.handoff_targets = (next_stage,)

    def exercises(self, ctx: StageContext) -> tuple[str, ...]:
        return self._exercises or tuple(ctx.settings.exercises)

    def new_sub_session(self) -> dict:
        return {"state": "exercise", "index": 0, "results": {}, "postponed": []}

    def enter(self, sub: dict, ctx: StageContext) -> Outcome:
        sub.update(self.new_sub_session())
        first = self.exercises(ctx)[0]
        text = f"{msg.PERFORMANCE_INTRO}\n\n{msg.ASK_EXERCISE.format(exercise=first)}"
        return Outcome.say(text, msg.EXERCISE_BUTTONS)

    def resume(self, sub: dict, ctx: StageContext) -> Outcome:
        exercise = self._current(sub, ctx)
        if exercise is None:
            return self.enter(sub, ctx)
        if sub.get("state") == "value":
            return Outcome.say(msg.ASK_EXERCISE_VALUE.format(exercise=exercise))
        return Outcome.say(msg.ASK_EXERCISE.format(exercise=exercise), msg.EXERCISE_BUTTONS)

    async def accept(self, turn: Turn, sub: dict, ctx: StageContext) -> Outcome:
        exercise = self._current(sub, ctx)
        if exercise is None:
            return Outcome.none()

        if is_performance_value(turn.folded):
            sub["results"][exercise] = turn.text
            return self._advance(sub, ctx, captured={exercise: turn.text})

        if sub.get("state") == "exercise":
            if turn.folded == msg.CAN_ANSWER.casefold():
                sub["state"] = "value"
                return Outcome.say(msg.ASK_EXERCISE_VALUE.format(exercise=exercise))

            if turn.folded == msg.REMIND_TOMORROW.casefold():
                sub["postponed"].append(exercise)
                later = DeferredRequest(
                    delay=REMIND_TOMORROW_DELAY,
                    reply=Reply(msg.ASK_EXERCISE.format(exercise=exercise)),
                )
                return self._advance(sub, ctx, deferred=[later], prefix=msg.REMIND_TOMORROW_ACK)

            return Outcome.say(msg.EXERCISE_INVALID, msg.EXERCISE_BUTTONS)

        return Outcome.say(msg.EXERCISE_INVALID)

    def _current(self, sub: dict, ctx: StageContext) -> str | None:
        exercises = self.exercises(ctx)
        index = sub.get("index", 0)
        return exercises[index] if index < len(exercises) else None

    def _advance(
        self,
        sub: dict,
        ctx: StageContext,
        *,
        captured: dict | None = None,
        deferred: list[DeferredRequest] | None = None,
        prefix: str = "",
    ) -> Outcome:
        sub["index"] += 1
        following = self._current(sub, ctx)

        if following is None:
            sub["state"] = "done"
            text = f"{prefix}\n{msg.PERFORMANCE_DONE}" if prefix else msg.PERFORMANCE_DONE
            return Outcome.handoff(
                self._next_stage,
                text,
                carry={"benchmarks_done": True},
                deferred=deferred,
                captured=captured,
            )

        sub["state"] = "exercise"
        text = msg.ASK_EXERCISE.format(exercise=following)
        if prefix:
            text = f"{prefix}\n\n{text}"
        return Outcome.say(text, msg.EXERCISE_BUTTONS, deferred=deferred, captured=captured)
