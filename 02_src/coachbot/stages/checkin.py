"""Pre/post-workout check-ins, gated by local time of day."""

from datetime import datetime
from zoneinfo import ZoneInfo

from . import messages as msg
from .base import Outcome, StageContext, Turn
from .validators import is_no_response, is_yes_response, parse_rating


def _in_window(hour: int, window: tuple[int, int]) -> bool:
    start, end = window
    return start <= hour < end


class CheckinStage:
    """idle -> rate_energy | rate_workout -> (ask_heavier) -> idle."""

    name = "checkin"
    handoff_targets: tuple[str, ...] = ()

    def new_sub_session(self) -> dict:
        return {"state": "idle", "entries": []}

    def enter(self, sub: dict, ctx: StageContext) -> Outcome:
        sub["state"] = "idle"
        return Outcome.say(msg.CHECKIN_INTRO)

    def resume(self, sub: dict, ctx: StageContext) -> Outcome:
        state = sub.get("state", "idle")
        if state == "rate_energy":
            return Outcome.say(msg.ASK_ENERGY)
        if state == "rate_workout":
            return Outcome.say(msg.ASK_WORKOUT_RATING)
        if state == "ask_heavier":
            return Outcome.say(msg.ASK_HEAVIER, [msg.YES, msg.NO])
        return Outcome.say(msg.CHECKIN_INTRO)

    async def accept(self, turn: Turn, sub: dict, ctx: StageContext) -> Outcome:
        state = sub.get("state", "idle")

        if state == "idle":
            hour = self._local(ctx).hour
            if _in_window(hour, ctx.settings.pre_workout_hours):
                sub["state"] = "rate_energy"
                return Outcome.say(msg.ASK_ENERGY)
            if _in_window(hour, ctx.settings.post_workout_hours):
                sub["state"] = "rate_workout"
                return Outcome.say(msg.ASK_WORKOUT_RATING)
            return Outcome.absorb()

        if state == "rate_energy":
            rating = parse_rating(turn.folded)
            if rating is None:
                return Outcome.say(msg.RATING_INVALID)
            sub["entries"].append(
                {"kind": "energy", "rating": rating, "at": ctx.now.isoformat()}
            )
            sub["state"] = "idle"
            return Outcome.say(
                msg.CHECKIN_ENERGY_THANKS,
                expects_reply=False,
                captured={"energy": rating},
            )

        if state == "rate_workout":
            rating = parse_rating(turn.folded)
            if rating is None:
                return Outcome.say(msg.RATING_INVALID)
            sub["entries"].append(
                {"kind": "workout", "rating": rating, "heavier": None, "at": ctx.now.isoformat()}
            )
            sub["state"] = "ask_heavier"
            return Outcome.say(
                msg.ASK_HEAVIER, [msg.YES, msg.NO], captured={"workout": rating}
            )

        if state == "ask_heavier":
            if is_yes_response(turn.folded):
                heavier = True
            elif is_no_response(turn.folded):
                heavier = False
            else:
                return Outcome.none()
            sub["entries"][-1]["heavier"] = heavier
            sub["state"] = "idle"
            return Outcome.say(
                msg.CHECKIN_WORKOUT_THANKS,
                expects_reply=False,
                captured={"heavier": heavier},
            )

        return Outcome.none()

    @staticmethod
    def _local(ctx: StageContext) -> datetime:
        return ctx.now.astimezone(ZoneInfo(ctx.settings.timezone))
