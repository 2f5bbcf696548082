"""Progress summary rendered from what the stages collected."""

from datetime import datetime, timedelta

from ..models import Session
from ..stages import messages as msg

SUMMARY_PERIOD = timedelta(days=7)

_GOAL_LABELS = {code: label for label, code in msg.GOAL_CODES.items()}


def _average(values: list[int]) -> float | None:
    return sum(values) / len(values) if values else None


def recent_checkins(session: Session, now: datetime, period: timedelta = SUMMARY_PERIOD) -> list[dict]:
    """Check-in entries recorded within ``period`` before ``now``."""
    entries = session.stage_data.get("checkin", {}).get("entries", [])
    since = now - period
    return [e for e in entries if datetime.fromisoformat(e["at"]) >= since]


def render_summary(session: Session, now: datetime) -> str:
    """Member, goals, benchmark results, and the last week of check-ins."""
    profile = session.profile
    lines = [msg.SUMMARY_TITLE, ""]

    if profile.get("name"):
        lines.append(msg.SUMMARY_NAME.format(name=profile["name"]))
    if profile.get("goal"):
        goal = _GOAL_LABELS.get(profile["goal"], profile["goal"])
        lines.append(msg.SUMMARY_GOAL.format(goal=goal))
    if profile.get("weekly_sessions"):
        lines.append(msg.SUMMARY_FREQUENCY.format(weekly_sessions=profile["weekly_sessions"]))

    results = session.stage_data.get("performance", {}).get("results", {})
    lines.append("")
    if results:
        lines.append(msg.SUMMARY_RESULTS)
        lines.extend(f"• {exercise}: {value}" for exercise, value in results.items())
    else:
        lines.append(msg.SUMMARY_NO_RESULTS)

    checkins = recent_checkins(session, now)
    energy = [e["rating"] for e in checkins if e["kind"] == "energy"]
    workouts = [e for e in checkins if e["kind"] == "workout"]

    lines.append("")
    lines.append(msg.SUMMARY_CHECKINS.format(count=len(checkins)))
    avg_energy = _average(energy)
    if avg_energy is not None:
        lines.append(msg.SUMMARY_AVG_ENERGY.format(value=avg_energy))
    avg_workout = _average([e["rating"] for e in workouts])
    if avg_workout is not None:
        lines.append(msg.SUMMARY_AVG_WORKOUT.format(value=avg_workout))
        heavier = sum(1 for e in workouts if e.get("heavier"))
        lines.append(msg.SUMMARY_HEAVIER.format(count=heavier))

    lines.append("")
    if len(workouts) >= 3:
        lines.append(msg.SUMMARY_MOTIVATION_HIGH)
    elif workouts:
        lines.append(msg.SUMMARY_MOTIVATION_SOME)
    else:
        lines.append(msg.SUMMARY_MOTIVATION_NONE)

    return "\n".join(lines)
