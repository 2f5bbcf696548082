"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DATA_DIR = PROJECT_ROOT / "03_data"
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_DB_PATH = DATA_DIR / "coachbot.db"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

DEFAULT_EXERCISES = (
    "5RM BACK SQUAT",
    "5RM BENCH PRESS",
    "5RM DEADLIFT",
    "5RM STRICT PRESS",
    "5RM BENT OVER ROW",
    "1RM POWER CLEAN",
    "MAXIMUM PULL UPS",
    "MAXIMUM DIPS",
)


PathLike = Union[str, Path]


def resolve_db_path(env_value: PathLike | None = None) -> PathLike:
    """Resolve DATABASE_URL to an absolute path."""
    if not env_value:
        DATA_DIR.mkdir(parents=True, exist_ok=True)
        return DEFAULT_DB_PATH

    if str(env_value) == ":memory:":
        return ":memory:"

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def _env_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(f"Invalid integer for {name}: {raw!r}") from None


def _env_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(f"Invalid float for {name}: {raw!r}") from None


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str, sep: str = ",") -> tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(item.strip() for item in raw.split(sep) if item.strip())


def _env_hours(name: str, default: str) -> tuple[int, int]:
    """Parse an ``"start-end"`` hour window such as ``"6-12"``."""
    raw = os.getenv(name, default)
    try:
        start, end = (int(part) for part in raw.split("-", 1))
    except ValueError:
        raise ValueError(f"Invalid hour window for {name}: {raw!r}") from None
    return start, end


@dataclass(frozen=True)
class Settings:
    """Runtime settings, read from the environment when instantiated."""

    # WhatsApp Cloud API
    whatsapp_token: str = field(default_factory=lambda: os.getenv("WHATSAPP_TOKEN", ""))
    phone_number_id: str = field(default_factory=lambda: os.getenv("PHONE_NUMBER_ID", ""))
    verify_token: str = field(default_factory=lambda: os.getenv("VERIFY_TOKEN", ""))
    whatsapp_api_url: str = field(
        default_factory=lambda: os.getenv("WHATSAPP_API_URL", "https://graph.facebook.com/v17.0")
    )

    # Member directory
    arbox_api_key: str = field(default_factory=lambda: os.getenv("ARBOX_API_KEY", ""))
    arbox_api_url: str = field(
        default_factory=lambda: os.getenv(
            "ARBOX_API_URL", "https://api.arboxapp.com/index.php/api/v2"
        )
    )

    # LLM
    llm_model: str = field(
        default_factory=lambda: os.getenv("LLM_MODEL", "claude-3-5-sonnet-20241022")
    )
    llm_timeout_seconds: float = field(
        default_factory=lambda: _env_float("LLM_TIMEOUT_SECONDS", "20")
    )
    history_window: int = field(default_factory=lambda: _env_int("HISTORY_WINDOW", "5"))
    history_limit: int = field(default_factory=lambda: _env_int("HISTORY_LIMIT", "10"))

    # Background tasks
    deferred_poll_seconds: float = field(
        default_factory=lambda: _env_float("DEFERRED_POLL_SECONDS", "60")
    )
    reminder_poll_seconds: float = field(
        default_factory=lambda: _env_float("REMINDER_POLL_SECONDS", "60")
    )
    reminder_first_after_hours: float = field(
        default_factory=lambda: _env_float("REMINDER_FIRST_AFTER_HOURS", "12")
    )
    reminder_second_after_hours: float = field(
        default_factory=lambda: _env_float("REMINDER_SECOND_AFTER_HOURS", "24")
    )

    # Conversation
    reset_keywords: tuple[str, ...] = field(
        default_factory=lambda: _env_list("RESET_KEYWORDS", "restart")
    )
    escalation_keywords: tuple[str, ...] = field(
        default_factory=lambda: _env_list("ESCALATION_KEYWORDS", "coach,human")
    )
    summary_keywords: tuple[str, ...] = field(
        default_factory=lambda: _env_list("SUMMARY_KEYWORDS", "summary")
    )
    coach_phone: str = field(default_factory=lambda: os.getenv("COACH_PHONE", ""))
    timezone: str = field(default_factory=lambda: os.getenv("TIMEZONE", "UTC"))
    pre_workout_hours: tuple[int, int] = field(
        default_factory=lambda: _env_hours("PRE_WORKOUT_HOURS", "6-12")
    )
    post_workout_hours: tuple[int, int] = field(
        default_factory=lambda: _env_hours("POST_WORKOUT_HOURS", "17-23")
    )
    exercises: tuple[str, ...] = field(
        default_factory=lambda: _env_list("EXERCISES", "|".join(DEFAULT_EXERCISES), sep="|")
    )
    strict_handoffs: bool = field(default_factory=lambda: _env_bool("STRICT_HANDOFFS", "false"))

    # Service
    database_url: str | None = field(default_factory=lambda: os.getenv("DATABASE_URL"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    api_host: str = field(default_factory=lambda: os.getenv("API_HOST", "localhost"))
    api_port: int = field(default_factory=lambda: _env_int("API_PORT", "8000"))


def validate_settings(settings: Settings) -> None:
    """Validate that values are within acceptable ranges."""
    if settings.deferred_poll_seconds <= 0:
        raise ValueError(
            f"DEFERRED_POLL_SECONDS must be > 0, got {settings.deferred_poll_seconds}"
        )
    if settings.reminder_poll_seconds <= 0:
        raise ValueError(
            f"REMINDER_POLL_SECONDS must be > 0, got {settings.reminder_poll_seconds}"
        )
    if settings.reminder_first_after_hours <= 0:
        raise ValueError(
            "REMINDER_FIRST_AFTER_HOURS must be > 0, "
            f"got {settings.reminder_first_after_hours}"
        )
    if settings.reminder_second_after_hours <= settings.reminder_first_after_hours:
        raise ValueError(
            "REMINDER_SECOND_AFTER_HOURS must be greater than REMINDER_FIRST_AFTER_HOURS"
        )
    if settings.history_window < 1 or settings.history_limit < settings.history_window:
        raise ValueError("HISTORY_LIMIT must be >= HISTORY_WINDOW >= 1")
    if settings.llm_timeout_seconds <= 0:
        raise ValueError(f"LLM_TIMEOUT_SECONDS must be > 0, got {settings.llm_timeout_seconds}")
    for name, (start, end) in (
        ("PRE_WORKOUT_HOURS", settings.pre_workout_hours),
        ("POST_WORKOUT_HOURS", settings.post_workout_hours),
    ):
        if not (0 <= start < end <= 24):
            raise ValueError(f"{name} must satisfy 0 <= start < end <= 24, got {start}-{end}")
    if not settings.exercises:
        raise ValueError("EXERCISES must name at least one exercise")
    if not settings.reset_keywords:
        raise ValueError("RESET_KEYWORDS must not be empty")


def load_settings() -> Settings:
    """Read and validate settings from the environment."""
    settings = Settings()
    validate_settings(settings)
    return settings
