"""
Validators for scripted answers.

Free text is deliberately restricted to a small vocabulary plus
numeric and scale answers; everything else is "unrecognized".
"""

import re

from ..models import BUTTON_TITLE_LIMIT
from .messages import NO_WORDS, YES_WORDS

# digits, optionally followed by a unit word: "80kg", "80 kg", "12"
PERFORMANCE_RE = re.compile(r"^\d+(\s*\w+)?$")


def is_yes_response(folded: str) -> bool:
    return folded in YES_WORDS


def is_no_response(folded: str) -> bool:
    return folded in NO_WORDS


def is_performance_value(folded: str) -> bool:
    """
    Check a performance answer.

    Examples:
        "80kg" -> True
        "12" -> True
        "80 kg" -> True
        "abc" -> False
        "kg80" -> False
    """
    return bool(PERFORMANCE_RE.match(folded))


def parse_rating(folded: str, low: int = 1, high: int = 5) -> int | None:
    """Return the rating if ``folded`` is an integer in ``[low, high]``."""
    if not (folded.isascii() and folded.isdecimal()):
        return None
    value = int(folded)
    return value if low <= value <= high else None


def match_option_index(folded: str, options: list[str]) -> int | None:
    """
    Resolve an answer to the position of one of ``options``.

    Accepts the option title (case-insensitive, as button replies send it,
    possibly cut to the button title limit) or its 1-based position.
    """
    for index, option in enumerate(options):
        title = option.casefold()
        shown = " ".join(title[:BUTTON_TITLE_LIMIT].split())
        if folded in (title, shown):
            return index
    if folded.isascii() and folded.isdecimal():
        index = int(folded) - 1
        if 0 <= index < len(options):
            return index
    return None


def match_option(folded: str, options: list[str]) -> str | None:
    index = match_option_index(folded, options)
    return None if index is None else options[index]
