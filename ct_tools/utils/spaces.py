"""
Space-name suggestions.

Spaces are conventionally named ``<prefix>-<MMDD>-<counter>``, e.g.
``alex-1119-1``. These helpers are pure; ``today`` is injectable.
"""

import re
from datetime import date
from typing import List, Optional, Tuple

_TRAILING_NUMBER = re.compile(r"^(.+)-(\d+)$")
_DATE_ONLY = re.compile(r"^(.+)-(\d{4})$")
_DATE_WITH_COUNTER = re.compile(r"^(.+)-(\d{4})-(\d+)$")


def parse_mmdd(value: str) -> Optional[Tuple[int, int]]:
    """Return (month, day) if ``value`` is a plausible MMDD string."""
    if len(value) != 4 or not value.isdigit():
        return None
    month = int(value[:2])
    day = int(value[2:])
    if month < 1 or month > 12 or day < 1 or day > 31:
        return None
    return month, day


def format_mmdd(day: date) -> str:
    return f"{day.month:02d}{day.day:02d}"


def next_space_name(last_space: str) -> str:
    """
    Suggest the space after ``last_space``.

    ``alex-1119-1`` -> ``alex-1119-2``; ``alex-1119`` -> ``alex-1119-1``;
    ``test-space`` -> ``test-space-1``.
    """
    date_only = _DATE_ONLY.match(last_space)
    if date_only and parse_mmdd(date_only.group(2)) and not _DATE_ONLY.match(date_only.group(1)):
        # A date segment with no counter yet
        return f"{last_space}-1"

    match = _TRAILING_NUMBER.match(last_space)
    if match:
        base = match.group(1)
        number = int(match.group(2))
        return f"{base}-{number + 1}"

    return f"{last_space}-1"


def today_space_name(last_space: str, today: Optional[date] = None) -> Optional[str]:
    """
    Suggest a space dated today, e.g. ``alex-1119-1`` -> ``alex-1120-1`` on Nov 20.

    Returns None when ``last_space`` carries no valid MMDD segment or is
    already dated today.
    """
    match = _DATE_WITH_COUNTER.match(last_space)
    if not match:
        return None

    parsed = parse_mmdd(match.group(2))
    if parsed is None:
        return None

    today = today or date.today()
    if parsed == (today.month, today.day):
        return None

    return f"{match.group(1)}-{format_mmdd(today)}-1"


def suggest_spaces(last_space: Optional[str], today: Optional[date] = None) -> List[Tuple[str, str]]:
    """
    Build (kind, name) suggestions for the space menu, in display order.

    Kinds are ``last``, ``today`` and ``next``.
    """
    if not last_space:
        return []

    suggestions = [("last", last_space)]
    dated = today_space_name(last_space, today)
    if dated:
        suggestions.append(("today", dated))
    suggestions.append(("next", next_space_name(last_space)))
    return suggestions
