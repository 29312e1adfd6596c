"""Helpers for wall-clock ``HH:MM`` times."""

from __future__ import annotations

import re

from academy.domain.errors import InvalidTimeFormat

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def to_minutes(value: str) -> int:
    """Convert ``HH:MM`` into minutes since midnight.

    One-digit hours (``9:05``) are accepted. Raises :class:`InvalidTimeFormat`
    for anything that is not a valid time of day.
    """
    if not isinstance(value, str):
        raise InvalidTimeFormat(f"Time must be a string in HH:MM format, got {value!r}")

    m = _TIME_RE.match(value.strip())
    if not m:
        raise InvalidTimeFormat(f"Time must be in HH:MM format, got {value!r}")

    hours, minutes = int(m.group(1)), int(m.group(2))
    if not 0 <= hours <= 23:
        raise InvalidTimeFormat(f"Hour must be between 0 and 23, got {value!r}")
    if not 0 <= minutes <= 59:
        raise InvalidTimeFormat(f"Minute must be between 0 and 59, got {value!r}")
    return hours * 60 + minutes


def from_minutes(total: int) -> str:
    """Format minutes since midnight as ``HH:MM``."""
    if not 0 <= total < 24 * 60:
        raise InvalidTimeFormat(f"{total} is not a minute of the day")
    return f"{total // 60:02d}:{total % 60:02d}"


def normalise_time(value: str) -> str:
    """Return the canonical zero-padded ``HH:MM`` form of *value*."""
    return from_minutes(to_minutes(value))
