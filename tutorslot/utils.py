"""Shared utilities used across the booking engine."""

import re
from datetime import date

MINUTES_PER_DAY = 24 * 60

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
BOOKABLE_WEEKDAYS = WEEKDAY_NAMES[:5]

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")


def parse_clock(value: str) -> int:
    """Convert an ``HH:MM`` (or ``HH:MM:SS``) string to minutes of day.

    Seconds are dropped. ``24:00`` is accepted as the end of the day.

    Examples:
        >>> parse_clock("08:30")
        510
        >>> parse_clock("13:00:00")
        780
    """
    match = _CLOCK_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes >= 60 or hours > 24 or (hours == 24 and minutes):
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    return hours * 60 + minutes


def format_clock(minutes: int) -> str:
    """Convert minutes of day back to ``HH:MM``.

    Examples:
        >>> format_clock(510)
        '08:30'
    """
    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise ValueError(f"Minutes of day out of range: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def weekday_name(value: date) -> str:
    return WEEKDAY_NAMES[value.weekday()]


def is_weekend(value: date) -> bool:
    return value.weekday() >= 5
