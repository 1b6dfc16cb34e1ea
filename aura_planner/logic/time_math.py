"""
Time arithmetic

Internally every time is an integer count of minutes since midnight. Two
string forms exist at the boundaries and are kept apart on purpose:
  - "HH:MM" (24h): user input, rule-based scheduler output
  - "h:mm AM/PM" (12h): rescheduler output
Malformed strings raise InvalidTimeError; nothing is clamped.
"""
import math
import re
from datetime import datetime
from typing import Optional

from ..exceptions import InvalidTimeError

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?\s*([AaPp][Mm])?$")

MINUTES_PER_DAY = 24 * 60


def time_to_minutes(value: str) -> int:
    """
    Parse "HH:MM" or "h:mm AM/PM" into minutes since midnight.

    Args:
        value: time string

    Returns:
        0 .. 1439
    """
    if not isinstance(value, str):
        raise InvalidTimeError(value)
    match = _TIME_RE.match(value.strip())
    if not match:
        raise InvalidTimeError(value)

    hours = int(match.group(1))
    minutes = int(match.group(2))
    suffix = match.group(3)

    if minutes > 59:
        raise InvalidTimeError(value)

    if suffix:
        if not 1 <= hours <= 12:
            raise InvalidTimeError(value)
        is_pm = suffix.upper() == "PM"
        if is_pm and hours != 12:
            hours += 12
        elif not is_pm and hours == 12:
            hours = 0
    elif hours > 23:
        raise InvalidTimeError(value)

    return hours * 60 + minutes


def minutes_to_12h(total_minutes: int) -> str:
    """Minutes since midnight -> "h:mm AM/PM" (wraps past midnight)"""
    total_minutes = int(total_minutes)
    hours = (total_minutes // 60) % 24
    minutes = total_minutes % 60
    period = "PM" if hours >= 12 else "AM"
    display_hours = hours % 12 or 12
    return f"{display_hours}:{minutes:02d} {period}"


def minutes_to_24h(total_minutes: int) -> str:
    """Minutes since midnight -> "HH:MM" (wraps past midnight)"""
    total_minutes = int(total_minutes)
    hours = (total_minutes // 60) % 24
    minutes = total_minutes % 60
    return f"{hours:02d}:{minutes:02d}"


def to_12h(value: str) -> str:
    return minutes_to_12h(time_to_minutes(value))


def to_24h(value: str) -> str:
    return minutes_to_24h(time_to_minutes(value))


def add_minutes(value: str, minutes: int, twelve_hour: bool = False) -> str:
    """Shift a time string, formatting the result in the requested form"""
    total = time_to_minutes(value) + minutes
    return minutes_to_12h(total) if twelve_hour else minutes_to_24h(total)


def duration(start: str, end: str) -> int:
    """Minutes from start to end (negative if end precedes start)"""
    return time_to_minutes(end) - time_to_minutes(start)


def remaining_minutes(start: str, end: str) -> int:
    return max(0, duration(start, end))


def is_time_after(time_a: str, time_b: str) -> bool:
    """True when time_a is strictly later than time_b"""
    return time_to_minutes(time_a) > time_to_minutes(time_b)


def clock_minutes(now: Optional[datetime] = None) -> int:
    """Wall-clock minutes since midnight"""
    now = now or datetime.now()
    return now.hour * 60 + now.minute


def format_clock(now: Optional[datetime] = None) -> str:
    """Wall-clock time as "HH:MM" """
    return minutes_to_24h(clock_minutes(now))


def overlaps(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Half-open interval overlap: [start1, end1) and [start2, end2)"""
    return start1 < end2 and start2 < end1


def round_half_up(value: float) -> int:
    """Round to the nearest whole minute, halves up (22.5 -> 23)"""
    return int(math.floor(value + 0.5))
