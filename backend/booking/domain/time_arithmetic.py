"""
Minute-granularity time math used by the slot engine.

Times of day are plain integers: minutes since local midnight (0-1439).
Appointments never cross local midnight, so add_minutes does no wraparound;
a rule whose end is not after its start is rejected before it gets here.
"""

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Tuple
from zoneinfo import ZoneInfo

from booking.core.exceptions import FormatError

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_time(value: str) -> int:
    """Parse "HH:MM" (24-hour) into minutes since midnight.

    Raises:
        FormatError: missing colon, non-numeric parts, or hour/minute out of range
    """
    if not isinstance(value, str):
        raise FormatError(f"Time must be a string in HH:MM format, got {value!r}")

    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise FormatError(f"Invalid time '{value}': expected HH:MM")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23:
        raise FormatError(f"Invalid time '{value}': hour must be 00-23")
    if minutes > 59:
        raise FormatError(f"Invalid time '{value}': minute must be 00-59")

    return hours * 60 + minutes


def format_time(minutes: int) -> str:
    """Format minutes since midnight as zero-padded "HH:MM"."""
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def add_minutes(minutes: int, delta: int) -> int:
    return minutes + delta


def format_12h(minutes: int) -> str:
    """Display form of a time of day, e.g. 540 -> "9:00 AM"."""
    hours, mins = divmod(minutes, 60)
    period = "PM" if hours >= 12 else "AM"
    hour12 = 12 if hours % 12 == 0 else hours % 12
    return f"{hour12}:{mins:02d} {period}"


def parse_date(value: str) -> date:
    """Parse a "YYYY-MM-DD" calendar date without attaching any timezone."""
    if not isinstance(value, str) or not _DATE_PATTERN.match(value.strip()):
        raise FormatError(f"Invalid date '{value}': expected YYYY-MM-DD")
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise FormatError(f"Invalid date '{value}': {e}") from e


def day_of_week(day: date) -> int:
    """Weekday of a calendar date with 0 = Sunday .. 6 = Saturday."""
    return (day.weekday() + 1) % 7


def combine_local(day: date, minute_of_day: int, tz: ZoneInfo) -> datetime:
    """Aware datetime for a wall-clock minute on a local calendar date."""
    days, remainder = divmod(minute_of_day, MINUTES_PER_DAY)
    hours, mins = divmod(remainder, 60)
    return datetime.combine(day + timedelta(days=days), time(hours, mins), tzinfo=tz)


def local_day_bounds(day: date, tz: ZoneInfo) -> Tuple[datetime, datetime]:
    """UTC instants of local midnight on `day` and local midnight of the next day."""
    start = datetime.combine(day, time(0, 0), tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time(0, 0), tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def minute_of_day_on(instant: datetime, day: date, tz: ZoneInfo) -> int:
    """Wall-clock minutes of `instant` measured from local midnight of `day`.

    Instants on the following local date yield values >= 1440, so an
    appointment running past midnight keeps its full length.
    """
    local = to_utc(instant).astimezone(tz)
    day_offset = (local.date() - day).days
    return day_offset * MINUTES_PER_DAY + local.hour * 60 + local.minute


def local_interval_on(
    start: datetime, end: datetime, day: date, tz: ZoneInfo
) -> Tuple[int, int]:
    """Minutes of [start, end) measured from local midnight of `day`.

    The end is the later of the wall-clock end and the start plus the real
    elapsed minutes. An interval across a DST change then covers every
    wall-clock minute it occupies and never shrinks below its length.
    """
    start_minute = minute_of_day_on(start, day, tz)
    elapsed = int((to_utc(end) - to_utc(start)).total_seconds() // 60)
    return start_minute, max(minute_of_day_on(end, day, tz), start_minute + elapsed)


def to_utc(instant: datetime) -> datetime:
    """Normalize to an aware UTC datetime; naive values are taken as UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
