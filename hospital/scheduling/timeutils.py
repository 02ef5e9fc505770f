"""
Clock-time helpers for scheduling.

Times are facility-local wall-clock "HH:MM" strings with no timezone. Ranges
compare as minute offsets from midnight.
"""

from datetime import UTC, date, datetime, time, timedelta
from typing import TypeVar

from hospital.core.exceptions import ParseError

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

# Longest booking accepted; anything overlapping [start, end) began after start - this.
BOOKING_LOOKBACK = timedelta(days=1)

T = TypeVar("T")


def to_minutes(hhmm: str) -> int:
    """Parse "HH:MM" into minutes after midnight."""
    parts = hhmm.split(":") if isinstance(hhmm, str) else []
    if len(parts) != 2 or not all(p.isascii() and p.isdigit() for p in parts):
        raise ParseError(f"Invalid time {hhmm!r}, expected HH:MM")
    hour, minute = int(parts[0]), int(parts[1])
    if not 0 <= hour <= 23 or not 0 <= minute <= 59:
        raise ParseError(f"Invalid time {hhmm!r}, hour must be 0-23 and minute 0-59")
    return hour * 60 + minute


def format_minutes(minutes: int) -> str:
    """Minutes after midnight as "HH:MM"."""
    hour, minute = divmod(minutes, 60)
    return f"{hour:02d}:{minute:02d}"


def minutes_of_day(at: datetime) -> int:
    # seconds are ignored
    return at.hour * 60 + at.minute


def _as_minutes(value: str | int) -> int:
    return to_minutes(value) if isinstance(value, str) else value


def is_within_range(
    slot_start: str | int, slot_end: str | int, range_start: str | int, range_end: str | int
) -> bool:
    """Inclusive containment: touching a boundary still counts as inside."""
    return _as_minutes(slot_start) >= _as_minutes(range_start) and _as_minutes(slot_end) <= _as_minutes(range_end)


def intervals_overlap(start_a: T, end_a: T, start_b: T, end_b: T) -> bool:
    """Half-open overlap; intervals that only touch do not overlap."""
    return start_a < end_b and start_b < end_a


def day_name(d: date) -> str:
    return WEEKDAYS[d.weekday()]


def day_range(start_date: date, end_date: date) -> tuple[datetime, datetime]:
    """``[start_date 00:00, end_date + 1 day 00:00)`` as naive datetimes."""
    try:
        return datetime.combine(start_date, time()), datetime.combine(end_date + timedelta(days=1), time())
    except OverflowError as e:
        raise ParseError(f"Date range {start_date}..{end_date} is out of bounds") from e


def lookback(start: datetime) -> datetime:
    """Earliest start of a booking that can still overlap ``start``."""
    if start - datetime.min < BOOKING_LOOKBACK:
        return datetime.min
    return start - BOOKING_LOOKBACK


def wall_clock(at: datetime) -> datetime:
    """Drop any offset and keep the wall-clock reading as facility-local time."""
    return at.replace(tzinfo=None)


def utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE audit columns."""
    return datetime.now(UTC).replace(tzinfo=None)
