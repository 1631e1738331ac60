"""Date and time primitives shared by every part of the engine.

Times of day travel as ``"HH:MM"`` strings on persisted records and are
turned into ``datetime`` values on a concrete calendar date only when an
interval has to be compared. All intervals are half-open: touching endpoints
do not overlap.
"""

import logging
import math
from datetime import date, datetime, time, timedelta
from enum import IntEnum
from typing import Any, Union

from rotaengine.constants import (
    DATE_FORMAT_ISO,
    DAYS_PER_WEEK,
    TIME_FORMAT_HM,
)

logger = logging.getLogger(__name__)


class Weekday(IntEnum):
    """Day of the week, numbered as stored on availability records.

    Sunday is 0 and Saturday is 6. Successor and predecessor wrap around,
    so an overnight shift started on Saturday continues on Sunday and one
    started on Sunday's predecessor is Saturday.
    """

    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @classmethod
    def from_date(cls, d: Union[date, datetime]) -> "Weekday":
        """Weekday of a date (``date.weekday()`` counts from Monday)."""
        return cls((d.weekday() + 1) % DAYS_PER_WEEK)

    def next(self) -> "Weekday":
        """Following weekday, wrapping Saturday to Sunday."""
        return Weekday((self.value + 1) % DAYS_PER_WEEK)

    def previous(self) -> "Weekday":
        """Preceding weekday, wrapping Sunday to Saturday."""
        return Weekday((self.value - 1) % DAYS_PER_WEEK)

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def ordered_from(cls, first: "Weekday") -> list["Weekday"]:
        """All seven weekdays in display order starting at ``first``."""
        return [cls((first.value + i) % DAYS_PER_WEEK) for i in range(DAYS_PER_WEEK)]


def intervals_overlap(start_a: Any, end_a: Any, start_b: Any, end_b: Any) -> bool:
    """Check whether two half-open intervals overlap.

    Works for any mutually comparable values (datetimes, minute counts).
    Touching endpoints do not overlap.
    """
    return start_a < end_b and start_b < end_a


def duration_hours(start: datetime, end: datetime) -> float:
    """Hours between two timestamps, rounded to one decimal place.

    Halves round up, e.g. 0.25 h becomes 0.3 h. A negative result means the
    caller passed the bounds the wrong way round; it is logged and returned
    as computed, never wrapped across midnight.
    """
    hours = (end - start).total_seconds() / 3600
    if hours < 0:
        logger.warning("Negative duration: start=%s end=%s", start, end)
    return math.floor(hours * 10 + 0.5) / 10


def parse_hhmm(value: str) -> time:
    """Parse an ``"HH:MM"`` string.

    Raises:
        ValueError: If the value is not a valid time of day.
    """
    if not isinstance(value, str):
        raise ValueError(f"Time must be an HH:MM string, got {type(value).__name__}")
    s = value.strip()
    try:
        return datetime.strptime(s, TIME_FORMAT_HM).time()
    except ValueError as e:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM") from e


def is_valid_hhmm(value: Any) -> bool:
    """Whether ``value`` parses as an ``"HH:MM"`` time."""
    try:
        parse_hhmm(value)
    except ValueError:
        return False
    return True


def format_hhmm(t: Union[time, datetime]) -> str:
    """Format a time (or the time part of a datetime) as ``"HH:MM"``."""
    return t.strftime(TIME_FORMAT_HM)


def minutes_of_day(value: str) -> int:
    """Minutes since midnight of an ``"HH:MM"`` string."""
    t = parse_hhmm(value)
    return t.hour * 60 + t.minute


def hour_of(value: str) -> int:
    """Hour component of an ``"HH:MM"`` string."""
    return parse_hhmm(value).hour


def at_time(d: date, value: str) -> datetime:
    """Absolute timestamp of ``"HH:MM"`` on calendar day ``d``."""
    if isinstance(d, datetime):
        d = d.date()
    return datetime.combine(d, parse_hhmm(value))


def parse_iso_date(value: Union[str, date]) -> date:
    """Parse an ISO date string into a calendar date.

    Accepts ``YYYY-MM-DD`` as well as full ISO timestamps such as
    ``2024-01-15T00:00:00.000Z``; only the calendar date is kept.

    Raises:
        ValueError: If the value is not an ISO date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Date must be an ISO string, got {type(value).__name__}")

    s = value.strip()
    try:
        return datetime.strptime(s[:10], DATE_FORMAT_ISO).date()
    except ValueError as e:
        raise ValueError(f"Invalid date {value!r}, expected YYYY-MM-DD") from e


def format_iso_date(d: date) -> str:
    return d.strftime(DATE_FORMAT_ISO)


def week_bounds(d: Union[date, datetime], week_starts_on: Weekday) -> tuple[date, date]:
    """The inclusive 7-day window containing ``d``.

    Args:
        d: Any day inside the wanted week.
        week_starts_on: First weekday of the week. Scheduling views use
            Monday, dashboard aggregation uses Sunday; there is no default
            so each call site states its convention.

    Returns:
        Tuple of (week_start, week_end) where week_end = week_start + 6 days.
    """
    if isinstance(d, datetime):
        d = d.date()
    offset = (Weekday.from_date(d) - week_starts_on) % DAYS_PER_WEEK
    week_start = d - timedelta(days=offset)
    return week_start, week_start + timedelta(days=DAYS_PER_WEEK - 1)


def week_dates(d: Union[date, datetime], week_starts_on: Weekday) -> list[date]:
    """All seven dates of the week containing ``d``."""
    week_start, _ = week_bounds(d, week_starts_on)
    return [week_start + timedelta(days=i) for i in range(DAYS_PER_WEEK)]


def is_date_in_range(d: date, start: date, end: date) -> bool:
    """Inclusive range check."""
    return start <= d <= end


def week_number(d: date) -> int:
    """Week of the year, counting weeks that start on Sunday.

    Week 1 is the week containing January 1st.
    """
    first_day = date(d.year, 1, 1)
    past_days = (d - first_day).days
    return math.ceil((past_days + Weekday.from_date(first_day) + 1) / DAYS_PER_WEEK)


def format_week_range(start: date, end: date) -> str:
    """Human-readable week range, e.g. ``"Jan 15 - Jan 21, 2024"``."""
    return f"{start.strftime('%b')} {start.day} - {end.strftime('%b')} {end.day}, {end.year}"
