"""Queries over the per-weekday business-hours table."""

from datetime import datetime, timedelta
from typing import Optional

from rotaengine.constants import DAYS_PER_WEEK, END_OF_DAY, START_OF_DAY
from rotaengine.domain.models import BusinessHours
from rotaengine.domain.time_utils import Weekday, at_time, format_hhmm, hour_of


def hours_for_day(
    business_hours: list[BusinessHours],
    day: Weekday,
) -> Optional[BusinessHours]:
    """First entry configured for a weekday, if any."""
    return next((h for h in business_hours if h.day_of_week == day), None)


def is_business_open(business_hours: list[BusinessHours], at: datetime) -> bool:
    """Whether the business is open at a moment.

    Both ends of the window are inclusive. Missing times default to the
    whole day.
    """
    hours = hours_for_day(business_hours, Weekday.from_date(at))
    if hours is None or not hours.is_open:
        return False
    current = format_hhmm(at)
    return (hours.open_time or START_OF_DAY) <= current <= (hours.close_time or END_OF_DAY)


def next_open_time(business_hours: list[BusinessHours], at: datetime) -> Optional[datetime]:
    """The next opening time strictly after ``at``, looking one week ahead.

    Returns None when no opening falls within the following seven days.
    """
    current = at
    for _ in range(DAYS_PER_WEEK):
        hours = hours_for_day(business_hours, Weekday.from_date(current))
        if hours is not None and hours.is_open and hours.open_time:
            opening = at_time(current.date(), hours.open_time)
            if current < opening:
                return opening
        current = datetime.combine(current.date() + timedelta(days=1), datetime.min.time())
    return None


def total_possible_hours(business_hours: list[BusinessHours]) -> int:
    """Sum of (close hour - open hour) over every open entry.

    Hour granularity, matching the stored coverage figures.
    """
    total = 0
    for hours in business_hours:
        if hours.has_window:
            total += hour_of(hours.close_time) - hour_of(hours.open_time)
    return total
