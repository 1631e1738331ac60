"""Availability checking against an employee's declared weekly windows."""

import logging
from datetime import datetime
from typing import Optional

from rotaengine.domain.models import Employee
from rotaengine.domain.policies import AvailabilityPolicy, OverlapAvailabilityPolicy
from rotaengine.domain.time_utils import Weekday, at_time

logger = logging.getLogger(__name__)


def is_available(
    employee: Employee,
    candidate_start: datetime,
    candidate_end: datetime,
    policy: Optional[AvailabilityPolicy] = None,
) -> bool:
    """Check whether an employee's availability admits a candidate interval.

    The day of week is taken from ``candidate_start``. The availability
    window is placed on the calendar day of ``candidate_start`` (its start)
    and of ``candidate_end`` (its end), with undeclared bounds defaulting to
    00:00 and 23:59.

    Args:
        employee: The employee to check.
        candidate_start: Start of the candidate interval.
        candidate_end: End of the candidate interval.
        policy: How the window must cover the interval. Defaults to
            overlap: any overlap with the window is accepted.

    Returns:
        True if the employee declared no availability at all, otherwise
        whether that day's open window admits the interval.
    """
    if employee.availability is None:
        return True

    policy = policy or OverlapAvailabilityPolicy()
    day = Weekday.from_date(candidate_start)
    day_availability = employee.availability.get(day)
    if day_availability is None or day_availability.is_closed:
        return False

    start, end = day_availability.window()
    if end < start:
        logger.warning(
            "Employee %s has an inverted availability window on %s (%s-%s); "
            "treating the day as unavailable",
            employee.id,
            day.label,
            start,
            end,
        )
        return False

    window_start = at_time(candidate_start.date(), start)
    window_end = at_time(candidate_end.date(), end)
    return policy.admits(candidate_start, candidate_end, window_start, window_end)
