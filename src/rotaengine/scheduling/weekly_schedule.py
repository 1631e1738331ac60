"""Weekly schedule containers.

A ``WeeklySchedule`` files dated assignments under the dates of one week.
The helpers here never mutate their input: each returns a new schedule,
and overnight halves are always added and removed together.
"""

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional, Union

from rotaengine.constants import DAYS_PER_WEEK
from rotaengine.domain.models import Shift, ShiftAssignment, WeeklySchedule
from rotaengine.domain.time_utils import Weekday, format_iso_date, week_bounds
from rotaengine.scheduling.overnight import find_partner, split_assignment
from rotaengine.validation.conflicts import ShiftCatalog
from rotaengine.validation.errors import (
    ValidationError,
    ValidationErrorType,
    ValidationResult,
)
from rotaengine.validation.validator import RotaValidator

logger = logging.getLogger(__name__)


def schedule_id_for(week_start: date) -> str:
    return f"schedule-{format_iso_date(week_start)}"


def create_weekly_schedule(
    d: Union[date, datetime],
    week_starts_on: Weekday,
) -> WeeklySchedule:
    """Empty schedule for the week containing ``d``.

    Args:
        d: Any date in the week.
        week_starts_on: First weekday of the week. Always explicit, since
            the scheduling and dashboard views disagree on it.
    """
    week_start, week_end = week_bounds(d, week_starts_on)
    return WeeklySchedule(
        id=schedule_id_for(week_start),
        week_start=week_start,
        week_end=week_end,
        shifts={},
    )


def find_schedule(
    schedules: list[WeeklySchedule],
    d: date,
) -> Optional[WeeklySchedule]:
    """The schedule whose week contains ``d``, if any."""
    return next((s for s in schedules if s.contains(d)), None)


def get_assignments_for_date(schedule: WeeklySchedule, d: date) -> list[ShiftAssignment]:
    return schedule.assignments_for(d)


def _file(schedule: WeeklySchedule, records: list[ShiftAssignment]) -> WeeklySchedule:
    shifts = {d: list(items) for d, items in schedule.shifts.items()}
    for record in records:
        shifts.setdefault(record.date, []).append(record)
    return replace(schedule, shifts=shifts)


def add_assignment(
    schedule: WeeklySchedule,
    assignment: ShiftAssignment,
    shift: Optional[Shift] = None,
) -> tuple[WeeklySchedule, ValidationResult]:
    """File an assignment under its date.

    When ``shift`` is given the assignment is first split into its
    day-scoped records, so an overnight shift adds its head and tail in one
    step. A record dated outside the week is rejected, except for a tail
    that falls on the day after the week: it belongs to the next week's
    schedule and is reported as a warning so the caller can file it there.

    Returns:
        The new schedule (the input schedule when rejected) and the result.
    """
    result = ValidationResult()
    records = split_assignment(assignment, shift) if shift is not None else [assignment]

    accepted = []
    for record in records:
        if schedule.contains(record.date):
            accepted.append(record)
        elif record.is_overnight_tail and record.date == schedule.week_end + timedelta(days=1):
            result.add_warning(
                f"Overnight tail {record.id} falls on {record.date}, "
                f"outside schedule {schedule.id}"
            )
        else:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.DATE_OUTSIDE_WEEK,
                    field="date",
                    message=(
                        f"Date {record.date} is outside "
                        f"{schedule.week_start} - {schedule.week_end}"
                    ),
                    record_id=record.id,
                )
            )

    if not result.is_valid:
        return schedule, result
    return _file(schedule, accepted), result


def remove_assignment(schedule: WeeklySchedule, d: date, assignment_id: str) -> WeeklySchedule:
    """Remove an assignment, and its overnight partner, from a schedule.

    A partner outside this schedule's week is left to its own schedule. An
    unknown id leaves the schedule unchanged.
    """
    target = next((a for a in schedule.assignments_for(d) if a.id == assignment_id), None)
    if target is None:
        logger.debug("Assignment %s not found on %s in %s", assignment_id, d, schedule.id)
        return schedule

    removed = {(target.date, target.id)}
    if target.is_overnight:
        partner = find_partner(target, schedule.all_assignments())
        if partner is not None:
            removed.add((partner.date, partner.id))
        else:
            partner_date = target.date + timedelta(days=1 if target.is_overnight_head else -1)
            if schedule.contains(partner_date):
                logger.warning(
                    "Overnight assignment %s has no partner on %s", target.id, partner_date
                )

    shifts = {}
    for day, items in schedule.shifts.items():
        kept = [a for a in items if (a.date, a.id) not in removed]
        if kept:
            shifts[day] = kept
    return replace(schedule, shifts=shifts)


def copy_to_next_week(schedule: WeeklySchedule) -> WeeklySchedule:
    """Copy a schedule one week ahead.

    Every assignment moves 7 days forward with ``-copy`` appended to its id.
    Both halves of an overnight shift move together, so pairs stay intact.
    """
    offset = timedelta(days=DAYS_PER_WEEK)
    week_start = schedule.week_start + offset
    shifts = {}
    for d, items in schedule.shifts.items():
        shifts[d + offset] = [
            replace(a, id=f"{a.id}-copy", date=a.date + offset) for a in items
        ]
    return WeeklySchedule(
        id=schedule_id_for(week_start),
        week_start=week_start,
        week_end=schedule.week_end + offset,
        shifts=shifts,
    )


def check_schedule(
    schedule: WeeklySchedule,
    shift_catalog: ShiftCatalog,
    validator: Optional[RotaValidator] = None,
) -> ValidationResult:
    """Invariant check of a schedule (bounds, dates, overlaps, pairs)."""
    validator = validator or RotaValidator()
    return validator.validate_weekly_schedule(schedule, shift_catalog)
