"""Double-booking detection for candidate assignments.

Conflict checks work on day-scoped intervals only. An overnight shift is
split into its pre-midnight and post-midnight halves before it is compared,
so every interval handled here starts and ends on the same calendar day.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from datetime import date, datetime, timedelta
from typing import Optional, Union

from rotaengine.constants import END_OF_DAY, START_OF_DAY
from rotaengine.domain.models import Shift, ShiftAssignment
from rotaengine.domain.time_utils import at_time, intervals_overlap

logger = logging.getLogger(__name__)

ShiftCatalog = Union[Mapping[str, Shift], Iterable[Shift]]


def as_catalog(shift_catalog: ShiftCatalog) -> Mapping[str, Shift]:
    """Index a shift collection by id (mappings pass through)."""
    if isinstance(shift_catalog, Mapping):
        return shift_catalog
    return {s.id: s for s in shift_catalog}


def shift_intervals_on(shift: Shift, d: date) -> list[tuple[datetime, datetime]]:
    """Day-scoped intervals a shift occupies when started on ``d``.

    A same-day shift yields one interval. An overnight shift yields the
    head on ``d`` (start to 23:59) and the tail on the next day (00:00 to
    end).
    """
    if not shift.crosses_midnight:
        return [(at_time(d, shift.start_time), at_time(d, shift.end_time))]
    next_day = d + timedelta(days=1)
    return [
        (at_time(d, shift.start_time), at_time(d, END_OF_DAY)),
        (at_time(next_day, START_OF_DAY), at_time(next_day, shift.end_time)),
    ]


def assignment_interval(assignment: ShiftAssignment, shift: Shift) -> tuple[datetime, datetime]:
    """Absolute interval an existing assignment occupies on its date.

    Same-day assignments take the shift's times. Overnight assignments are
    stored as day-scoped halves and use their own times.
    """
    if shift.crosses_midnight:
        return assignment.interval()
    return at_time(assignment.date, shift.start_time), at_time(assignment.date, shift.end_time)


def _iter_conflicts(
    existing_assignments: Iterable[ShiftAssignment],
    employee_id: str,
    candidate_start: datetime,
    candidate_end: datetime,
    catalog: Mapping[str, Shift],
    exclude_ids: set[str],
) -> Iterator[ShiftAssignment]:
    candidate_date = candidate_start.date()
    for assignment in existing_assignments:
        if assignment.employee_id != employee_id:
            continue
        if assignment.is_cancelled:
            continue
        if assignment.date != candidate_date:
            continue
        if assignment.id in exclude_ids:
            continue

        shift = catalog.get(assignment.shift_id)
        if shift is None:
            logger.debug(
                "Skipping assignment %s: shift %s not found",
                assignment.id,
                assignment.shift_id,
            )
            continue

        start, end = assignment_interval(assignment, shift)
        if intervals_overlap(candidate_start, candidate_end, start, end):
            yield assignment


def find_conflicts(
    existing_assignments: Iterable[ShiftAssignment],
    employee_id: str,
    candidate_start: datetime,
    candidate_end: datetime,
    shift_catalog: ShiftCatalog,
    exclude_ids: Optional[set[str]] = None,
) -> list[ShiftAssignment]:
    """All existing assignments that collide with a candidate interval.

    Only the employee's non-cancelled assignments on the calendar date of
    ``candidate_start`` are considered. Assignments whose shift cannot be
    resolved are skipped rather than treated as blocking.

    Args:
        existing_assignments: Assignments already in the schedule.
        employee_id: The employee being placed.
        candidate_start: Start of the candidate interval.
        candidate_end: End of the candidate interval.
        shift_catalog: Shifts by id, or any iterable of shifts.
        exclude_ids: Assignment ids to ignore (e.g. the record being edited).

    Returns:
        Conflicting assignments in input order.
    """
    return list(
        _iter_conflicts(
            existing_assignments,
            employee_id,
            candidate_start,
            candidate_end,
            as_catalog(shift_catalog),
            exclude_ids or set(),
        )
    )


def has_conflict(
    existing_assignments: Iterable[ShiftAssignment],
    employee_id: str,
    candidate_start: datetime,
    candidate_end: datetime,
    shift_catalog: ShiftCatalog,
) -> bool:
    """Whether a candidate interval double-books the employee.

    Stops at the first collision. See ``find_conflicts`` for the filtering
    rules.
    """
    conflicts = _iter_conflicts(
        existing_assignments,
        employee_id,
        candidate_start,
        candidate_end,
        as_catalog(shift_catalog),
        set(),
    )
    return next(conflicts, None) is not None
