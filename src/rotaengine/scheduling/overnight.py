"""Overnight shift splitting.

A shift whose end time is earlier than its start time crosses midnight. The
engine never stores such a shift as one interval: it is split into a head on
the start day (start to 23:59) and a tail on the following day (00:00 to
end), and the two halves are created and removed together.

Two views are supported:

- ``ShiftDesignGrid``: one representative week of seven weekday buckets,
  used to design a recurring rota. Days wrap around, so a head placed on
  Sunday has its tail on Monday and a head placed on Saturday has its tail
  on Sunday.
- ``split_assignment``: a dated assignment turned into the one or two
  day-scoped records that are persisted.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from enum import Enum
from typing import Optional

from rotaengine.constants import DAYS_PER_WEEK, END_OF_DAY, START_OF_DAY
from rotaengine.domain.models import AssignmentStatus, Shift, ShiftAssignment
from rotaengine.domain.policies import HourlyOvernightHoursPolicy, OvernightHoursPolicy
from rotaengine.domain.time_utils import Weekday
from rotaengine.validation.errors import (
    ValidationError,
    ValidationErrorType,
    ValidationResult,
)

logger = logging.getLogger(__name__)


class PlacementKind(Enum):
    """State of a placement on the design grid."""

    SAME_DAY = "same_day"
    OVERNIGHT_HEAD = "overnight_head"
    OVERNIGHT_TAIL = "overnight_tail"


@dataclass(frozen=True)
class DayShiftPlacement:
    """A shift (or one half of it) placed in a weekday bucket.

    Attributes:
        shift_id: The shift template.
        start_time: Start time of day in this bucket ("HH:MM").
        end_time: End time of day in this bucket ("HH:MM").
        is_overnight: Whether this placement is half of an overnight shift.
    """

    shift_id: str
    start_time: str
    end_time: str
    is_overnight: bool = False

    @property
    def kind(self) -> PlacementKind:
        if not self.is_overnight:
            return PlacementKind.SAME_DAY
        if self.start_time == START_OF_DAY:
            return PlacementKind.OVERNIGHT_TAIL
        return PlacementKind.OVERNIGHT_HEAD

    @property
    def is_head(self) -> bool:
        return self.kind == PlacementKind.OVERNIGHT_HEAD

    @property
    def is_tail(self) -> bool:
        return self.kind == PlacementKind.OVERNIGHT_TAIL


def _empty_buckets() -> dict[Weekday, tuple[DayShiftPlacement, ...]]:
    return {day: () for day in Weekday}


@dataclass(frozen=True)
class ShiftDesignGrid:
    """Weekly design grid of shift placements.

    The grid is immutable: ``assign`` and ``remove`` return a new grid and
    leave the original untouched, so the caller owns all state.

    Example:
        >>> grid = ShiftDesignGrid().assign(night_shift, Weekday.MONDAY)
        >>> [p.kind for p in grid.placements(Weekday.TUESDAY)]
        [<PlacementKind.OVERNIGHT_TAIL: 'overnight_tail'>]
    """

    buckets: dict[Weekday, tuple[DayShiftPlacement, ...]] = field(
        default_factory=_empty_buckets
    )

    def placements(self, day: Weekday) -> list[DayShiftPlacement]:
        return list(self.buckets.get(day, ()))

    def _with(self, updates: dict[Weekday, list[DayShiftPlacement]]) -> "ShiftDesignGrid":
        buckets = dict(self.buckets)
        for day, placements in updates.items():
            buckets[day] = tuple(placements)
        return ShiftDesignGrid(buckets=buckets)

    def assign(self, shift: Shift, day: Weekday) -> "ShiftDesignGrid":
        """Place a shift on a weekday.

        An overnight shift places its head on ``day`` and its tail on the
        next weekday in one step; a same-day shift places one record.
        """
        bucket = self.placements(day)
        if not shift.crosses_midnight:
            bucket.append(DayShiftPlacement(shift.id, shift.start_time, shift.end_time))
            return self._with({day: bucket})

        bucket.append(DayShiftPlacement(shift.id, shift.start_time, END_OF_DAY, True))
        next_day = day.next()
        next_bucket = self.placements(next_day)
        next_bucket.append(DayShiftPlacement(shift.id, START_OF_DAY, shift.end_time, True))
        return self._with({day: bucket, next_day: next_bucket})

    def remove(self, day: Weekday, index: int) -> "ShiftDesignGrid":
        """Remove the placement at ``index`` of a weekday bucket.

        Removing an overnight head also removes the first matching tail
        (same shift) on the next weekday; removing a tail also removes the
        first matching head on the previous weekday. A missing partner is
        logged and the requested half is still removed. An index out of
        range leaves the grid unchanged.
        """
        bucket = self.placements(day)
        if not 0 <= index < len(bucket):
            logger.warning("No placement at %s[%d]; grid unchanged", day.label, index)
            return self

        placement = bucket.pop(index)
        updates = {day: bucket}

        if placement.kind == PlacementKind.SAME_DAY:
            return self._with(updates)

        if placement.is_head:
            partner_day = day.next()
            wanted = PlacementKind.OVERNIGHT_TAIL
        else:
            partner_day = day.previous()
            wanted = PlacementKind.OVERNIGHT_HEAD

        partner_bucket = updates.get(partner_day, self.placements(partner_day))
        for i, candidate in enumerate(partner_bucket):
            if candidate.shift_id == placement.shift_id and candidate.kind == wanted:
                del partner_bucket[i]
                updates[partner_day] = partner_bucket
                break
        else:
            logger.warning(
                "Overnight %s of shift %s on %s had no partner on %s",
                placement.kind.value,
                placement.shift_id,
                day.label,
                partner_day.label,
            )
        return self._with(updates)

    def total_hours(
        self,
        day: Weekday,
        shift_catalog: Mapping[str, Shift],
        policy: Optional[OvernightHoursPolicy] = None,
    ) -> float:
        """Hours scheduled in one weekday bucket.

        Same-day placements count the shift's declared duration (skipped if
        the shift no longer exists). Overnight halves count the hours on
        their side of midnight, at the precision of ``policy`` (whole hours
        by default).
        """
        policy = policy or HourlyOvernightHoursPolicy()
        total = 0.0
        for placement in self.placements(day):
            if placement.is_head:
                total += policy.head_hours(placement.start_time)
            elif placement.is_tail:
                total += policy.tail_hours(placement.end_time)
            else:
                shift = shift_catalog.get(placement.shift_id)
                if shift is None:
                    logger.debug("Shift %s not found; not counted", placement.shift_id)
                    continue
                total += shift.duration
        return total

    def total_hours_by_day(
        self,
        shift_catalog: Mapping[str, Shift],
        policy: Optional[OvernightHoursPolicy] = None,
    ) -> dict[Weekday, float]:
        return {day: self.total_hours(day, shift_catalog, policy) for day in Weekday}

    def check_pairs(self) -> ValidationResult:
        """Report every overnight half whose partner is missing.

        Heads and tails of one shift are matched per weekday pair by count,
        so two heads on Monday need two tails on Tuesday.
        """
        result = ValidationResult()
        for day in Weekday:
            heads: dict[str, int] = {}
            for p in self.buckets.get(day, ()):
                if p.is_head:
                    heads[p.shift_id] = heads.get(p.shift_id, 0) + 1
            tails: dict[str, int] = {}
            for p in self.buckets.get(day.next(), ()):
                if p.is_tail:
                    tails[p.shift_id] = tails.get(p.shift_id, 0) + 1

            for shift_id in sorted(set(heads) | set(tails)):
                missing = heads.get(shift_id, 0) - tails.get(shift_id, 0)
                if missing == 0:
                    continue
                if missing > 0:
                    message = (
                        f"{missing} overnight head(s) of shift {shift_id} on {day.label} "
                        f"without a tail on {day.next().label}"
                    )
                else:
                    message = (
                        f"{-missing} overnight tail(s) of shift {shift_id} on "
                        f"{day.next().label} without a head on {day.label}"
                    )
                logger.warning(message)
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.OVERNIGHT_PAIR_BROKEN,
                        field="isOvernight",
                        message=message,
                        record_id=shift_id,
                        details={"day": int(day)},
                    )
                )
        return result

    def apply_to_week(
        self,
        employee_id: str,
        week_start: date,
        shift_catalog: Mapping[str, Shift],
        status: AssignmentStatus = AssignmentStatus.PENDING,
    ) -> list[ShiftAssignment]:
        """Materialize the grid as dated assignments for one employee.

        Each same-day placement and each head becomes an assignment on the
        date of its weekday within the week starting at ``week_start``;
        heads are split again, so a tail may fall on the day after the
        week. Tails are not materialized on their own.
        """
        assignments = []
        for offset in range(DAYS_PER_WEEK):
            on_date = week_start + timedelta(days=offset)
            day = Weekday.from_date(on_date)
            for index, placement in enumerate(self.placements(day)):
                if placement.is_tail:
                    continue
                shift = shift_catalog.get(placement.shift_id)
                if shift is None:
                    logger.debug("Shift %s not found; not materialized", placement.shift_id)
                    continue
                assignments.extend(
                    make_assignment(
                        f"{employee_id}-{on_date.isoformat()}-{placement.shift_id}-{index}",
                        employee_id,
                        shift,
                        on_date,
                        status=status,
                    )
                )
        return assignments


def split_assignment(assignment: ShiftAssignment, shift: Shift) -> list[ShiftAssignment]:
    """Turn an assignment into its day-scoped records.

    A same-day shift yields the assignment with the shift's times. An
    overnight shift yields the head on the assignment's date (start to
    23:59) and the tail on the next date (00:00 to end), whose id is the
    head's id with a ``-tail`` suffix.
    """
    if not shift.crosses_midnight:
        return [
            replace(
                assignment,
                shift_id=shift.id,
                start_time=shift.start_time,
                end_time=shift.end_time,
                is_overnight=False,
            )
        ]

    head = replace(
        assignment,
        shift_id=shift.id,
        start_time=shift.start_time,
        end_time=END_OF_DAY,
        is_overnight=True,
    )
    tail = replace(
        assignment,
        id=f"{assignment.id}-tail",
        shift_id=shift.id,
        date=assignment.date + timedelta(days=1),
        start_time=START_OF_DAY,
        end_time=shift.end_time,
        is_overnight=True,
    )
    return [head, tail]


def make_assignment(
    assignment_id: str,
    employee_id: str,
    shift: Shift,
    on_date: date,
    status: AssignmentStatus = AssignmentStatus.PENDING,
    role_id: str = "",
) -> list[ShiftAssignment]:
    """Build the day-scoped records for placing an employee on a shift."""
    base = ShiftAssignment(
        id=assignment_id,
        shift_id=shift.id,
        employee_id=employee_id,
        date=on_date,
        start_time=shift.start_time,
        end_time=shift.end_time,
        status=status,
        role_id=role_id,
    )
    return split_assignment(base, shift)


def find_partner(
    assignment: ShiftAssignment,
    assignments: Iterable[ShiftAssignment],
) -> Optional[ShiftAssignment]:
    """The other half of an overnight assignment, if present."""
    return next((a for a in assignments if assignment.is_partner_of(a)), None)


def remove_with_partner(
    assignments: Iterable[ShiftAssignment],
    assignment_id: str,
) -> list[ShiftAssignment]:
    """Assignments without ``assignment_id`` and its overnight partner.

    Unknown ids return the input unchanged (as a new list).
    """
    assignments = list(assignments)
    target = next((a for a in assignments if a.id == assignment_id), None)
    if target is None:
        return assignments

    partner = find_partner(target, assignments) if target.is_overnight else None
    if target.is_overnight and partner is None:
        logger.warning(
            "Overnight assignment %s has no partner; removing it alone", assignment_id
        )
    removed = {target.id} | ({partner.id} if partner is not None else set())
    return [a for a in assignments if a.id not in removed]
