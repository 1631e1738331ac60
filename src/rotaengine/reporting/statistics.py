"""Coverage and statistics aggregation over a schedule snapshot.

Everything here is read-only: the aggregator takes a ``ScheduleSnapshot``
and returns plain result dataclasses. Counts are per shift occurrence, so
the tail half of an overnight shift is not counted a second time.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Optional

from rotaengine.constants import DAYS_PER_WEEK, DASHBOARD_UPCOMING_LIMIT
from rotaengine.domain.business_hours import total_possible_hours
from rotaengine.domain.models import (
    AssignmentStatus,
    ScheduleSnapshot,
    Shift,
    ShiftAssignment,
    ShiftStatus,
    WeeklySchedule,
)
from rotaengine.domain.policies import CoveragePolicy, LegacyCoveragePolicy
from rotaengine.domain.time_utils import Weekday, at_time, duration_hours, week_bounds

logger = logging.getLogger(__name__)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class _StatsRecord:
    def to_dict(self) -> dict[str, Any]:
        return {
            _camel(k): v.isoformat() if isinstance(v, date) else v
            for k, v in asdict(self).items()
        }


@dataclass
class EmployeeSummary(_StatsRecord):
    employee_id: str
    total_shifts: int
    availability_percentage: float


@dataclass
class EmployeeStats(_StatsRecord):
    """Statistics for one employee over a date window."""

    employee_id: str
    total_shifts: int = 0
    completed_shifts: int = 0
    upcoming_shifts: int = 0
    cancelled_shifts: int = 0
    total_hours: float = 0.0
    availability_percentage: float = 100.0


@dataclass
class ShiftSummary(_StatsRecord):
    shift_id: str
    total_assignments: int
    unique_employees: int
    fill_rate: float


@dataclass
class ShiftStats(_StatsRecord):
    """Statistics for one shift over a date window."""

    shift_id: str
    total_assignments: int = 0
    completed_assignments: int = 0
    cancelled_assignments: int = 0
    average_duration: float = 0.0
    fill_rate: float = 0.0


@dataclass
class OverallStats(_StatsRecord):
    total_employees: int
    total_shifts: int
    total_assignments: int
    avg_shifts_per_employee: float


@dataclass
class WeeklyStats(_StatsRecord):
    """Hours and coverage for one week."""

    week_start: date
    week_end: date
    total_assignments: int = 0
    total_hours: float = 0.0
    total_possible_hours: float = 0.0
    coverage_percentage: float = 0.0


@dataclass
class DashboardSummary:
    """What the dashboard shows for the current moment."""

    today: date
    week_start: date
    week_end: date
    total_employees: int
    total_shifts: int
    today_assignments: list[ShiftAssignment] = field(default_factory=list)
    upcoming_assignments: list[ShiftAssignment] = field(default_factory=list)
    current_schedule: Optional[WeeklySchedule] = None


def fill_rate(assignment_count: int, required_employees: int) -> float:
    """Assignments as a percentage of required headcount, unclamped.

    A shift that requires nobody has no meaningful fill rate and reports 0.
    """
    if required_employees <= 0:
        return 0.0
    return assignment_count / required_employees * 100


def availability_percentage(open_days: int) -> float:
    return open_days / DAYS_PER_WEEK * 100


def _occurrences(assignments: list[ShiftAssignment]) -> list[ShiftAssignment]:
    return [a for a in assignments if not a.is_overnight_tail]


def _in_window(assignment: ShiftAssignment, start: date, end: date) -> bool:
    return start <= assignment.date <= end


class StatisticsAggregator:
    """Computes employee, shift, weekly and dashboard statistics.

    Args:
        snapshot: Records to aggregate over.
        coverage_policy: Formula for the weekly coverage percentage.
            Defaults to the legacy formula.
    """

    def __init__(
        self,
        snapshot: ScheduleSnapshot,
        coverage_policy: Optional[CoveragePolicy] = None,
    ):
        self.snapshot = snapshot
        self.coverage_policy = coverage_policy or LegacyCoveragePolicy()
        self._shifts = snapshot.shifts_by_id()

    def _shift_hours(self, assignment: ShiftAssignment) -> float:
        shift = self._shifts.get(assignment.shift_id)
        if shift is None:
            logger.debug(
                "Assignment %s references missing shift %s; no hours counted",
                assignment.id,
                assignment.shift_id,
            )
            return 0.0
        return shift.duration

    # ==========================
    # Employees
    # ==========================

    def employee_stats(self, employee_id: str) -> Optional[EmployeeSummary]:
        """Assignment count and availability of an employee, None if unknown.

        An employee who declared no availability reports 0 here.
        """
        employee = self.snapshot.get_employee(employee_id)
        if employee is None:
            return None

        assignments = _occurrences(
            [a for a in self.snapshot.assignments if a.employee_id == employee_id]
        )
        percentage = 0.0
        if employee.availability is not None:
            percentage = availability_percentage(employee.open_days())
        return EmployeeSummary(
            employee_id=employee_id,
            total_shifts=len(assignments),
            availability_percentage=percentage,
        )

    def employee_stats_detailed(
        self,
        employee_id: str,
        start: date,
        end: date,
        now: datetime,
    ) -> EmployeeStats:
        """Statistics of an employee over the inclusive window ``[start, end]``.

        An assignment is completed when its date began before ``now`` and
        upcoming when it begins after ``now``; one beginning exactly at
        ``now`` is neither. Cancelled assignments are counted on their own
        and take no part in completed, upcoming or hours.
        """
        assignments = _occurrences([
            a for a in self.snapshot.assignments
            if a.employee_id == employee_id and _in_window(a, start, end)
        ])
        stats = EmployeeStats(employee_id=employee_id, total_shifts=len(assignments))

        for assignment in assignments:
            if assignment.is_cancelled:
                stats.cancelled_shifts += 1
                continue
            begins = datetime.combine(assignment.date, time.min)
            if begins < now:
                stats.completed_shifts += 1
            elif begins > now:
                stats.upcoming_shifts += 1
            stats.total_hours += self._shift_hours(assignment)

        employee = self.snapshot.get_employee(employee_id)
        if employee is not None and employee.availability is not None:
            stats.availability_percentage = availability_percentage(employee.open_days())
        return stats

    # ==========================
    # Shifts
    # ==========================

    def shift_stats(self, shift_id: str) -> Optional[ShiftSummary]:
        """Assignment count, distinct employees and fill rate, None if unknown."""
        shift = self._shifts.get(shift_id)
        if shift is None:
            return None

        assignments = _occurrences([a for a in self.snapshot.assignments if a.shift_id == shift_id])
        return ShiftSummary(
            shift_id=shift_id,
            total_assignments=len(assignments),
            unique_employees=len({a.employee_id for a in assignments}),
            fill_rate=fill_rate(len(assignments), shift.required_employees),
        )

    def shift_stats_detailed(self, shift_id: str, start: date, end: date) -> ShiftStats:
        """Statistics of a shift over the inclusive window ``[start, end]``.

        Confirmed assignments count as completed. An unknown shift reports
        its counts with a zero duration and fill rate.
        """
        assignments = _occurrences([
            a for a in self.snapshot.assignments
            if a.shift_id == shift_id and _in_window(a, start, end)
        ])
        shift = self._shifts.get(shift_id)
        return ShiftStats(
            shift_id=shift_id,
            total_assignments=len(assignments),
            completed_assignments=sum(
                1 for a in assignments if a.status == AssignmentStatus.CONFIRMED
            ),
            cancelled_assignments=sum(1 for a in assignments if a.is_cancelled),
            average_duration=shift.duration if shift else 0.0,
            fill_rate=fill_rate(len(assignments), shift.required_employees) if shift else 0.0,
        )

    def shift_stats_for_day(self, shift_id: str, on_date: date) -> ShiftStats:
        """Fill rate of one shift on one date."""
        return self.shift_stats_detailed(shift_id, on_date, on_date)

    # ==========================
    # Totals and coverage
    # ==========================

    def overall_stats(self) -> OverallStats:
        employees = self.snapshot.employees
        assignments = _occurrences(self.snapshot.assignments)
        per_employee = [
            sum(1 for a in assignments if a.employee_id == e.id) for e in employees
        ]
        return OverallStats(
            total_employees=len(employees),
            total_shifts=len(self.snapshot.shifts),
            total_assignments=len(assignments),
            avg_shifts_per_employee=(
                sum(per_employee) / len(per_employee) if per_employee else 0.0
            ),
        )

    def weekly_stats(self, week_start: date) -> WeeklyStats:
        """Scheduled hours and coverage for the 7 days from ``week_start``."""
        week_end = week_start + timedelta(days=DAYS_PER_WEEK - 1)
        assignments = _occurrences(
            [a for a in self.snapshot.assignments if _in_window(a, week_start, week_end)]
        )
        hours = sum(self._shift_hours(a) for a in assignments if not a.is_cancelled)
        possible = total_possible_hours(self.snapshot.business_hours)
        return WeeklyStats(
            week_start=week_start,
            week_end=week_end,
            total_assignments=len(assignments),
            total_hours=hours,
            total_possible_hours=possible,
            coverage_percentage=self.coverage_policy.coverage_percentage(hours, possible),
        )

    def total_hours(self, assignments: list[ShiftAssignment]) -> float:
        """Hours of the given assignments, cancelled ones excluded.

        Each occurrence counts its shift's declared duration; an assignment
        whose shift is gone counts the span of its own times.
        """
        total = 0.0
        for assignment in _occurrences(assignments):
            if assignment.is_cancelled:
                continue
            shift = self._shifts.get(assignment.shift_id)
            if shift is not None:
                total += shift.duration
            else:
                total += duration_hours(*assignment.interval())
        return total

    def shift_status(self, assignment: ShiftAssignment, now: datetime) -> ShiftStatus:
        return shift_status(assignment, now, self._shifts.get(assignment.shift_id))

    # ==========================
    # Dashboard
    # ==========================

    def dashboard_summary(
        self,
        now: datetime,
        week_starts_on: Weekday,
    ) -> DashboardSummary:
        """Today's assignments, the next upcoming ones and the current week."""
        today = now.date()
        week_start, week_end = week_bounds(today, week_starts_on)

        upcoming = sorted(
            (a for a in self.snapshot.assignments if a.date > today),
            key=lambda a: a.date,
        )
        return DashboardSummary(
            today=today,
            week_start=week_start,
            week_end=week_end,
            total_employees=len(self.snapshot.employees),
            total_shifts=len(self.snapshot.shifts),
            today_assignments=[a for a in self.snapshot.assignments if a.date == today],
            upcoming_assignments=upcoming[:DASHBOARD_UPCOMING_LIMIT],
            current_schedule=next(
                (s for s in self.snapshot.schedules if s.week_start == week_start), None
            ),
        )


def shift_status(
    assignment: ShiftAssignment,
    now: datetime,
    shift: Optional[Shift] = None,
) -> ShiftStatus:
    """Where an assignment sits relative to ``now``.

    The occurrence starts at the assignment's start time on its date and
    lasts the shift's clock span, so an overnight head runs into the next
    day. Without the shift, the record's own times are used.
    """
    if assignment.is_cancelled:
        return ShiftStatus.CANCELLED

    start = at_time(assignment.date, assignment.start_time)
    if shift is not None and not assignment.is_overnight_tail:
        end = start + timedelta(minutes=shift.span_minutes)
    else:
        end = at_time(assignment.date, assignment.end_time)

    if now < start:
        return ShiftStatus.SCHEDULED
    if now > end:
        return ShiftStatus.COMPLETED
    return ShiftStatus.IN_PROGRESS
