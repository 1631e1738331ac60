"""Domain models for the rota engine.

This module contains the typed records the engine works on: employees with
weekly availability, shift templates, dated shift assignments, weekly
schedule containers and business hours. Records are plain dataclasses that
are fully populated by ``rotaengine.domain.records`` before any check runs.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional, Union

from rotaengine.constants import DAYS_PER_WEEK, END_OF_DAY, START_OF_DAY
from rotaengine.domain.time_utils import Weekday, at_time, hour_of, minutes_of_day


class AssignmentStatus(Enum):
    """Lifecycle status of a shift assignment."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class ShiftStatus(Enum):
    """Where an assignment sits relative to the current time."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class DayAvailability:
    """Availability window for one weekday.

    Attributes:
        is_closed: If True, the employee is unavailable the whole day.
        start: Earliest time of day ("HH:MM"), None if not declared.
        end: Latest time of day ("HH:MM"), None if not declared.
    """

    is_closed: bool = False
    start: Optional[str] = None
    end: Optional[str] = None

    @classmethod
    def closed(cls) -> "DayAvailability":
        """Create availability representing a day off."""
        return cls(is_closed=True)

    def window(self) -> tuple[str, str]:
        """Declared window with missing bounds defaulted to the whole day."""
        return (self.start or START_OF_DAY, self.end or END_OF_DAY)


@dataclass
class EmployeePreferences:
    """Scheduling preferences an employee has declared."""

    preferred_shifts: list[str] = field(default_factory=list)
    preferred_days: list[str] = field(default_factory=list)
    max_hours_per_week: Optional[float] = None
    min_hours_per_week: Optional[float] = None


@dataclass
class Employee:
    """An employee who can be placed on shifts.

    Attributes:
        id: Unique identifier.
        name: Display name.
        role: One role identifier or a list of them, kept as stored.
        availability: Weekday to availability window. None means the
            employee declared no availability and is unrestricted.
        email: Contact email.
        phone: Contact phone number.
        color: Display color.
        skills: Free-form skill tags.
        notes: Free-form notes.
        preferences: Declared scheduling preferences, if any.
    """

    id: str
    name: str
    role: Union[str, list[str]] = field(default_factory=list)
    availability: Optional[dict[Weekday, DayAvailability]] = None
    email: str = ""
    phone: str = ""
    color: Optional[str] = None
    skills: list[str] = field(default_factory=list)
    notes: Optional[str] = None
    preferences: Optional[EmployeePreferences] = None

    @property
    def roles(self) -> list[str]:
        """Role identifiers as a list, whatever the stored shape."""
        if isinstance(self.role, str):
            return [self.role] if self.role else []
        return list(self.role)

    def has_role(self, role_id: str) -> bool:
        return role_id in self.roles

    def get_availability(self, day: Weekday) -> Optional[DayAvailability]:
        """Availability for a weekday, None when no entry is declared."""
        if self.availability is None:
            return None
        return self.availability.get(day)

    def open_days(self) -> int:
        """Number of declared weekdays that are not closed."""
        if self.availability is None:
            return DAYS_PER_WEEK
        return sum(1 for day in self.availability.values() if not day.is_closed)


@dataclass
class ShiftRole:
    """Per-role staffing need of a shift."""

    role_id: str
    count: int = 1
    duration: float = 0.0


@dataclass
class Shift:
    """A reusable shift template, not a dated occurrence.

    Attributes:
        id: Unique identifier.
        name: Display name (e.g. "Night").
        start_time: Start time of day ("HH:MM").
        end_time: End time of day ("HH:MM"); earlier than start_time for
            overnight shifts.
        duration: Declared length in hours, independent of start/end.
        required_employees: Minimum staffing.
        is_overnight: True when end_time < start_time.
        roles: Optional per-role headcount.
        color: Display color.
    """

    id: str
    name: str
    start_time: str
    end_time: str
    duration: float
    required_employees: int = 1
    is_overnight: bool = False
    roles: list[ShiftRole] = field(default_factory=list)
    color: Optional[str] = None

    @property
    def crosses_midnight(self) -> bool:
        """Whether the shift ends on the following calendar day."""
        return self.end_time < self.start_time

    @property
    def start_hour(self) -> int:
        return hour_of(self.start_time)

    @property
    def end_hour(self) -> int:
        return hour_of(self.end_time)

    @property
    def span_minutes(self) -> int:
        """Clock minutes from start to end, wrapping midnight."""
        span = minutes_of_day(self.end_time) - minutes_of_day(self.start_time)
        if span < 0:
            span += 24 * 60
        return span


@dataclass
class ShiftAssignment:
    """One employee placed on one shift on one calendar date.

    An overnight shift started on day D is stored as two linked records: a
    head on D running from the shift start to 23:59 and a tail on D+1
    running from 00:00 to the shift end. Both share shift_id and employee_id
    and both carry is_overnight=True.

    Attributes:
        id: Unique identifier.
        shift_id: The shift template.
        employee_id: The employee.
        date: Calendar date of this record.
        start_time: Start time of day on ``date`` ("HH:MM").
        end_time: End time of day on ``date`` ("HH:MM").
        is_overnight: Whether this record is one half of an overnight shift.
        status: Lifecycle status.
        role_id: Role the employee fills on this shift.
        notes: Free-form notes.
    """

    id: str
    shift_id: str
    employee_id: str
    date: date
    start_time: str
    end_time: str
    is_overnight: bool = False
    status: AssignmentStatus = AssignmentStatus.PENDING
    role_id: str = ""
    notes: Optional[str] = None

    @property
    def is_cancelled(self) -> bool:
        return self.status == AssignmentStatus.CANCELLED

    @property
    def is_overnight_head(self) -> bool:
        """Pre-midnight half of an overnight shift."""
        return self.is_overnight and self.start_time != START_OF_DAY

    @property
    def is_overnight_tail(self) -> bool:
        """Post-midnight half of an overnight shift."""
        return self.is_overnight and self.start_time == START_OF_DAY

    def interval(self) -> tuple[datetime, datetime]:
        """Absolute start and end of this record on its own date."""
        return at_time(self.date, self.start_time), at_time(self.date, self.end_time)

    def is_partner_of(self, other: "ShiftAssignment") -> bool:
        """Whether ``other`` is the other half of the same overnight shift."""
        if not (self.is_overnight and other.is_overnight):
            return False
        if self.shift_id != other.shift_id or self.employee_id != other.employee_id:
            return False
        if self.is_overnight_head and other.is_overnight_tail:
            return other.date == self.date + timedelta(days=1)
        if self.is_overnight_tail and other.is_overnight_head:
            return other.date == self.date - timedelta(days=1)
        return False


@dataclass
class WeeklySchedule:
    """Week-bounded container of dated assignments.

    Attributes:
        id: Unique identifier.
        week_start: First date of the week.
        week_end: Last date of the week (week_start + 6 days).
        shifts: Dict mapping dates to ordered assignment lists.
    """

    id: str
    week_start: date
    week_end: date
    shifts: dict[date, list[ShiftAssignment]] = field(default_factory=dict)

    @property
    def schedule_dates(self) -> list[date]:
        """List of all dates in the week."""
        dates = []
        current = self.week_start
        while current <= self.week_end:
            dates.append(current)
            current += timedelta(days=1)
        return dates

    def contains(self, d: date) -> bool:
        return self.week_start <= d <= self.week_end

    def assignments_for(self, d: date) -> list[ShiftAssignment]:
        return list(self.shifts.get(d, []))

    def all_assignments(self) -> list[ShiftAssignment]:
        """Every assignment in date order."""
        result = []
        for d in sorted(self.shifts):
            result.extend(self.shifts[d])
        return result


@dataclass
class BusinessHours:
    """Opening window for one weekday.

    Attributes:
        day_of_week: The weekday.
        open_time: Opening time ("HH:MM"), None if not declared.
        close_time: Closing time ("HH:MM"), None if not declared.
        is_open: Whether the business opens at all on this day.
        id: Record identifier.
    """

    day_of_week: Weekday
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    is_open: bool = True
    id: str = ""

    @property
    def has_window(self) -> bool:
        return self.is_open and bool(self.open_time) and bool(self.close_time)


@dataclass
class ScheduleSnapshot:
    """Consistent in-memory snapshot handed to the engine by the caller.

    Attributes:
        employees: All employees.
        shifts: All shift templates.
        assignments: All dated assignments.
        business_hours: Opening windows, one entry per configured weekday.
        schedules: Weekly schedule containers.
    """

    employees: list[Employee] = field(default_factory=list)
    shifts: list[Shift] = field(default_factory=list)
    assignments: list[ShiftAssignment] = field(default_factory=list)
    business_hours: list[BusinessHours] = field(default_factory=list)
    schedules: list[WeeklySchedule] = field(default_factory=list)

    def employees_by_id(self) -> dict[str, Employee]:
        return {e.id: e for e in self.employees}

    def shifts_by_id(self) -> dict[str, Shift]:
        return {s.id: s for s in self.shifts}

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        return next((e for e in self.employees if e.id == employee_id), None)

    def get_shift(self, shift_id: str) -> Optional[Shift]:
        return next((s for s in self.shifts if s.id == shift_id), None)


def prune_dangling(
    assignments: list[ShiftAssignment],
    employees: list[Employee],
    shifts: list[Shift],
) -> list[ShiftAssignment]:
    """Assignments whose employee and shift both still exist.

    Applies the cascade rule of employee/shift deletion to a snapshot.
    """
    employee_ids = {e.id for e in employees}
    shift_ids = {s.id for s in shifts}
    return [
        a for a in assignments
        if a.employee_id in employee_ids and a.shift_id in shift_ids
    ]
