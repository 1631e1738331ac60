"""Validation of rota records and candidate assignments.

This module provides a single source of truth for every rule a rota must
satisfy: well-formed shifts, employees and business hours, the pre-commit
gate for a new assignment (availability and double-booking), and the
invariants of a whole snapshot or weekly schedule. Problems are returned as
``ValidationResult`` values; nothing is raised.
"""

import logging
import re
from collections import defaultdict
from datetime import date, timedelta
from typing import Optional

from rotaengine.constants import DAYS_PER_WEEK
from rotaengine.domain.models import (
    BusinessHours,
    Employee,
    ScheduleSnapshot,
    Shift,
    ShiftAssignment,
    WeeklySchedule,
)
from rotaengine.domain.policies import AvailabilityPolicy, OverlapAvailabilityPolicy
from rotaengine.domain.time_utils import intervals_overlap
from rotaengine.validation.availability import is_available
from rotaengine.validation.conflicts import (
    ShiftCatalog,
    as_catalog,
    assignment_interval,
    find_conflicts,
    shift_intervals_on,
)
from rotaengine.validation.errors import (
    ValidationError,
    ValidationErrorType,
    ValidationResult,
)

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")


class RotaValidator:
    """Validates rota records against all constraints.

    Example:
        >>> validator = RotaValidator()
        >>> result = validator.validate_assignment(assignment, snapshot)
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error.to_dict())
    """

    def __init__(self, availability_policy: Optional[AvailabilityPolicy] = None):
        self.availability_policy = availability_policy or OverlapAvailabilityPolicy()

    # ==========================
    # Single records
    # ==========================

    def validate_shift(self, shift: Shift) -> ValidationResult:
        """Validate a shift template's required fields and positive values."""
        result = ValidationResult()

        if not shift.name:
            result.add_error(self._error(
                ValidationErrorType.MISSING_FIELD, "name", "Shift name is required", shift.id
            ))
        if not shift.start_time:
            result.add_error(self._error(
                ValidationErrorType.MISSING_FIELD, "startTime", "Start time is required", shift.id
            ))
        if not shift.end_time:
            result.add_error(self._error(
                ValidationErrorType.MISSING_FIELD, "endTime", "End time is required", shift.id
            ))
        if shift.duration <= 0:
            result.add_error(self._error(
                ValidationErrorType.INVALID_VALUE,
                "duration",
                "Duration must be greater than 0",
                shift.id,
                duration=shift.duration,
            ))
        if shift.required_employees <= 0:
            result.add_error(self._error(
                ValidationErrorType.INVALID_VALUE,
                "requiredEmployees",
                "Required employees must be greater than 0",
                shift.id,
                required_employees=shift.required_employees,
            ))

        return result

    def validate_employee(self, employee: Employee) -> ValidationResult:
        """Validate an employee's contact fields, role and availability."""
        result = ValidationResult()

        if not employee.name:
            result.add_error(self._error(
                ValidationErrorType.MISSING_FIELD, "name", "Employee name is required", employee.id
            ))
        if not employee.email:
            result.add_error(self._error(
                ValidationErrorType.MISSING_FIELD, "email", "Email is required", employee.id
            ))
        elif not EMAIL_PATTERN.search(employee.email):
            result.add_error(self._error(
                ValidationErrorType.INVALID_EMAIL, "email", "Invalid email format", employee.id
            ))
        if not employee.phone:
            result.add_error(self._error(
                ValidationErrorType.MISSING_FIELD, "phone", "Phone number is required", employee.id
            ))
        if not employee.roles:
            result.add_error(self._error(
                ValidationErrorType.MISSING_FIELD, "role", "Role is required", employee.id
            ))

        for day, entry in sorted((employee.availability or {}).items()):
            if entry.is_closed:
                continue
            field_prefix = f"availability.{int(day)}"
            if not entry.start or not entry.end:
                result.add_error(self._error(
                    ValidationErrorType.MISSING_FIELD,
                    field_prefix,
                    f"Start and end are required when available on {day.label}",
                    employee.id,
                ))
            elif entry.end <= entry.start:
                result.add_error(self._error(
                    ValidationErrorType.AVAILABILITY_WINDOW_INVERTED,
                    field_prefix,
                    f"Availability on {day.label} must end after it starts",
                    employee.id,
                ))

        return result

    def validate_business_hours(self, hours: BusinessHours) -> ValidationResult:
        """Validate an opening window; closed days need no times."""
        result = ValidationResult()
        if not hours.is_open:
            return result

        if not hours.open_time:
            result.add_error(self._error(
                ValidationErrorType.MISSING_FIELD,
                "openTime",
                "Open time is required when business is open",
                hours.id or None,
            ))
        if not hours.close_time:
            result.add_error(self._error(
                ValidationErrorType.MISSING_FIELD,
                "closeTime",
                "Close time is required when business is open",
                hours.id or None,
            ))
        if hours.open_time and hours.close_time and hours.close_time <= hours.open_time:
            result.add_error(self._error(
                ValidationErrorType.CLOSE_BEFORE_OPEN,
                "closeTime",
                "Close time must be after open time",
                hours.id or None,
                open_time=hours.open_time,
                close_time=hours.close_time,
            ))

        return result

    # ==========================
    # Candidate assignments
    # ==========================

    def validate_assignment(
        self,
        assignment: ShiftAssignment,
        snapshot: ScheduleSnapshot,
    ) -> ValidationResult:
        """Pre-commit gate for an assignment against the latest snapshot.

        Checks required references, then places the shift on the
        assignment's date (split into day-scoped halves when it runs past
        midnight) and checks every half for double-booking and availability.
        The assignment itself and its overnight partner are ignored when
        looking for conflicts, so an edit does not collide with itself.

        Unknown employees or shifts are reported as warnings only: a
        dangling reference must never block the check.
        """
        result = ValidationResult()

        for field_name, value, message in (
            ("employeeId", assignment.employee_id, "Employee is required"),
            ("shiftId", assignment.shift_id, "Shift is required"),
            ("date", assignment.date, "Date is required"),
        ):
            if not value:
                result.add_error(self._error(
                    ValidationErrorType.MISSING_FIELD, field_name, message, assignment.id
                ))
        if not result.is_valid:
            return result

        catalog = snapshot.shifts_by_id()
        shift = catalog.get(assignment.shift_id)
        if shift is None:
            result.add_warning(f"Shift {assignment.shift_id} not found; checks skipped")
            return result

        employee = snapshot.get_employee(assignment.employee_id)
        if employee is None:
            result.add_warning(
                f"Employee {assignment.employee_id} not found; availability not checked"
            )

        own_ids = {assignment.id}
        own_ids.update(
            a.id for a in snapshot.assignments if a.is_partner_of(assignment)
        )

        # A tail record stands for the shift started the day before
        start_date = assignment.date
        if assignment.is_overnight_tail:
            start_date -= timedelta(days=1)

        self._check_candidate(
            result,
            snapshot.assignments,
            employee,
            assignment.employee_id,
            shift,
            start_date,
            catalog,
            own_ids,
        )
        return result

    def check_candidate(
        self,
        employee_id: str,
        shift_id: str,
        on_date: date,
        snapshot: ScheduleSnapshot,
    ) -> ValidationResult:
        """Pre-commit gate for placing an employee on a shift on a date."""
        result = ValidationResult()
        catalog = snapshot.shifts_by_id()
        shift = catalog.get(shift_id)
        if shift is None:
            result.add_error(self._error(
                ValidationErrorType.UNKNOWN_REFERENCE, "shiftId", f"Shift {shift_id} not found"
            ))
            return result

        employee = snapshot.get_employee(employee_id)
        if employee is None:
            result.add_error(self._error(
                ValidationErrorType.UNKNOWN_REFERENCE,
                "employeeId",
                f"Employee {employee_id} not found",
            ))
            return result

        self._check_candidate(
            result, snapshot.assignments, employee, employee_id, shift, on_date, catalog, set()
        )
        return result

    def _check_candidate(
        self,
        result: ValidationResult,
        existing: list[ShiftAssignment],
        employee: Optional[Employee],
        employee_id: str,
        shift: Shift,
        on_date: date,
        catalog: ShiftCatalog,
        exclude_ids: set[str],
    ) -> None:
        conflicting: list[ShiftAssignment] = []
        unavailable = False
        for start, end in shift_intervals_on(shift, on_date):
            conflicting.extend(
                find_conflicts(existing, employee_id, start, end, catalog, exclude_ids)
            )
            if employee is not None and not is_available(
                employee, start, end, self.availability_policy
            ):
                unavailable = True

        if conflicting:
            result.add_error(self._error(
                ValidationErrorType.SHIFT_CONFLICT,
                "conflict",
                "Employee has a conflicting shift",
                employee_id,
                conflicting_ids=[a.id for a in conflicting],
            ))
        if unavailable:
            result.add_error(self._error(
                ValidationErrorType.EMPLOYEE_UNAVAILABLE,
                "availability",
                "Employee is not available during this time",
                employee_id,
            ))

    # ==========================
    # Collections and invariants
    # ==========================

    def validate_no_overlaps(
        self,
        assignments: list[ShiftAssignment],
        shift_catalog: ShiftCatalog,
    ) -> ValidationResult:
        """Check that no employee is double-booked on any date.

        Cancelled assignments and assignments with unresolved shifts are
        ignored.
        """
        result = ValidationResult()
        catalog = as_catalog(shift_catalog)

        by_employee_date: dict[tuple[str, date], list] = defaultdict(list)
        for assignment in assignments:
            if assignment.is_cancelled:
                continue
            shift = catalog.get(assignment.shift_id)
            if shift is None:
                continue
            start, end = assignment_interval(assignment, shift)
            by_employee_date[(assignment.employee_id, assignment.date)].append(
                (start, end, assignment)
            )

        for (employee_id, d), intervals in sorted(by_employee_date.items()):
            intervals.sort(key=lambda item: item[0])
            for i, (start_a, end_a, first) in enumerate(intervals):
                for start_b, end_b, second in intervals[i + 1:]:
                    if intervals_overlap(start_a, end_a, start_b, end_b):
                        result.add_error(self._error(
                            ValidationErrorType.OVERLAPPING_ASSIGNMENTS,
                            "conflict",
                            f"Assignments {first.id} and {second.id} overlap on {d}",
                            employee_id,
                            assignment_ids=[first.id, second.id],
                        ))

        return result

    def validate_overnight_pairs(
        self,
        assignments: list[ShiftAssignment],
        window: Optional[tuple[date, date]] = None,
    ) -> ValidationResult:
        """Check that every overnight half has its partner.

        Args:
            assignments: Assignments to check.
            window: Optional inclusive date range. A half whose partner
                would fall outside the range is not reported, since the
                partner belongs to a neighbouring week.
        """
        result = ValidationResult()
        overnight = [a for a in assignments if a.is_overnight]

        for half in overnight:
            partner_date = (
                half.date + timedelta(days=1) if half.is_overnight_head
                else half.date - timedelta(days=1)
            )
            if window is not None and not window[0] <= partner_date <= window[1]:
                continue
            if any(half.is_partner_of(other) for other in overnight):
                continue

            kind = "head" if half.is_overnight_head else "tail"
            logger.warning(
                "Overnight %s %s for shift %s has no partner on %s",
                kind,
                half.id,
                half.shift_id,
                partner_date,
            )
            result.add_error(self._error(
                ValidationErrorType.OVERNIGHT_PAIR_BROKEN,
                "isOvernight",
                f"Overnight {kind} on {half.date} has no matching half on {partner_date}",
                half.id,
                shift_id=half.shift_id,
            ))

        return result

    def validate_weekly_schedule(
        self,
        schedule: WeeklySchedule,
        shift_catalog: ShiftCatalog,
    ) -> ValidationResult:
        """Validate the invariants of a weekly schedule container.

        - weekEnd is weekStart + 6 days
        - every date key and assignment date lies within the week
        - no employee is double-booked on a date
        - overnight halves are paired within the week
        """
        result = ValidationResult()

        if schedule.week_end != schedule.week_start + timedelta(days=DAYS_PER_WEEK - 1):
            result.add_error(self._error(
                ValidationErrorType.WEEK_BOUNDS_INVALID,
                "weekEnd",
                f"Week must end 6 days after {schedule.week_start}, got {schedule.week_end}",
                schedule.id,
            ))

        for d, day_assignments in sorted(schedule.shifts.items()):
            if not schedule.contains(d):
                result.add_error(self._error(
                    ValidationErrorType.DATE_OUTSIDE_WEEK,
                    "shifts",
                    f"Date {d} is outside {schedule.week_start} - {schedule.week_end}",
                    schedule.id,
                ))
            for assignment in day_assignments:
                if assignment.date != d:
                    result.add_error(self._error(
                        ValidationErrorType.DATE_OUTSIDE_WEEK,
                        "date",
                        f"Assignment dated {assignment.date} is filed under {d}",
                        assignment.id,
                    ))

        assignments = schedule.all_assignments()
        result.extend(self.validate_no_overlaps(assignments, shift_catalog))
        result.extend(
            self.validate_overnight_pairs(
                assignments, window=(schedule.week_start, schedule.week_end)
            )
        )
        return result

    def validate_snapshot(self, snapshot: ScheduleSnapshot) -> ValidationResult:
        """Validate every record of a snapshot and the cross-record invariants."""
        result = ValidationResult()

        for shift in snapshot.shifts:
            result.extend(self.validate_shift(shift))
        for employee in snapshot.employees:
            result.extend(self.validate_employee(employee))
        for hours in snapshot.business_hours:
            result.extend(self.validate_business_hours(hours))

        catalog = snapshot.shifts_by_id()
        employee_ids = {e.id for e in snapshot.employees}
        for assignment in snapshot.assignments:
            if assignment.shift_id not in catalog:
                result.add_warning(
                    f"Assignment {assignment.id} references missing shift {assignment.shift_id}"
                )
            if assignment.employee_id not in employee_ids:
                result.add_warning(
                    f"Assignment {assignment.id} references missing employee "
                    f"{assignment.employee_id}"
                )

        result.extend(self.validate_no_overlaps(snapshot.assignments, catalog))
        result.extend(self.validate_overnight_pairs(snapshot.assignments))

        for schedule in snapshot.schedules:
            result.extend(self.validate_weekly_schedule(schedule, catalog))

        return result

    @staticmethod
    def _error(
        error_type: ValidationErrorType,
        field_name: str,
        message: str,
        record_id: Optional[str] = None,
        **details,
    ) -> ValidationError:
        return ValidationError(
            error_type=error_type,
            field=field_name,
            message=message,
            record_id=record_id,
            details=details,
        )
