"""Conversion between persisted documents and domain records.

Documents are the camelCase dictionaries the document store holds. This is
the one place where optional fields are defaulted and malformed values are
caught: decoding never raises, it returns the records it could build and a
``ValidationResult`` describing everything it had to reject. Encoding writes
the same field names back so records round-trip unchanged.
"""

import logging
from typing import Any, Optional

from rotaengine.constants import ASSIGNMENT_STATUSES, DAYS_PER_WEEK
from rotaengine.domain.models import (
    AssignmentStatus,
    BusinessHours,
    DayAvailability,
    Employee,
    EmployeePreferences,
    ScheduleSnapshot,
    Shift,
    ShiftAssignment,
    ShiftRole,
    WeeklySchedule,
)
from rotaengine.domain.time_utils import (
    Weekday,
    format_hhmm,
    format_iso_date,
    parse_hhmm,
    parse_iso_date,
)
from rotaengine.validation.errors import (
    ValidationError,
    ValidationErrorType,
    ValidationResult,
)

logger = logging.getLogger(__name__)

DEFAULT_SHIFT_DURATION = 8.0


def _error(
    result: ValidationResult,
    error_type: ValidationErrorType,
    field_name: str,
    message: str,
    record_id: Optional[str] = None,
    **details: Any,
) -> None:
    result.add_error(
        ValidationError(
            error_type=error_type,
            field=field_name,
            message=message,
            record_id=record_id,
            details=details,
        )
    )


def _required_id(doc: dict, kind: str, result: ValidationResult) -> Optional[str]:
    record_id = doc.get("id")
    if record_id in (None, ""):
        _error(result, ValidationErrorType.MISSING_FIELD, "id", f"{kind} id is required")
        return None
    return str(record_id)


def _optional_time(
    doc: dict,
    key: str,
    result: ValidationResult,
    record_id: Optional[str],
) -> tuple[Optional[str], bool]:
    """Read an optional HH:MM field. Returns (value, ok).

    Accepted values are rewritten zero-padded (``"9:00"`` becomes
    ``"09:00"``) since times are compared as strings from here on.
    """
    value = doc.get(key)
    if value in (None, ""):
        return None, True
    try:
        parsed = parse_hhmm(value)
    except ValueError:
        _error(
            result,
            ValidationErrorType.INVALID_TIME,
            key,
            f"Invalid time {value!r}, expected HH:MM",
            record_id,
            value=value,
        )
        return None, False
    return format_hhmm(parsed), True


def _documents(
    value: Any,
    field_name: str,
    result: ValidationResult,
    record_id: Optional[str] = None,
) -> list[dict]:
    """Keep the record entries of a document list, reporting anything else."""
    if value is None:
        return []
    if not isinstance(value, list):
        _error(
            result,
            ValidationErrorType.INVALID_VALUE,
            field_name,
            f"{field_name} must be a list of records, got {type(value).__name__}",
            record_id,
        )
        return []
    docs = []
    for index, entry in enumerate(value):
        if not isinstance(entry, dict):
            _error(
                result,
                ValidationErrorType.INVALID_VALUE,
                f"{field_name}.{index}",
                f"Expected a record, got {type(entry).__name__}",
                record_id,
            )
            continue
        docs.append(entry)
    return docs


def _string_list(
    doc: dict,
    key: str,
    result: ValidationResult,
    record_id: Optional[str],
) -> list:
    value = doc.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        _error(
            result,
            ValidationErrorType.INVALID_VALUE,
            key,
            f"{key} must be a list, got {type(value).__name__}",
            record_id,
        )
        return []
    return list(value)


def _weekday_key(key: Any) -> Optional[Weekday]:
    try:
        index = int(key)
    except (TypeError, ValueError):
        return None
    if not 0 <= index < DAYS_PER_WEEK:
        return None
    return Weekday(index)


# ==========================
# Employees
# ==========================


def decode_day_availability(
    doc: dict,
    day: Weekday,
    result: ValidationResult,
    employee_id: Optional[str] = None,
) -> Optional[DayAvailability]:
    """Decode one weekday's availability.

    Accepts ``start``/``end`` as well as the older ``startTime``/``endTime``
    keys. An invalid or inverted window is rejected (the day is left
    without an entry, which the availability check reads as unavailable).
    """
    field_prefix = f"availability.{int(day)}"
    is_closed = bool(doc.get("isClosed", False))
    if is_closed:
        return DayAvailability.closed()

    start_key = "start" if "start" in doc else "startTime"
    end_key = "end" if "end" in doc else "endTime"
    start, start_ok = _optional_time(doc, start_key, result, employee_id)
    end, end_ok = _optional_time(doc, end_key, result, employee_id)
    if not (start_ok and end_ok):
        return None

    if start is None or end is None:
        missing = "start" if start is None else "end"
        result.add_warning(
            f"Employee {employee_id}: {field_prefix}.{missing} not set, "
            f"defaulting to the whole day"
        )
    elif end <= start:
        _error(
            result,
            ValidationErrorType.AVAILABILITY_WINDOW_INVERTED,
            field_prefix,
            f"Availability on {day.label} must end after it starts ({start}-{end})",
            employee_id,
            start=start,
            end=end,
        )
        return None

    return DayAvailability(is_closed=False, start=start, end=end)


def decode_employee(doc: dict, result: ValidationResult) -> Optional[Employee]:
    """Decode an employee document. Returns None if it has no id."""
    employee_id = _required_id(doc, "Employee", result)
    if employee_id is None:
        return None

    availability: Optional[dict[Weekday, DayAvailability]] = None
    raw_availability = doc.get("availability")
    if raw_availability is not None:
        availability = {}
        if not isinstance(raw_availability, dict):
            _error(
                result,
                ValidationErrorType.INVALID_VALUE,
                "availability",
                "Availability must map weekdays 0-6 to day records",
                employee_id,
            )
        else:
            for key, day_doc in raw_availability.items():
                day = _weekday_key(key)
                if day is None or not isinstance(day_doc, dict):
                    _error(
                        result,
                        ValidationErrorType.INVALID_VALUE,
                        f"availability.{key}",
                        f"Invalid availability entry for day {key!r}",
                        employee_id,
                    )
                    continue
                decoded = decode_day_availability(day_doc, day, result, employee_id)
                if decoded is not None:
                    availability[day] = decoded

    role = doc.get("role", [])
    if not isinstance(role, (str, list)):
        role = str(role)

    preferences = None
    raw_preferences = doc.get("preferences")
    if isinstance(raw_preferences, dict):
        preferences = EmployeePreferences(
            preferred_shifts=_string_list(raw_preferences, "preferredShifts", result, employee_id),
            preferred_days=_string_list(raw_preferences, "preferredDays", result, employee_id),
            max_hours_per_week=raw_preferences.get("maxHoursPerWeek"),
            min_hours_per_week=raw_preferences.get("minHoursPerWeek"),
        )

    return Employee(
        id=employee_id,
        name=str(doc.get("name") or ""),
        role=role,
        availability=availability,
        email=str(doc.get("email") or ""),
        phone=str(doc.get("phone") or ""),
        color=doc.get("color"),
        skills=_string_list(doc, "skills", result, employee_id),
        notes=doc.get("notes"),
        preferences=preferences,
    )


def encode_employee(employee: Employee) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "id": employee.id,
        "name": employee.name,
        "email": employee.email,
        "phone": employee.phone,
        "role": employee.role,
    }
    if employee.availability is not None:
        doc["availability"] = {
            int(day): {
                "isClosed": entry.is_closed,
                "start": entry.start or "",
                "end": entry.end or "",
            }
            for day, entry in sorted(employee.availability.items())
        }
    if employee.color is not None:
        doc["color"] = employee.color
    if employee.skills:
        doc["skills"] = list(employee.skills)
    if employee.notes is not None:
        doc["notes"] = employee.notes
    if employee.preferences is not None:
        doc["preferences"] = {
            "preferredShifts": list(employee.preferences.preferred_shifts),
            "preferredDays": list(employee.preferences.preferred_days),
            "maxHoursPerWeek": employee.preferences.max_hours_per_week,
            "minHoursPerWeek": employee.preferences.min_hours_per_week,
        }
    return doc


# ==========================
# Shifts
# ==========================


def _number(
    doc: dict,
    key: str,
    default: Any,
    cast: type,
    result: ValidationResult,
    record_id: Optional[str],
) -> Any:
    value = doc.get(key)
    if value is None or value == "":
        return default
    try:
        return cast(value)
    except (TypeError, ValueError):
        _error(
            result,
            ValidationErrorType.INVALID_VALUE,
            key,
            f"{key} must be a number, got {value!r}",
            record_id,
        )
        return default


def decode_shift(
    doc: dict,
    result: ValidationResult,
    default_duration: float = DEFAULT_SHIFT_DURATION,
) -> Optional[Shift]:
    """Decode a shift document.

    Returns None when the id or either time is missing or malformed, since
    such a shift cannot be placed on any interval. ``isOvernight`` is always
    derived from the times; a contradicting stored flag is a warning.
    """
    shift_id = _required_id(doc, "Shift", result)
    if shift_id is None:
        return None

    start, start_ok = _optional_time(doc, "startTime", result, shift_id)
    end, end_ok = _optional_time(doc, "endTime", result, shift_id)
    if start_ok and start is None:
        _error(result, ValidationErrorType.MISSING_FIELD, "startTime",
               "Start time is required", shift_id)
    if end_ok and end is None:
        _error(result, ValidationErrorType.MISSING_FIELD, "endTime",
               "End time is required", shift_id)
    if start is None or end is None:
        return None

    derived_overnight = end < start
    declared = doc.get("isOvernight")
    if declared is not None and bool(declared) != derived_overnight:
        result.add_warning(
            f"Shift {shift_id}: isOvernight={declared} contradicts {start}-{end}, "
            f"using {derived_overnight}"
        )

    roles = []
    for role_doc in _documents(doc.get("roles"), "roles", result, shift_id):
        if not role_doc.get("roleId"):
            _error(result, ValidationErrorType.INVALID_VALUE, "roles",
                   "Shift role entries need a roleId", shift_id)
            continue
        roles.append(
            ShiftRole(
                role_id=str(role_doc["roleId"]),
                count=_number(role_doc, "count", 1, int, result, shift_id),
                duration=_number(role_doc, "duration", 0.0, float, result, shift_id),
            )
        )

    return Shift(
        id=shift_id,
        name=str(doc.get("name") or ""),
        start_time=start,
        end_time=end,
        duration=_number(doc, "duration", default_duration, float, result, shift_id),
        required_employees=_number(doc, "requiredEmployees", 1, int, result, shift_id),
        is_overnight=derived_overnight,
        roles=roles,
        color=doc.get("color"),
    )


def encode_shift(shift: Shift) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "id": shift.id,
        "name": shift.name,
        "startTime": shift.start_time,
        "endTime": shift.end_time,
        "duration": shift.duration,
        "requiredEmployees": shift.required_employees,
        "isOvernight": shift.is_overnight,
        "roles": [
            {"roleId": r.role_id, "count": r.count, "duration": r.duration}
            for r in shift.roles
        ],
    }
    if shift.color is not None:
        doc["color"] = shift.color
    return doc


# ==========================
# Assignments
# ==========================


def decode_assignment(
    doc: dict,
    result: ValidationResult,
    shifts_by_id: Optional[dict[str, Shift]] = None,
) -> Optional[ShiftAssignment]:
    """Decode an assignment document.

    Missing ``startTime``/``endTime`` are copied from the referenced shift.
    Returns None when a required field is missing or malformed.
    """
    assignment_id = _required_id(doc, "Assignment", result)
    if assignment_id is None:
        return None

    ok = True
    for key, label in (("shiftId", "Shift"), ("employeeId", "Employee"), ("date", "Date")):
        if doc.get(key) in (None, ""):
            _error(result, ValidationErrorType.MISSING_FIELD, key,
                   f"{label} is required", assignment_id)
            ok = False
    if not ok:
        return None

    try:
        assignment_date = parse_iso_date(doc["date"])
    except ValueError as e:
        _error(result, ValidationErrorType.INVALID_DATE, "date", str(e), assignment_id)
        return None

    status_value = doc.get("status") or AssignmentStatus.PENDING.value
    if status_value not in ASSIGNMENT_STATUSES:
        _error(
            result,
            ValidationErrorType.INVALID_STATUS,
            "status",
            f"Unknown status {status_value!r}",
            assignment_id,
        )
        return None

    shift_id = str(doc["shiftId"])
    start, start_ok = _optional_time(doc, "startTime", result, assignment_id)
    end, end_ok = _optional_time(doc, "endTime", result, assignment_id)
    if not (start_ok and end_ok):
        return None

    shift = (shifts_by_id or {}).get(shift_id)
    if start is None or end is None:
        if shift is None:
            _error(
                result,
                ValidationErrorType.UNKNOWN_REFERENCE,
                "shiftId",
                f"Shift {shift_id} not found; cannot derive assignment times",
                assignment_id,
            )
            return None
        start = start or shift.start_time
        end = end or shift.end_time

    is_overnight = doc.get("isOvernight")
    if is_overnight is None:
        is_overnight = shift.is_overnight if shift is not None else False

    return ShiftAssignment(
        id=assignment_id,
        shift_id=shift_id,
        employee_id=str(doc["employeeId"]),
        date=assignment_date,
        start_time=start,
        end_time=end,
        is_overnight=bool(is_overnight),
        status=AssignmentStatus(status_value),
        role_id=str(doc.get("roleId") or ""),
        notes=doc.get("notes"),
    )


def encode_assignment(assignment: ShiftAssignment) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "id": assignment.id,
        "shiftId": assignment.shift_id,
        "employeeId": assignment.employee_id,
        "date": format_iso_date(assignment.date),
        "startTime": assignment.start_time,
        "endTime": assignment.end_time,
        "isOvernight": assignment.is_overnight,
        "status": assignment.status.value,
        "roleId": assignment.role_id,
    }
    if assignment.notes is not None:
        doc["notes"] = assignment.notes
    return doc


# ==========================
# Business hours
# ==========================


def decode_business_hours(doc: dict, result: ValidationResult) -> Optional[BusinessHours]:
    """Decode a business-hours document.

    ``isOpen`` wins over the older ``isClosed`` flag when both are present.
    """
    record_id = str(doc.get("id") or "")
    day = _weekday_key(doc.get("dayOfWeek"))
    if day is None:
        _error(
            result,
            ValidationErrorType.INVALID_VALUE,
            "dayOfWeek",
            f"dayOfWeek must be 0-6, got {doc.get('dayOfWeek')!r}",
            record_id or None,
        )
        return None

    if "isOpen" in doc:
        is_open = bool(doc["isOpen"])
    elif "isClosed" in doc:
        is_open = not bool(doc["isClosed"])
    else:
        is_open = True

    open_time, open_ok = _optional_time(doc, "openTime", result, record_id or None)
    close_time, close_ok = _optional_time(doc, "closeTime", result, record_id or None)
    if not (open_ok and close_ok):
        return None

    return BusinessHours(
        day_of_week=day,
        open_time=open_time,
        close_time=close_time,
        is_open=is_open,
        id=record_id,
    )


def encode_business_hours(hours: BusinessHours) -> dict[str, Any]:
    return {
        "id": hours.id,
        "dayOfWeek": int(hours.day_of_week),
        "openTime": hours.open_time or "",
        "closeTime": hours.close_time or "",
        "isOpen": hours.is_open,
    }


# ==========================
# Weekly schedules
# ==========================


def decode_weekly_schedule(
    doc: dict,
    result: ValidationResult,
    shifts_by_id: Optional[dict[str, Shift]] = None,
) -> Optional[WeeklySchedule]:
    """Decode a weekly schedule document and its nested assignments."""
    schedule_id = _required_id(doc, "Schedule", result)
    if schedule_id is None:
        return None

    try:
        week_start = parse_iso_date(doc.get("weekStart"))
        week_end = parse_iso_date(doc.get("weekEnd"))
    except ValueError as e:
        _error(result, ValidationErrorType.INVALID_DATE, "weekStart", str(e), schedule_id)
        return None

    raw_shifts = doc.get("shifts") or {}
    if not isinstance(raw_shifts, dict):
        _error(
            result,
            ValidationErrorType.INVALID_VALUE,
            "shifts",
            "Schedule shifts must map ISO dates to assignment lists",
            schedule_id,
        )
        raw_shifts = {}

    shifts = {}
    for key, assignment_docs in raw_shifts.items():
        try:
            day = parse_iso_date(key)
        except ValueError as e:
            _error(result, ValidationErrorType.INVALID_DATE, "shifts", str(e), schedule_id)
            continue
        decoded = [
            decode_assignment(a, result, shifts_by_id)
            for a in _documents(assignment_docs, f"shifts.{key}", result, schedule_id)
        ]
        shifts[day] = [a for a in decoded if a is not None]

    return WeeklySchedule(id=schedule_id, week_start=week_start, week_end=week_end, shifts=shifts)


def encode_weekly_schedule(schedule: WeeklySchedule) -> dict[str, Any]:
    return {
        "id": schedule.id,
        "weekStart": format_iso_date(schedule.week_start),
        "weekEnd": format_iso_date(schedule.week_end),
        "shifts": {
            format_iso_date(d): [encode_assignment(a) for a in assignments]
            for d, assignments in sorted(schedule.shifts.items())
        },
    }


# ==========================
# Snapshots
# ==========================


def decode_snapshot(
    doc: dict,
    default_duration: float = DEFAULT_SHIFT_DURATION,
) -> tuple[ScheduleSnapshot, ValidationResult]:
    """Decode a whole snapshot document.

    Expected keys: ``employees``, ``shifts``, ``assignments``,
    ``businessHours`` and ``schedules``, each a list of documents. Shifts
    are decoded first so assignments can inherit their times. Entries that
    are not records are reported and skipped.
    """
    result = ValidationResult()
    if not isinstance(doc, dict):
        _error(
            result,
            ValidationErrorType.INVALID_VALUE,
            "snapshot",
            f"Snapshot must be a record, got {type(doc).__name__}",
        )
        return ScheduleSnapshot(), result

    def documents(key: str) -> list[dict]:
        return _documents(doc.get(key), key, result)

    employees = [decode_employee(d, result) for d in documents("employees")]
    shifts = [decode_shift(d, result, default_duration) for d in documents("shifts")]
    shifts_by_id = {s.id: s for s in shifts if s is not None}
    assignments = [
        decode_assignment(d, result, shifts_by_id) for d in documents("assignments")
    ]
    business_hours = [
        decode_business_hours(d, result) for d in documents("businessHours")
    ]
    schedules = [
        decode_weekly_schedule(d, result, shifts_by_id) for d in documents("schedules")
    ]

    snapshot = ScheduleSnapshot(
        employees=[e for e in employees if e is not None],
        shifts=[s for s in shifts if s is not None],
        assignments=[a for a in assignments if a is not None],
        business_hours=[h for h in business_hours if h is not None],
        schedules=[s for s in schedules if s is not None],
    )
    if not result.is_valid:
        logger.info("Snapshot decoded with %d rejected value(s)", len(result.errors))
    return snapshot, result


def encode_snapshot(snapshot: ScheduleSnapshot) -> dict[str, Any]:
    return {
        "employees": [encode_employee(e) for e in snapshot.employees],
        "shifts": [encode_shift(s) for s in snapshot.shifts],
        "assignments": [encode_assignment(a) for a in snapshot.assignments],
        "businessHours": [encode_business_hours(h) for h in snapshot.business_hours],
        "schedules": [encode_weekly_schedule(s) for s in snapshot.schedules],
    }
