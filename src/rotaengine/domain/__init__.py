"""Domain models, time primitives and business rules for rota validation."""

from rotaengine.domain.business_hours import (
    hours_for_day,
    is_business_open,
    next_open_time,
    total_possible_hours,
)
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
    ShiftStatus,
    WeeklySchedule,
    prune_dangling,
)
from rotaengine.domain.policies import (
    AvailabilityPolicy,
    ContainmentAvailabilityPolicy,
    CoveragePolicy,
    DailyCoveragePolicy,
    HourlyOvernightHoursPolicy,
    LegacyCoveragePolicy,
    MinuteOvernightHoursPolicy,
    OverlapAvailabilityPolicy,
    OvernightHoursPolicy,
)
from rotaengine.domain.time_utils import (
    Weekday,
    duration_hours,
    format_iso_date,
    intervals_overlap,
    parse_hhmm,
    parse_iso_date,
    week_bounds,
    week_dates,
)
from rotaengine.domain.records import decode_snapshot, encode_snapshot

__all__ = [
    # Models
    "AssignmentStatus",
    "BusinessHours",
    "DayAvailability",
    "Employee",
    "EmployeePreferences",
    "ScheduleSnapshot",
    "Shift",
    "ShiftAssignment",
    "ShiftRole",
    "ShiftStatus",
    "WeeklySchedule",
    "Weekday",
    "prune_dangling",
    # Time utilities
    "duration_hours",
    "format_iso_date",
    "intervals_overlap",
    "parse_hhmm",
    "parse_iso_date",
    "week_bounds",
    "week_dates",
    # Business hours
    "hours_for_day",
    "is_business_open",
    "next_open_time",
    "total_possible_hours",
    # Policies
    "AvailabilityPolicy",
    "ContainmentAvailabilityPolicy",
    "CoveragePolicy",
    "DailyCoveragePolicy",
    "HourlyOvernightHoursPolicy",
    "LegacyCoveragePolicy",
    "MinuteOvernightHoursPolicy",
    "OverlapAvailabilityPolicy",
    "OvernightHoursPolicy",
    # Records
    "decode_snapshot",
    "encode_snapshot",
]
