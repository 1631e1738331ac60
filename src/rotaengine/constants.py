from typing import Final

# ==========================
# Record formats
# ==========================

#: ISO date format used for assignment dates and weekly schedule keys.
DATE_FORMAT_ISO: Final[str] = "%Y-%m-%d"

#: Time-of-day format used by shifts, availability and business hours.
TIME_FORMAT_HM: Final[str] = "%H:%M"

#: Start of a calendar day, as stored on overnight tails.
START_OF_DAY: Final[str] = "00:00"

#: Last minute of a calendar day, as stored on overnight heads.
END_OF_DAY: Final[str] = "23:59"


# ==========================
# Weeks
# ==========================

#: Number of days in a scheduling week.
DAYS_PER_WEEK: Final[int] = 7

#: Hours in a calendar day, used by the overnight head hour totals.
HOURS_PER_DAY: Final[int] = 24


# ==========================
# Dashboard
# ==========================

#: Number of upcoming assignments listed on the dashboard summary.
DASHBOARD_UPCOMING_LIMIT: Final[int] = 5


# ==========================
# Assignment status
# ==========================

#: Status values accepted on persisted assignments.
ASSIGNMENT_STATUSES: Final[tuple[str, ...]] = (
    "pending",
    "confirmed",
    "declined",
    "cancelled",
    "completed",
)
