"""Caller-tunable settings for the rota engine.

``RotaSettings`` is built once from the ``settings`` document of a snapshot
and handed to the parts that need it. Defaults mirror the rota application's
stored defaults.
"""

from dataclasses import dataclass
from typing import Any, Optional

from rotaengine.domain.models import Weekday
from rotaengine.domain.policies import (
    AvailabilityPolicy,
    CoveragePolicy,
    OvernightHoursPolicy,
    availability_policy_for,
    coverage_policy_for,
    overnight_hours_policy_for,
)


@dataclass
class RotaSettings:
    """Settings shared by validation, splitting and reporting.

    Attributes:
        scheduling_week_starts_on: First weekday of scheduling weeks (grids,
            weekly schedule containers).
        dashboard_week_starts_on: First weekday of dashboard weeks.
        default_shift_duration: Hours used when a shift document omits
            ``duration``.
        availability_policy: ``"overlap"`` or ``"containment"``.
        coverage_policy: ``"legacy"`` or ``"daily"``.
        overnight_hours_policy: ``"hourly"`` or ``"minute"``.
    """

    scheduling_week_starts_on: Weekday = Weekday.MONDAY
    dashboard_week_starts_on: Weekday = Weekday.SUNDAY
    default_shift_duration: float = 8.0
    availability_policy: str = "overlap"
    coverage_policy: str = "legacy"
    overnight_hours_policy: str = "hourly"

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "RotaSettings":
        """Build settings from a camelCase settings document.

        Unknown keys are ignored and missing keys keep their defaults.
        Raises ValueError for an out-of-range weekday.
        """
        settings = cls()
        if not data:
            return settings

        if "weekStartsOn" in data:
            settings.scheduling_week_starts_on = Weekday(int(data["weekStartsOn"]))
        if "dashboardWeekStartsOn" in data:
            settings.dashboard_week_starts_on = Weekday(int(data["dashboardWeekStartsOn"]))
        if "defaultShiftDuration" in data:
            settings.default_shift_duration = float(data["defaultShiftDuration"])
        if "availabilityPolicy" in data:
            settings.availability_policy = str(data["availabilityPolicy"])
        if "coveragePolicy" in data:
            settings.coverage_policy = str(data["coveragePolicy"])
        if "overnightHoursPolicy" in data:
            settings.overnight_hours_policy = str(data["overnightHoursPolicy"])
        return settings

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the camelCase settings document."""
        return {
            "weekStartsOn": int(self.scheduling_week_starts_on),
            "dashboardWeekStartsOn": int(self.dashboard_week_starts_on),
            "defaultShiftDuration": self.default_shift_duration,
            "availabilityPolicy": self.availability_policy,
            "coveragePolicy": self.coverage_policy,
            "overnightHoursPolicy": self.overnight_hours_policy,
        }

    def build_availability_policy(self) -> AvailabilityPolicy:
        return availability_policy_for(self.availability_policy)

    def build_coverage_policy(self) -> CoveragePolicy:
        return coverage_policy_for(self.coverage_policy)

    def build_overnight_hours_policy(self) -> OvernightHoursPolicy:
        return overnight_hours_policy_for(self.overnight_hours_policy)
