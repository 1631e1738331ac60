"""Policy definitions for the rules with more than one defensible reading.

Three rules inherited from the rota application are deliberately kept
configurable: how strictly availability must cover a shift, how weekly
coverage is normalized, and at what precision overnight halves count
towards a day's hours. The default implementations reproduce the historical
behaviour so existing figures stay comparable.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from rotaengine.constants import DAYS_PER_WEEK, HOURS_PER_DAY
from rotaengine.domain.time_utils import intervals_overlap, minutes_of_day


class AvailabilityPolicy(ABC):
    """Decides whether an availability window admits a candidate interval."""

    @abstractmethod
    def admits(
        self,
        candidate_start: datetime,
        candidate_end: datetime,
        window_start: datetime,
        window_end: datetime,
    ) -> bool:
        """Check the candidate interval against the availability window."""
        pass


class OverlapAvailabilityPolicy(AvailabilityPolicy):
    """Any overlap with the window is enough.

    A shift partially outside availability is still accepted.
    """

    def admits(self, candidate_start, candidate_end, window_start, window_end) -> bool:
        return intervals_overlap(candidate_start, candidate_end, window_start, window_end)


class ContainmentAvailabilityPolicy(AvailabilityPolicy):
    """The window must contain the whole candidate interval."""

    def admits(self, candidate_start, candidate_end, window_start, window_end) -> bool:
        return window_start <= candidate_start and candidate_end <= window_end


class CoveragePolicy(ABC):
    """Turns scheduled hours into a weekly coverage percentage."""

    @abstractmethod
    def coverage_percentage(self, total_hours: float, total_possible_hours: float) -> float:
        """Coverage percentage.

        Args:
            total_hours: Scheduled hours in the week.
            total_possible_hours: Sum of (close hour - open hour) over every
                configured business-hours entry.

        Returns:
            Coverage percentage, 0 when no business hours are configured.
        """
        pass


class LegacyCoveragePolicy(CoveragePolicy):
    """Historical formula: hours / (possible hours * 7) * 100.

    The possible-hours sum already spans the week, so this figure is a
    seventh of the direct ratio when every weekday has an entry.
    """

    def coverage_percentage(self, total_hours: float, total_possible_hours: float) -> float:
        if total_possible_hours <= 0:
            return 0.0
        return (total_hours / (total_possible_hours * DAYS_PER_WEEK)) * 100


class DailyCoveragePolicy(CoveragePolicy):
    """Direct ratio of scheduled hours to weekly business hours."""

    def coverage_percentage(self, total_hours: float, total_possible_hours: float) -> float:
        if total_possible_hours <= 0:
            return 0.0
        return (total_hours / total_possible_hours) * 100


class OvernightHoursPolicy(ABC):
    """Hours an overnight half contributes to its day's total."""

    @abstractmethod
    def head_hours(self, start_time: str) -> float:
        """Hours from the shift start to midnight."""
        pass

    @abstractmethod
    def tail_hours(self, end_time: str) -> float:
        """Hours from midnight to the shift end."""
        pass


class HourlyOvernightHoursPolicy(OvernightHoursPolicy):
    """Whole hours only; minutes are ignored.

    A 22:30 start counts 2 hours before midnight, not 1.5.
    """

    def head_hours(self, start_time: str) -> float:
        return float(HOURS_PER_DAY - minutes_of_day(start_time) // 60)

    def tail_hours(self, end_time: str) -> float:
        return float(minutes_of_day(end_time) // 60)


class MinuteOvernightHoursPolicy(OvernightHoursPolicy):
    """Minute-precise halves."""

    def head_hours(self, start_time: str) -> float:
        return (HOURS_PER_DAY * 60 - minutes_of_day(start_time)) / 60

    def tail_hours(self, end_time: str) -> float:
        return minutes_of_day(end_time) / 60


_AVAILABILITY_POLICIES = {
    "overlap": OverlapAvailabilityPolicy,
    "containment": ContainmentAvailabilityPolicy,
}

_COVERAGE_POLICIES = {
    "legacy": LegacyCoveragePolicy,
    "daily": DailyCoveragePolicy,
}

_OVERNIGHT_HOURS_POLICIES = {
    "hourly": HourlyOvernightHoursPolicy,
    "minute": MinuteOvernightHoursPolicy,
}


def availability_policy_for(name: str) -> AvailabilityPolicy:
    """Look up an availability policy by name.

    Raises:
        ValueError: If the name is unknown.
    """
    try:
        return _AVAILABILITY_POLICIES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown availability policy {name!r}; "
            f"expected one of {sorted(_AVAILABILITY_POLICIES)}"
        ) from None


def coverage_policy_for(name: str) -> CoveragePolicy:
    """Look up a coverage policy by name.

    Raises:
        ValueError: If the name is unknown.
    """
    try:
        return _COVERAGE_POLICIES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown coverage policy {name!r}; "
            f"expected one of {sorted(_COVERAGE_POLICIES)}"
        ) from None


def overnight_hours_policy_for(name: str) -> OvernightHoursPolicy:
    """Look up an overnight hours policy by name.

    Raises:
        ValueError: If the name is unknown.
    """
    try:
        return _OVERNIGHT_HOURS_POLICIES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown overnight hours policy {name!r}; "
            f"expected one of {sorted(_OVERNIGHT_HOURS_POLICIES)}"
        ) from None
