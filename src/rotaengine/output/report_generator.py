"""Text roster report for a scheduling week.

This module creates a plain-text report showing:
- The roster for each date of the week, overnight halves marked
- Scheduled hours per date
- Shift fill rates and employee statistics
- Weekly coverage and any validation problems
"""

from collections import defaultdict
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Optional, Union

from rotaengine.constants import DAYS_PER_WEEK
from rotaengine.domain.models import ScheduleSnapshot, ShiftAssignment
from rotaengine.domain.policies import CoveragePolicy
from rotaengine.domain.time_utils import Weekday, format_week_range, week_number
from rotaengine.reporting.statistics import StatisticsAggregator
from rotaengine.validation.errors import ValidationResult


class ReportGenerator:
    """Generates a text report of one week of the rota.

    Example:
        >>> generator = ReportGenerator()
        >>> text = generator.generate_to_string(snapshot, date(2024, 1, 1), now)
    """

    def __init__(self, coverage_policy: Optional[CoveragePolicy] = None):
        self.coverage_policy = coverage_policy

    def generate(
        self,
        snapshot: ScheduleSnapshot,
        week_start: date,
        now: datetime,
        output_path: Union[str, Path],
        validation: Optional[ValidationResult] = None,
    ) -> str:
        """Generate the report and save it to a file.

        Args:
            snapshot: Records to report on.
            week_start: First date of the week.
            now: Reference time for completed/upcoming counts.
            output_path: Path to save the text file.
            validation: Optional validation result to append.

        Returns:
            The generated text content.
        """
        content = self._generate_content(snapshot, week_start, now, validation)
        Path(output_path).write_text(content)
        return content

    def generate_to_string(
        self,
        snapshot: ScheduleSnapshot,
        week_start: date,
        now: datetime,
        validation: Optional[ValidationResult] = None,
    ) -> str:
        return self._generate_content(snapshot, week_start, now, validation)

    def _generate_content(
        self,
        snapshot: ScheduleSnapshot,
        week_start: date,
        now: datetime,
        validation: Optional[ValidationResult],
    ) -> str:
        """Generate the full report content."""
        aggregator = StatisticsAggregator(snapshot, self.coverage_policy)
        week_end = week_start + timedelta(days=DAYS_PER_WEEK - 1)
        employees = snapshot.employees_by_id()
        shifts = snapshot.shifts_by_id()
        lines = []

        # Header
        lines.append("=" * 80)
        lines.append(
            f"ROTA REPORT - {format_week_range(week_start, week_end)} "
            f"(week {week_number(week_start)})"
        )
        lines.append("=" * 80)
        lines.append("")
        lines.append(f"Employees: {len(snapshot.employees)}")
        lines.append(f"Shifts: {len(snapshot.shifts)}")
        lines.append("")

        by_date: dict[date, list[ShiftAssignment]] = defaultdict(list)
        for assignment in snapshot.assignments:
            if week_start <= assignment.date <= week_end:
                by_date[assignment.date].append(assignment)

        # Roster per date
        lines.append("-" * 80)
        lines.append("ROSTER")
        lines.append("-" * 80)
        dates = [week_start + timedelta(days=i) for i in range(DAYS_PER_WEEK)]
        for d in dates:
            day_assignments = sorted(by_date.get(d, []), key=lambda a: (a.start_time, a.id))
            lines.append(f"\n{Weekday.from_date(d).label} {d.isoformat()} "
                         f"({len(day_assignments)} assignments)")
            if not day_assignments:
                lines.append("  (none)")
                continue
            for assignment in day_assignments:
                employee = employees.get(assignment.employee_id)
                shift = shifts.get(assignment.shift_id)
                name = (employee.name if employee else assignment.employee_id)[:20]
                shift_name = (shift.name if shift else assignment.shift_id)[:14]
                times = f"{assignment.start_time}-{assignment.end_time}"
                marker = ""
                if assignment.is_overnight_head:
                    marker = " >> continues next day"
                elif assignment.is_overnight_tail:
                    marker = " << from previous day"
                lines.append(
                    f"  {times:<12} {name:<20} {shift_name:<14} "
                    f"{assignment.status.value:<10}{marker}"
                )

        lines.append("")

        # Hours per date
        lines.append("-" * 80)
        lines.append("SCHEDULED HOURS PER DATE")
        lines.append("-" * 80)
        for d in dates:
            hours = aggregator.total_hours(by_date.get(d, []))
            bar = "#" * int(round(hours))
            lines.append(f"{d.isoformat()}: {bar or '.'} ({hours:.1f}h)")
        lines.append("")

        # Shift fill rates
        lines.append("-" * 80)
        lines.append("SHIFT FILL RATES")
        lines.append("-" * 80)
        lines.append(f"{'Shift':<16} {'Required':>8} " + " ".join(
            f"{Weekday.from_date(d).label[:3]:>6}" for d in dates
        ))
        for shift in sorted(snapshot.shifts, key=lambda s: (s.start_time, s.name)):
            rates = [aggregator.shift_stats_for_day(shift.id, d).fill_rate for d in dates]
            lines.append(
                f"{shift.name[:16]:<16} {shift.required_employees:>8} "
                + " ".join(f"{rate:>5.0f}%" for rate in rates)
            )
            if any(rate > 100 for rate in rates):
                lines.append("  ! overbooked on at least one day")
        lines.append("")

        # Employee statistics
        lines.append("-" * 80)
        lines.append("EMPLOYEE STATISTICS")
        lines.append("-" * 80)
        lines.append(
            f"{'Name':<20} {'Total':>5} {'Done':>5} {'Next':>5} {'Canc':>5} "
            f"{'Hours':>7} {'Avail':>7}"
        )
        for employee in sorted(snapshot.employees, key=lambda e: e.name):
            stats = aggregator.employee_stats_detailed(employee.id, week_start, week_end, now)
            lines.append(
                f"{employee.name[:20]:<20} {stats.total_shifts:>5} "
                f"{stats.completed_shifts:>5} {stats.upcoming_shifts:>5} "
                f"{stats.cancelled_shifts:>5} {stats.total_hours:>7.1f} "
                f"{stats.availability_percentage:>6.0f}%"
            )
        lines.append("")

        # Coverage
        weekly = aggregator.weekly_stats(week_start)
        lines.append("-" * 80)
        lines.append("WEEKLY COVERAGE")
        lines.append("-" * 80)
        lines.append(f"Assignments: {weekly.total_assignments}")
        lines.append(f"Scheduled hours: {weekly.total_hours:.1f}")
        lines.append(f"Business hours: {weekly.total_possible_hours:.1f}")
        lines.append(f"Coverage: {weekly.coverage_percentage:.1f}%")
        lines.append("")

        if validation is not None:
            lines.append("-" * 80)
            lines.append("VALIDATION")
            lines.append("-" * 80)
            if validation.is_valid and not validation.warnings:
                lines.append("No problems found")
            for error in validation.errors:
                lines.append(f"ERROR   {error}")
            for warning in validation.warnings:
                lines.append(f"WARNING {warning}")
            lines.append("")

        lines.append("=" * 80)
        lines.append("END OF REPORT")
        lines.append("=" * 80)

        return "\n".join(lines)
