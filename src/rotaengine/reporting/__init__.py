"""Reporting module for coverage and schedule statistics."""

from rotaengine.reporting.statistics import (
    DashboardSummary,
    EmployeeStats,
    EmployeeSummary,
    OverallStats,
    ShiftStats,
    ShiftSummary,
    StatisticsAggregator,
    WeeklyStats,
    availability_percentage,
    fill_rate,
    shift_status,
)

__all__ = [
    "DashboardSummary",
    "EmployeeStats",
    "EmployeeSummary",
    "OverallStats",
    "ShiftStats",
    "ShiftSummary",
    "StatisticsAggregator",
    "WeeklyStats",
    "availability_percentage",
    "fill_rate",
    "shift_status",
]
