"""Scheduling module for the overnight design grid and weekly containers."""

from rotaengine.scheduling.overnight import (
    DayShiftPlacement,
    PlacementKind,
    ShiftDesignGrid,
    find_partner,
    make_assignment,
    remove_with_partner,
    split_assignment,
)
from rotaengine.scheduling.weekly_schedule import (
    add_assignment,
    check_schedule,
    copy_to_next_week,
    create_weekly_schedule,
    find_schedule,
    get_assignments_for_date,
    remove_assignment,
)

__all__ = [
    "DayShiftPlacement",
    "PlacementKind",
    "ShiftDesignGrid",
    "add_assignment",
    "check_schedule",
    "copy_to_next_week",
    "create_weekly_schedule",
    "find_partner",
    "find_schedule",
    "get_assignments_for_date",
    "make_assignment",
    "remove_assignment",
    "remove_with_partner",
    "split_assignment",
]
