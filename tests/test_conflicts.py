"""Tests for the conflict detector."""

from datetime import date

import pytest

from rotaengine.domain.models import AssignmentStatus, Shift, ShiftAssignment
from rotaengine.domain.time_utils import at_time
from rotaengine.scheduling.overnight import make_assignment
from rotaengine.validation.conflicts import (
    find_conflicts,
    has_conflict,
    shift_intervals_on,
)

MONDAY = date(2024, 1, 15)
TUESDAY = date(2024, 1, 16)


@pytest.fixture
def shifts():
    return {
        "S-LATE-MORNING": Shift(id="S-LATE-MORNING", name="Late Morning",
                                start_time="10:00", end_time="12:00", duration=2),
        "S-NIGHT": Shift(id="S-NIGHT", name="Night", start_time="22:00",
                         end_time="06:00", duration=8, is_overnight=True),
    }


@pytest.fixture
def monday_assignment():
    return ShiftAssignment(
        id="A1",
        shift_id="S-LATE-MORNING",
        employee_id="E001",
        date=MONDAY,
        start_time="10:00",
        end_time="12:00",
        status=AssignmentStatus.CONFIRMED,
    )


class TestHasConflict:
    """Tests for double-booking detection."""

    def test_overlapping_candidate_conflicts(self, shifts, monday_assignment):
        assert has_conflict(
            [monday_assignment], "E001",
            at_time(MONDAY, "11:00"), at_time(MONDAY, "13:00"), shifts,
        )

    def test_touching_candidate_does_not_conflict(self, shifts, monday_assignment):
        assert not has_conflict(
            [monday_assignment], "E001",
            at_time(MONDAY, "12:00"), at_time(MONDAY, "14:00"), shifts,
        )

    def test_other_employee_never_conflicts(self, shifts, monday_assignment):
        assert not has_conflict(
            [monday_assignment], "E002",
            at_time(MONDAY, "11:00"), at_time(MONDAY, "13:00"), shifts,
        )

    def test_cancelled_assignment_never_conflicts(self, shifts, monday_assignment):
        monday_assignment.status = AssignmentStatus.CANCELLED
        assert not has_conflict(
            [monday_assignment], "E001",
            at_time(MONDAY, "10:00"), at_time(MONDAY, "12:00"), shifts,
        )

    def test_other_date_never_conflicts(self, shifts, monday_assignment):
        assert not has_conflict(
            [monday_assignment], "E001",
            at_time(TUESDAY, "10:00"), at_time(TUESDAY, "12:00"), shifts,
        )

    def test_unresolved_shift_is_skipped(self, monday_assignment):
        assert not has_conflict(
            [monday_assignment], "E001",
            at_time(MONDAY, "10:00"), at_time(MONDAY, "12:00"), {},
        )

    def test_accepts_shift_list(self, shifts, monday_assignment):
        assert has_conflict(
            [monday_assignment], "E001",
            at_time(MONDAY, "11:00"), at_time(MONDAY, "13:00"), list(shifts.values()),
        )

    def test_overnight_tail_blocks_early_morning(self, shifts):
        """A night shift started Monday occupies Tuesday until 06:00."""
        existing = make_assignment("N1", "E001", shifts["S-NIGHT"], MONDAY)
        assert has_conflict(
            existing, "E001", at_time(TUESDAY, "05:00"), at_time(TUESDAY, "09:00"), shifts,
        )
        assert not has_conflict(
            existing, "E001", at_time(TUESDAY, "06:00"), at_time(TUESDAY, "09:00"), shifts,
        )

    def test_overnight_head_blocks_late_evening(self, shifts):
        existing = make_assignment("N1", "E001", shifts["S-NIGHT"], MONDAY)
        assert has_conflict(
            existing, "E001", at_time(MONDAY, "21:00"), at_time(MONDAY, "23:00"), shifts,
        )


class TestFindConflicts:
    """Tests for listing conflicting assignments."""

    def test_returns_conflicting_records(self, shifts, monday_assignment):
        other = ShiftAssignment(
            id="A2", shift_id="S-LATE-MORNING", employee_id="E001", date=TUESDAY,
            start_time="10:00", end_time="12:00",
        )
        found = find_conflicts(
            [monday_assignment, other], "E001",
            at_time(MONDAY, "11:00"), at_time(MONDAY, "13:00"), shifts,
        )
        assert [a.id for a in found] == ["A1"]

    def test_excluded_ids_are_ignored(self, shifts, monday_assignment):
        found = find_conflicts(
            [monday_assignment], "E001",
            at_time(MONDAY, "11:00"), at_time(MONDAY, "13:00"), shifts,
            exclude_ids={"A1"},
        )
        assert found == []

    def test_agrees_with_has_conflict(self, shifts, monday_assignment):
        args = ([monday_assignment], "E001", at_time(MONDAY, "09:00"),
                at_time(MONDAY, "10:30"), shifts)
        assert has_conflict(*args) == bool(find_conflicts(*args))


class TestShiftIntervalsOn:
    """Tests for day-scoped shift intervals."""

    def test_same_day_shift(self, shifts):
        intervals = shift_intervals_on(shifts["S-LATE-MORNING"], MONDAY)
        assert intervals == [(at_time(MONDAY, "10:00"), at_time(MONDAY, "12:00"))]

    def test_overnight_shift_is_split(self, shifts):
        intervals = shift_intervals_on(shifts["S-NIGHT"], MONDAY)
        assert intervals == [
            (at_time(MONDAY, "22:00"), at_time(MONDAY, "23:59")),
            (at_time(TUESDAY, "00:00"), at_time(TUESDAY, "06:00")),
        ]
        for start, end in intervals:
            assert start.date() == end.date()
