"""Tests for overnight shift splitting."""

import logging
from datetime import date

import pytest

from rotaengine.domain.models import AssignmentStatus, Shift, ShiftAssignment, Weekday
from rotaengine.domain.policies import MinuteOvernightHoursPolicy
from rotaengine.scheduling.overnight import (
    DayShiftPlacement,
    PlacementKind,
    ShiftDesignGrid,
    find_partner,
    make_assignment,
    remove_with_partner,
    split_assignment,
)
from rotaengine.validation.errors import ValidationErrorType

MONDAY = date(2024, 1, 15)
TUESDAY = date(2024, 1, 16)


@pytest.fixture
def day_shift():
    return Shift(id="S-DAY", name="Day", start_time="09:00", end_time="17:00", duration=8)


@pytest.fixture
def night_shift():
    return Shift(id="S-NIGHT", name="Night", start_time="22:00", end_time="06:00",
                 duration=8, is_overnight=True)


@pytest.fixture
def catalog(day_shift, night_shift):
    return {day_shift.id: day_shift, night_shift.id: night_shift}


class TestShiftDesignGrid:
    """Tests for the weekly design grid."""

    def test_same_day_shift_places_one_record(self, day_shift):
        grid = ShiftDesignGrid().assign(day_shift, Weekday.MONDAY)
        placements = grid.placements(Weekday.MONDAY)
        assert len(placements) == 1
        assert placements[0].kind == PlacementKind.SAME_DAY
        assert grid.placements(Weekday.TUESDAY) == []

    def test_overnight_places_head_and_tail(self, night_shift):
        grid = ShiftDesignGrid().assign(night_shift, Weekday.MONDAY)

        head = grid.placements(Weekday.MONDAY)[0]
        tail = grid.placements(Weekday.TUESDAY)[0]
        assert (head.start_time, head.end_time) == ("22:00", "23:59")
        assert head.is_head and head.is_overnight
        assert (tail.start_time, tail.end_time) == ("00:00", "06:00")
        assert tail.is_tail and tail.is_overnight

    def test_saturday_wraps_to_sunday(self, night_shift):
        grid = ShiftDesignGrid().assign(night_shift, Weekday.SATURDAY)
        assert grid.placements(Weekday.SATURDAY)[0].is_head
        assert grid.placements(Weekday.SUNDAY)[0].is_tail

    def test_assign_does_not_mutate(self, night_shift):
        grid = ShiftDesignGrid()
        grid.assign(night_shift, Weekday.MONDAY)
        assert grid.placements(Weekday.MONDAY) == []

    def test_removing_head_removes_tail(self, day_shift, night_shift):
        grid = (
            ShiftDesignGrid()
            .assign(day_shift, Weekday.MONDAY)
            .assign(night_shift, Weekday.MONDAY)
        )
        grid = grid.remove(Weekday.MONDAY, 1)
        assert [p.shift_id for p in grid.placements(Weekday.MONDAY)] == ["S-DAY"]
        assert grid.placements(Weekday.TUESDAY) == []

    def test_removing_tail_removes_head(self, night_shift):
        grid = ShiftDesignGrid().assign(night_shift, Weekday.SATURDAY)
        grid = grid.remove(Weekday.SUNDAY, 0)
        assert grid.placements(Weekday.SATURDAY) == []
        assert grid.placements(Weekday.SUNDAY) == []

    def test_removing_one_of_two_nights_keeps_the_other(self, night_shift):
        grid = (
            ShiftDesignGrid()
            .assign(night_shift, Weekday.MONDAY)
            .assign(night_shift, Weekday.MONDAY)
        )
        grid = grid.remove(Weekday.MONDAY, 0)
        assert len(grid.placements(Weekday.MONDAY)) == 1
        assert len(grid.placements(Weekday.TUESDAY)) == 1
        assert grid.check_pairs().is_valid

    def test_bad_index_leaves_grid_unchanged(self, day_shift):
        grid = ShiftDesignGrid().assign(day_shift, Weekday.MONDAY)
        assert grid.remove(Weekday.MONDAY, 5) is grid
        assert grid.remove(Weekday.MONDAY, -1) is grid

    def test_missing_partner_is_logged(self, caplog):
        head = DayShiftPlacement("S-NIGHT", "22:00", "23:59", True)
        grid = ShiftDesignGrid(buckets={Weekday.MONDAY: (head,)})
        with caplog.at_level(logging.WARNING, logger="rotaengine.scheduling.overnight"):
            grid = grid.remove(Weekday.MONDAY, 0)
        assert grid.placements(Weekday.MONDAY) == []
        assert "no partner" in caplog.text

    def test_total_hours(self, catalog, day_shift, night_shift):
        grid = (
            ShiftDesignGrid()
            .assign(day_shift, Weekday.MONDAY)
            .assign(night_shift, Weekday.MONDAY)
        )
        assert grid.total_hours(Weekday.MONDAY, catalog) == 10.0
        assert grid.total_hours(Weekday.TUESDAY, catalog) == 6.0
        assert grid.total_hours(Weekday.WEDNESDAY, catalog) == 0.0

    def test_total_hours_minute_policy(self, catalog):
        late_night = Shift(id="S-LATE", name="Late", start_time="22:30",
                           end_time="06:45", duration=8.25, is_overnight=True)
        grid = ShiftDesignGrid().assign(late_night, Weekday.MONDAY)
        policy = MinuteOvernightHoursPolicy()
        assert grid.total_hours(Weekday.MONDAY, catalog) == 2.0
        assert grid.total_hours(Weekday.MONDAY, catalog, policy) == pytest.approx(1.5)
        assert grid.total_hours(Weekday.TUESDAY, catalog, policy) == pytest.approx(6.75)

    def test_total_hours_skips_deleted_shift(self, day_shift):
        grid = ShiftDesignGrid().assign(day_shift, Weekday.MONDAY)
        assert grid.total_hours(Weekday.MONDAY, {}) == 0.0

    def test_total_hours_by_day(self, catalog, night_shift):
        grid = ShiftDesignGrid().assign(night_shift, Weekday.SATURDAY)
        totals = grid.total_hours_by_day(catalog)
        assert totals[Weekday.SATURDAY] == 2.0
        assert totals[Weekday.SUNDAY] == 6.0
        assert sum(totals.values()) == 8.0

    def test_check_pairs_reports_lonely_head(self):
        head = DayShiftPlacement("S-NIGHT", "22:00", "23:59", True)
        result = ShiftDesignGrid(buckets={Weekday.MONDAY: (head,)}).check_pairs()
        assert len(result.errors) == 1
        assert result.errors[0].error_type == ValidationErrorType.OVERNIGHT_PAIR_BROKEN
        assert result.errors[0].details == {"day": int(Weekday.MONDAY)}

    def test_check_pairs_accepts_assigned_nights(self, night_shift):
        grid = ShiftDesignGrid().assign(night_shift, Weekday.SATURDAY)
        assert grid.check_pairs().is_valid

    def test_apply_to_week(self, catalog, day_shift, night_shift):
        grid = (
            ShiftDesignGrid()
            .assign(day_shift, Weekday.MONDAY)
            .assign(night_shift, Weekday.MONDAY)
        )
        assignments = grid.apply_to_week("E001", MONDAY, catalog)

        assert [a.id for a in assignments] == [
            "E001-2024-01-15-S-DAY-0",
            "E001-2024-01-15-S-NIGHT-1",
            "E001-2024-01-15-S-NIGHT-1-tail",
        ]
        assert assignments[2].date == TUESDAY
        assert all(a.status == AssignmentStatus.PENDING for a in assignments)

    def test_apply_to_week_covers_every_day(self, catalog, day_shift):
        grid = ShiftDesignGrid()
        for day in Weekday:
            grid = grid.assign(day_shift, day)
        assignments = grid.apply_to_week("E001", MONDAY, catalog)

        assert [a.date.isoformat() for a in assignments] == [
            "2024-01-15", "2024-01-16", "2024-01-17", "2024-01-18",
            "2024-01-19", "2024-01-20", "2024-01-21",
        ]


class TestSplitAssignment:
    """Tests for splitting dated assignments."""

    def test_same_day_assignment(self, day_shift):
        records = make_assignment("A1", "E001", day_shift, MONDAY)
        assert len(records) == 1
        assert records[0].is_overnight is False
        assert (records[0].start_time, records[0].end_time) == ("09:00", "17:00")

    def test_overnight_assignment(self, night_shift):
        head, tail = make_assignment("A1", "E001", night_shift, MONDAY,
                                     status=AssignmentStatus.CONFIRMED)
        assert (head.id, head.date, head.start_time, head.end_time) == (
            "A1", MONDAY, "22:00", "23:59"
        )
        assert (tail.id, tail.date, tail.start_time, tail.end_time) == (
            "A1-tail", TUESDAY, "00:00", "06:00"
        )
        assert head.is_overnight_head and tail.is_overnight_tail
        assert tail.status == AssignmentStatus.CONFIRMED

    def test_split_keeps_record_fields(self, night_shift):
        assignment = ShiftAssignment(id="A1", shift_id="S-NIGHT", employee_id="E001",
                                     date=MONDAY, start_time="22:00", end_time="06:00",
                                     role_id="guard", notes="cover")
        head, tail = split_assignment(assignment, night_shift)
        assert head.role_id == tail.role_id == "guard"
        assert tail.notes == "cover"

    def test_find_partner(self, night_shift, day_shift):
        head, tail = make_assignment("A1", "E001", night_shift, MONDAY)
        others = make_assignment("A2", "E001", day_shift, TUESDAY)
        assert find_partner(head, [*others, tail]) is tail
        assert find_partner(tail, [head, tail]) is head
        assert find_partner(others[0], [head, tail]) is None

    def test_remove_with_partner(self, night_shift, day_shift):
        records = (
            make_assignment("A1", "E001", night_shift, MONDAY)
            + make_assignment("A2", "E001", day_shift, TUESDAY)
        )
        assert [a.id for a in remove_with_partner(records, "A1-tail")] == ["A2"]
        assert [a.id for a in remove_with_partner(records, "A2")] == ["A1", "A1-tail"]

    def test_remove_unknown_id(self, day_shift):
        records = make_assignment("A1", "E001", day_shift, MONDAY)
        assert remove_with_partner(records, "nope") == records
