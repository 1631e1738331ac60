"""Tests for the availability checker."""

import logging
from datetime import date

import pytest

from rotaengine.domain.models import DayAvailability, Employee, Weekday
from rotaengine.domain.policies import ContainmentAvailabilityPolicy
from rotaengine.domain.time_utils import at_time
from rotaengine.validation.availability import is_available

MONDAY = date(2024, 1, 15)
TUESDAY = date(2024, 1, 16)


class TestIsAvailable:
    """Tests for is_available."""

    @pytest.fixture
    def employee(self):
        """Employee available Monday 09:00-17:00, off on Sunday."""
        return Employee(
            id="E001",
            name="Alice",
            availability={
                Weekday.MONDAY: DayAvailability(start="09:00", end="17:00"),
                Weekday.SUNDAY: DayAvailability.closed(),
            },
        )

    def test_shift_inside_window(self, employee):
        assert is_available(employee, at_time(MONDAY, "10:00"), at_time(MONDAY, "12:00"))

    def test_shift_outside_window(self, employee):
        assert not is_available(employee, at_time(MONDAY, "18:00"), at_time(MONDAY, "20:00"))

    def test_partial_overlap_is_accepted_by_default(self, employee):
        assert is_available(employee, at_time(MONDAY, "16:00"), at_time(MONDAY, "20:00"))

    def test_partial_overlap_rejected_by_containment(self, employee):
        assert not is_available(
            employee,
            at_time(MONDAY, "16:00"),
            at_time(MONDAY, "20:00"),
            ContainmentAvailabilityPolicy(),
        )

    def test_touching_window_end_is_not_available(self, employee):
        assert not is_available(employee, at_time(MONDAY, "17:00"), at_time(MONDAY, "19:00"))

    def test_no_availability_declared_is_always_available(self):
        employee = Employee(id="E002", name="Bob")
        assert is_available(employee, at_time(MONDAY, "03:00"), at_time(MONDAY, "04:00"))

    def test_closed_day(self, employee):
        sunday = date(2024, 1, 14)
        assert not is_available(employee, at_time(sunday, "10:00"), at_time(sunday, "12:00"))

    def test_undeclared_day(self, employee):
        assert not is_available(employee, at_time(TUESDAY, "10:00"), at_time(TUESDAY, "12:00"))

    def test_missing_bounds_default_to_whole_day(self):
        employee = Employee(
            id="E003",
            name="Carol",
            availability={Weekday.MONDAY: DayAvailability(start="20:00")},
        )
        assert is_available(
            employee,
            at_time(MONDAY, "22:00"),
            at_time(MONDAY, "23:59"),
            ContainmentAvailabilityPolicy(),
        )

    def test_inverted_window_is_unavailable_and_logged(self, caplog):
        employee = Employee(
            id="E004",
            name="Dan",
            availability={Weekday.MONDAY: DayAvailability(start="17:00", end="09:00")},
        )
        with caplog.at_level(logging.WARNING, logger="rotaengine.validation.availability"):
            assert not is_available(employee, at_time(MONDAY, "10:00"), at_time(MONDAY, "12:00"))
        assert "inverted availability window" in caplog.text

    def test_day_taken_from_candidate_start(self, employee):
        """A Monday-evening candidate ending Tuesday uses Monday's window."""
        assert is_available(employee, at_time(MONDAY, "16:00"), at_time(TUESDAY, "01:00"))
