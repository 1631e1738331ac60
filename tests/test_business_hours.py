"""Tests for business-hours queries."""

from datetime import datetime

import pytest

from rotaengine.domain.business_hours import (
    hours_for_day,
    is_business_open,
    next_open_time,
    total_possible_hours,
)
from rotaengine.domain.models import BusinessHours, Weekday


@pytest.fixture
def business_hours():
    """Monday 08:00-20:00, Saturday 10:00-16:00, Sunday closed."""
    return [
        BusinessHours(day_of_week=Weekday.MONDAY, open_time="08:00", close_time="20:00"),
        BusinessHours(day_of_week=Weekday.SATURDAY, open_time="10:00", close_time="16:00"),
        BusinessHours(day_of_week=Weekday.SUNDAY, is_open=False),
    ]


class TestIsBusinessOpen:
    """Tests for open/closed at a moment."""

    def test_open_bounds_are_inclusive(self, business_hours):
        assert is_business_open(business_hours, datetime(2024, 1, 15, 8, 0))
        assert is_business_open(business_hours, datetime(2024, 1, 15, 20, 0))

    def test_after_close(self, business_hours):
        assert not is_business_open(business_hours, datetime(2024, 1, 15, 20, 1))

    def test_closed_day(self, business_hours):
        assert not is_business_open(business_hours, datetime(2024, 1, 21, 12, 0))

    def test_unconfigured_day(self, business_hours):
        assert not is_business_open(business_hours, datetime(2024, 1, 16, 12, 0))

    def test_hours_for_day(self, business_hours):
        assert hours_for_day(business_hours, Weekday.SATURDAY).open_time == "10:00"
        assert hours_for_day(business_hours, Weekday.TUESDAY) is None


class TestNextOpenTime:
    """Tests for finding the next opening."""

    def test_later_same_day(self, business_hours):
        assert next_open_time(business_hours, datetime(2024, 1, 15, 7, 0)) == datetime(
            2024, 1, 15, 8, 0
        )

    def test_exact_opening_is_not_next(self, business_hours):
        assert next_open_time(business_hours, datetime(2024, 1, 15, 8, 0)) == datetime(
            2024, 1, 20, 10, 0
        )

    def test_skips_closed_sunday(self, business_hours):
        assert next_open_time(business_hours, datetime(2024, 1, 20, 17, 0)) == datetime(
            2024, 1, 22, 8, 0
        )

    def test_no_hours_configured(self):
        assert next_open_time([], datetime(2024, 1, 15, 7, 0)) is None


class TestTotalPossibleHours:
    """Tests for the weekly possible-hours sum."""

    def test_sums_open_entries(self, business_hours):
        assert total_possible_hours(business_hours) == 18

    def test_entries_without_times_are_ignored(self):
        hours = [BusinessHours(day_of_week=Weekday.MONDAY, open_time="08:00")]
        assert total_possible_hours(hours) == 0

    def test_hour_granularity(self):
        hours = [BusinessHours(day_of_week=Weekday.MONDAY, open_time="08:30",
                               close_time="17:45")]
        assert total_possible_hours(hours) == 9
