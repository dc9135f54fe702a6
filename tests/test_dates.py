"""Tests for week/month/period date calculations."""

from datetime import date

import pytest

from fitplan.dates import (
    DateRange,
    add_months,
    add_years,
    day_key_to_dow,
    iso_week_number,
    month_grid,
    parse_iso_date,
    parse_month,
    period_label,
    period_range,
    previous_range,
    same_iso_week,
    shift_cursor,
    start_of_week_monday,
    week_days,
)


class TestWeeks:
    def test_start_of_week_is_monday(self):
        assert start_of_week_monday(date(2024, 3, 6)) == date(2024, 3, 4)
        assert start_of_week_monday(date(2024, 3, 4)) == date(2024, 3, 4)

    def test_sunday_belongs_to_previous_monday(self):
        assert start_of_week_monday(date(2024, 3, 10)) == date(2024, 3, 4)

    def test_week_days_are_monday_to_sunday(self):
        days = week_days(date(2024, 3, 7))
        assert len(days) == 7
        assert days[0] == date(2024, 3, 4)
        assert days[-1] == date(2024, 3, 10)

    def test_iso_week_numbers(self):
        assert iso_week_number(date(2024, 3, 4)) == 10
        # Friday 1 Jan 2021 belongs to the last week of 2020
        assert iso_week_number(date(2021, 1, 1)) == 53
        # Monday 30 Dec 2024 starts week 1 of 2025
        assert iso_week_number(date(2024, 12, 30)) == 1

    @pytest.mark.parametrize(
        "d",
        [date(2024, 1, 1), date(2023, 6, 15), date(2020, 12, 31), date(2027, 1, 3)],
    )
    def test_iso_week_matches_isocalendar(self, d):
        assert iso_week_number(d) == d.isocalendar()[1]

    def test_same_iso_week(self):
        assert same_iso_week(date(2024, 3, 4), date(2024, 3, 10))
        assert not same_iso_week(date(2024, 3, 10), date(2024, 3, 11))

    def test_day_key_to_dow(self):
        assert day_key_to_dow("2024-03-04") == "mon"
        assert day_key_to_dow(date(2024, 3, 10)) == "sun"


class TestMonthGrid:
    def test_grid_covers_full_weeks(self):
        grid = month_grid(date(2024, 3, 15))
        assert grid.month == date(2024, 3, 1)
        assert grid.grid_start == date(2024, 2, 26)
        assert grid.grid_end == date(2024, 3, 31)
        assert len(grid.days) == 35
        assert all(len(week) == 7 for week in grid.weeks)
        assert all(week[0].weekday() == 0 for week in grid.weeks)

    def test_adjacent_days_are_flagged(self):
        grid = month_grid(date(2024, 3, 1))
        assert not grid.in_month(date(2024, 2, 26))
        assert grid.in_month(date(2024, 3, 1))

    def test_month_starting_on_monday_has_no_leading_days(self):
        grid = month_grid(date(2021, 2, 10))
        assert grid.grid_start == date(2021, 2, 1)
        assert grid.grid_end == date(2021, 2, 28)
        assert len(grid.weeks) == 4


class TestPeriods:
    def test_add_months_clamps_day(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)
        assert add_months(date(2024, 12, 15), 1) == date(2025, 1, 15)

    def test_add_years_from_leap_day(self):
        assert add_years(date(2024, 2, 29), 1) == date(2025, 2, 28)

    def test_week_range_is_half_open(self):
        r = period_range("week", date(2024, 3, 6))
        assert r == DateRange(date(2024, 3, 4), date(2024, 3, 11))
        assert r.last_day == date(2024, 3, 10)
        assert date(2024, 3, 10) in r
        assert date(2024, 3, 11) not in r
        assert len(r.days()) == 7

    def test_month_range(self):
        r = period_range("month", date(2024, 3, 15))
        assert r.start == date(2024, 3, 1)
        assert r.last_day == date(2024, 3, 31)

    def test_previous_year(self):
        r = previous_range("year", date(2024, 6, 1))
        assert r == DateRange(date(2023, 1, 1), date(2024, 1, 1))

    def test_shift_cursor(self):
        assert shift_cursor("week", date(2024, 3, 4), -1) == date(2024, 2, 26)
        assert shift_cursor("month", date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert shift_cursor("year", date(2024, 3, 4), 1) == date(2025, 3, 4)

    def test_unknown_view_raises(self):
        with pytest.raises(ValueError, match="unknown view"):
            period_range("decade", date(2024, 3, 4))

    def test_labels(self):
        assert period_label("week", date(2024, 3, 4)) == "Week of 4 March to 10 March"
        assert period_label("month", date(2024, 3, 1)) == "March 2024"
        assert period_label("year", date(2024, 1, 1)) == "2024"


class TestParsing:
    def test_parse_iso_date(self):
        assert parse_iso_date("2024-03-04") == date(2024, 3, 4)
        assert parse_iso_date("", default=date(2020, 1, 1)) == date(2020, 1, 1)

    def test_parse_iso_date_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_iso_date("2024-13-01")

    def test_parse_month(self):
        assert parse_month("2024-03") == date(2024, 3, 1)
        assert parse_month("2024-03-17") == date(2024, 3, 1)
        assert parse_month(None, default=date(2024, 5, 20)) == date(2024, 5, 1)
