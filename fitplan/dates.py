# fitplan/dates.py
"""
Date ranges and calendar grids.

Weeks start on Monday. Period ranges are half-open: `end` is the first day
*after* the period, so a week is [monday, monday + 7 days).
"""
import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional, Union

VIEWS = ("week", "month", "year")

_DOW_KEYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date  # exclusive

    @property
    def last_day(self) -> date:
        return self.end - timedelta(days=1)

    def __contains__(self, d: date) -> bool:
        return self.start <= d < self.end

    def days(self) -> List[date]:
        return [self.start + timedelta(days=i) for i in range((self.end - self.start).days)]


@dataclass(frozen=True)
class MonthGrid:
    month: date  # first day of the displayed month
    grid_start: date
    grid_end: date  # inclusive (a Sunday)
    days: List[date]
    weeks: List[List[date]]

    def in_month(self, d: date) -> bool:
        return d.year == self.month.year and d.month == self.month.month


# ------------------------------
# Parsing / formatting
# ------------------------------
def to_iso(d: date) -> str:
    return d.isoformat()


def parse_iso_date(value: Union[str, date, None], default: Optional[date] = None) -> date:
    """
    Parse "YYYY-MM-DD". Empty values return `default` (today when omitted).
    Raises ValueError on malformed input.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return default if default is not None else date.today()
    return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()


def parse_month(value: Optional[str], default: Optional[date] = None) -> date:
    """Parse "YYYY-MM" (or a full ISO date) into the first day of that month."""
    if not value:
        d = default or date.today()
        return d.replace(day=1)
    value = value.strip()
    if len(value) == 7:
        return datetime.strptime(value, "%Y-%m").date()
    return parse_iso_date(value).replace(day=1)


def day_key_to_dow(iso_date: Union[str, date]) -> str:
    """Day-of-week key of an ISO date, e.g. 2024-03-04 -> mon."""
    return _DOW_KEYS[parse_iso_date(iso_date).weekday()]


# ------------------------------
# Weeks
# ------------------------------
def start_of_week_monday(d: date) -> date:
    return d - timedelta(days=d.weekday())


def week_days(start: date) -> List[date]:
    start = start_of_week_monday(start)
    return [start + timedelta(days=i) for i in range(7)]


def iso_week_number(d: date) -> int:
    # Shift to the Thursday of the same Monday-start week; its year owns the week.
    thursday = d + timedelta(days=3 - d.weekday())
    year_start = date(thursday.year, 1, 1)
    return (thursday - year_start).days // 7 + 1


def same_iso_week(a: date, b: date) -> bool:
    return start_of_week_monday(a) == start_of_week_monday(b)


# ------------------------------
# Months / years
# ------------------------------
def add_months(d: date, n: int) -> date:
    month_index = d.month - 1 + n
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def add_years(d: date, n: int) -> date:
    return add_months(d, 12 * n)


def month_grid(cursor: date) -> MonthGrid:
    """
    Full Monday-Sunday weeks covering the month of `cursor`.

    Leading/trailing days belong to the adjacent months; callers flag them
    with `MonthGrid.in_month` so they can be rendered dimmed.
    """
    first = cursor.replace(day=1)
    last = first.replace(day=calendar.monthrange(first.year, first.month)[1])

    start = start_of_week_monday(first)
    end = last + timedelta(days=6 - last.weekday())

    days = [start + timedelta(days=i) for i in range((end - start).days + 1)]
    weeks = [days[i:i + 7] for i in range(0, len(days), 7)]
    return MonthGrid(month=first, grid_start=start, grid_end=end, days=days, weeks=weeks)


# ------------------------------
# Periods (stats page)
# ------------------------------
def _check_view(view: str) -> None:
    if view not in VIEWS:
        raise ValueError(f"unknown view '{view}' (expected one of {', '.join(VIEWS)})")


def period_start(view: str, cursor: date) -> date:
    _check_view(view)
    if view == "week":
        return start_of_week_monday(cursor)
    if view == "month":
        return cursor.replace(day=1)
    return date(cursor.year, 1, 1)


def shift_cursor(view: str, cursor: date, step: int = 1) -> date:
    _check_view(view)
    if view == "week":
        return cursor + timedelta(days=7 * step)
    if view == "month":
        return add_months(cursor, step)
    return add_years(cursor, step)


def period_range(view: str, cursor: date) -> DateRange:
    start = period_start(view, cursor)
    return DateRange(start, shift_cursor(view, start, 1))


def previous_range(view: str, cursor: date) -> DateRange:
    current = period_range(view, cursor)
    return DateRange(shift_cursor(view, current.start, -1), current.start)


def period_label(view: str, start: date) -> str:
    _check_view(view)
    if view == "week":
        end = start + timedelta(days=6)
        return (
            f"Week of {start.day} {calendar.month_name[start.month]} "
            f"to {end.day} {calendar.month_name[end.month]}"
        )
    if view == "month":
        return f"{calendar.month_name[start.month]} {start.year}"
    return str(start.year)
