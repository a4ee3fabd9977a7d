"""
Month-view calendar grid.

Pure date arithmetic on (year, month, day) integers; no platform calendar
or timezone is involved, so the grid only depends on its arguments.
"""

from typing import List, Tuple

from .models import CalendarDay

GRID_SIZE = 42  # 6 weeks x 7 days

_DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

# Sakamoto's month offsets
_WEEKDAY_OFFSETS = (0, 3, 2, 5, 0, 3, 5, 1, 4, 6, 2, 4)


def _check_month(month: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")


def is_leap_year(year: int) -> bool:
    """Gregorian leap year rule."""
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month, February included."""
    _check_month(month)
    if month == 2 and is_leap_year(year):
        return 29
    return _DAYS_IN_MONTH[month - 1]


def weekday(year: int, month: int, day: int) -> int:
    """
    Day of the week for a date, 0=Sunday .. 6=Saturday.

    Uses Sakamoto's method for the proleptic Gregorian calendar.
    """
    _check_month(month)
    if month < 3:
        year -= 1
    return (
        year + year // 4 - year // 100 + year // 400
        + _WEEKDAY_OFFSETS[month - 1] + day
    ) % 7


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move a (year, month) pair by delta months, wrapping years."""
    _check_month(month)
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_of(date_str: str) -> Tuple[int, int]:
    """Extract (year, month) from a YYYY-MM-DD or YYYY-MM string."""
    year_str, month_str = date_str[:7].split("-")
    year, month = int(year_str), int(month_str)
    _check_month(month)
    return year, month


def format_date(year: int, month: int, day: int) -> str:
    return f"{year:04d}-{month:02d}-{day:02d}"


def generate_calendar_days(
    year: int,
    month: int,
    selected_date: str,
    today_date: str,
) -> List[CalendarDay]:
    """
    Build the 42 cells of a month view, starting on Sunday.

    Leading cells are the last days of the previous month, trailing cells
    the first days of the next month, until the grid holds six full weeks.

    Args:
        year: Year of the viewed month
        month: Viewed month, 1-12
        selected_date: Currently selected date (YYYY-MM-DD)
        today_date: Today's date (YYYY-MM-DD)

    Returns:
        List of exactly 42 CalendarDay objects
    """
    _check_month(month)
    days: List[CalendarDay] = []

    def cell(y: int, m: int, d: int, current: bool) -> CalendarDay:
        date_str = format_date(y, m, d)
        return CalendarDay(
            date_str=date_str,
            day_number=d,
            is_current_month=current,
            is_today=date_str == today_date,
            is_selected=date_str == selected_date,
        )

    # Days of the previous month
    leading = weekday(year, month, 1)
    prev_year, prev_month = shift_month(year, month, -1)
    prev_last_day = days_in_month(prev_year, prev_month)

    for day in range(prev_last_day - leading + 1, prev_last_day + 1):
        days.append(cell(prev_year, prev_month, day, False))

    # Days of the viewed month
    for day in range(1, days_in_month(year, month) + 1):
        days.append(cell(year, month, day, True))

    # Days of the next month
    next_year, next_month = shift_month(year, month, 1)
    day = 1
    while len(days) < GRID_SIZE:
        days.append(cell(next_year, next_month, day, False))
        day += 1

    return days
