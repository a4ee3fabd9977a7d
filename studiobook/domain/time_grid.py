"""
Bookable time-of-day slots for a working day.
"""

from typing import List

DEFAULT_START_HOUR = 7
DEFAULT_END_HOUR = 19
DEFAULT_INTERVAL_MINUTES = 30


def generate_time_options(
    start_hour: int = DEFAULT_START_HOUR,
    end_hour: int = DEFAULT_END_HOUR,
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
) -> List[str]:
    """
    Generate the "HH:MM" slots offered in the booking form.

    Every hour from start_hour to end_hour (inclusive) contributes one slot
    per interval, so the defaults yield 07:00, 07:30, ..., 19:00, 19:30.

    Raises:
        ValueError: If the bounds are outside 0-23 or the interval does not divide an hour
    """
    if not 0 <= start_hour <= end_hour <= 23:
        raise ValueError(
            f"Hours must satisfy 0 <= start_hour <= end_hour <= 23, got {start_hour}-{end_hour}"
        )
    if interval_minutes <= 0 or 60 % interval_minutes != 0:
        raise ValueError(f"interval_minutes must divide 60, got {interval_minutes}")

    times: List[str] = []

    for hour in range(start_hour, end_hour + 1):
        for minute in range(0, 60, interval_minutes):
            times.append(f"{hour:02d}:{minute:02d}")

    return times
