"""
Day and month revenue aggregation.
"""

from typing import Iterable, List, Sequence

from .models import ZERO, Appointment, DaySummary, Service
from .pricing import effective_price


def aggregate(
    appointments: Iterable[Appointment],
    services: Sequence[Service],
    selected_date: str,
) -> DaySummary:
    """
    Count the appointments of a day and sum revenue for the day and its month.

    The month match is a prefix match on the fixed-width ISO date
    ("2025-06-01" belongs to "2025-06"), so the day total is always part of
    the month total.
    """
    month = selected_date[:7]
    day_count = 0
    day_total = ZERO
    month_total = ZERO

    for appointment in appointments:
        price = effective_price(appointment, services)

        if appointment.date == selected_date:
            day_count += 1
            day_total += price

        if appointment.date.startswith(month):
            month_total += price

    return DaySummary(day_count=day_count, day_total=day_total, month_total=month_total)


def appointments_of_day(appointments: Iterable[Appointment], date: str) -> List[Appointment]:
    """Appointments of a date, ordered by time."""
    return sorted(
        (appointment for appointment in appointments if appointment.date == date),
        key=lambda appointment: appointment.time,
    )
