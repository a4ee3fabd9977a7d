"""
Domain layer - Pure scheduling logic without external dependencies.
"""

from .aggregator import aggregate, appointments_of_day
from .availability import booked_slots, is_slot_free, slot_options
from .calendar_builder import generate_calendar_days, shift_month
from .models import (
    Appointment,
    AppointmentDraft,
    CalendarDay,
    DaySummary,
    Service,
    ServiceBundle,
    TimeOption,
)
from .pricing import effective_price, snapshot_total
from .time_grid import generate_time_options

__all__ = [
    "Appointment",
    "AppointmentDraft",
    "CalendarDay",
    "DaySummary",
    "Service",
    "ServiceBundle",
    "TimeOption",
    "aggregate",
    "appointments_of_day",
    "booked_slots",
    "effective_price",
    "generate_calendar_days",
    "generate_time_options",
    "is_slot_free",
    "shift_month",
    "slot_options",
    "snapshot_total",
]
