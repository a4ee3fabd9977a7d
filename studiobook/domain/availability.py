"""
Resolution of time slots already taken on a given date.
"""

from typing import FrozenSet, Iterable, List, Sequence

from .models import Appointment, TimeOption


def booked_slots(
    appointments: Iterable[Appointment],
    date: str,
    exclude_appointment_id: str | None = None,
) -> FrozenSet[str]:
    """
    Return the times occupied on a date.

    The excluded appointment is the one being edited, so that its own slot
    does not block it.
    """
    return frozenset(
        appointment.time
        for appointment in appointments
        if appointment.date == date and appointment.id != exclude_appointment_id
    )


def slot_options(time_options: Sequence[str], booked: FrozenSet[str]) -> List[TimeOption]:
    """Mark every option found in the booked set as unavailable."""
    return [TimeOption(time=time, available=time not in booked) for time in time_options]


def is_slot_free(
    appointments: Iterable[Appointment],
    date: str,
    time: str,
    exclude_appointment_id: str | None = None,
) -> bool:
    """Check whether a single date/time pair can still be booked."""
    return time not in booked_slots(appointments, date, exclude_appointment_id)
