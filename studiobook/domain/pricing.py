"""
Price resolution for appointments.
"""

from decimal import Decimal
from typing import Sequence

from .models import ZERO, Appointment, Service, ServiceBundle


def find_service(services: Sequence[Service], service_id: str | None) -> Service | None:
    """Find a service by id in the catalog."""
    for service in services:
        if service.id == service_id:
            return service
    return None


def effective_price(appointment: Appointment, services: Sequence[Service]) -> Decimal:
    """
    The value attributed to an appointment for revenue purposes.

    A positive stored total is the snapshot taken at booking time and wins.
    Otherwise the current price of the primary service is used, or zero if
    the service no longer exists.
    """
    if appointment.total_price > 0:
        return appointment.total_price

    service = find_service(services, appointment.service_id)
    return service.price if service else ZERO


def snapshot_total(bundle: ServiceBundle, services: Sequence[Service]) -> Decimal:
    """Total to store on an appointment when it is booked or edited."""
    return bundle.total_price(services)
