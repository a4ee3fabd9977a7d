"""
Mapping between storage rows (snake_case dicts) and domain models.

The JSON file store and the REST store share the same row layout as the
``services`` and ``appointments`` tables.
"""

import logging
from typing import Any, Dict, List, Sequence

from ..domain.models import Appointment, Service

logger = logging.getLogger(__name__)

# Primary id for rows whose services were all deleted; matches no catalog entry.
MISSING_SERVICE_ID = ""


def service_from_row(row: Dict[str, Any]) -> Service:
    return Service(
        id=str(row["id"]),
        name=row["name"],
        price=row.get("price") or 0,
        duration=int(row.get("duration") or 0),
        description=row.get("description") or "",
    )


def service_to_row(service: Service) -> Dict[str, Any]:
    return {
        "name": service.name,
        "price": float(service.price),
        "duration": service.duration,
        "description": service.description,
    }


def appointment_from_row(row: Dict[str, Any], service_ids: Sequence[str] | None = None) -> Appointment:
    """
    Build an appointment from a row.

    The bundle comes from ``service_ids`` (link table or inline list); rows
    written before bundles existed only have ``service_id``. A row left
    with no service at all keeps its stored total under ``MISSING_SERVICE_ID``.
    """
    bundle: List[str] = [str(s) for s in (service_ids or row.get("service_ids") or []) if s]
    if not bundle and row.get("service_id"):
        bundle = [str(row["service_id"])]
    if not bundle:
        logger.warning("Appointment %s has no services left", row["id"])
        bundle = [MISSING_SERVICE_ID]

    return Appointment(
        id=str(row["id"]),
        client_name=row["client_name"],
        phone=row.get("phone") or "",
        date=row["date"],
        time=str(row["time"])[:5],
        service_ids=tuple(bundle),
        payment_method=row.get("payment_method") or "",
        notes=row.get("notes") or "",
        total_price=row.get("total_price") or 0,
        attended=bool(row.get("attended") or False),
    )


def appointment_to_row(appointment: Appointment) -> Dict[str, Any]:
    return {
        "client_name": appointment.client_name,
        "phone": appointment.phone,
        "date": appointment.date,
        "time": appointment.time,
        "service_id": appointment.service_id,
        "payment_method": appointment.payment_method,
        "notes": appointment.notes,
        "total_price": float(appointment.total_price),
        "attended": appointment.attended,
    }
