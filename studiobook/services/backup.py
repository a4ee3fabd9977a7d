"""
JSON backup export of services and appointments.
"""

import json
import logging
import re
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Sequence

from pendulum import DateTime

from ..domain.exceptions import StoreError
from ..domain.models import Appointment, Service

logger = logging.getLogger(__name__)


def service_to_dict(service: Service) -> Dict[str, Any]:
    return {
        "id": service.id,
        "name": service.name,
        "price": float(service.price),
        "duration": service.duration,
        "description": service.description,
    }


def appointment_to_dict(appointment: Appointment) -> Dict[str, Any]:
    return {
        "id": appointment.id,
        "clientName": appointment.client_name,
        "phone": appointment.phone,
        "date": appointment.date,
        "time": appointment.time,
        "serviceId": appointment.service_id,
        "serviceIds": list(appointment.service_ids),
        "paymentMethod": appointment.payment_method,
        "notes": appointment.notes,
        "totalPrice": float(appointment.total_price),
        "attended": appointment.attended,
    }


def build_backup(
    services: Sequence[Service],
    appointments: Sequence[Appointment],
    selected_date: str,
    exported_at: DateTime,
) -> Dict[str, Any]:
    """Assemble the backup document."""
    return {
        "exportedAt": exported_at.to_iso8601_string(),
        "selectedDate": selected_date,
        "services": [service_to_dict(s) for s in services],
        "appointments": [appointment_to_dict(a) for a in appointments],
    }


def backup_filename(business_name: str, day: str) -> str:
    """
    File name for a backup taken on a day.

    Example: ("Vicky Nails", "2025-06-01") -> "backup-vicky-nails-2025-06-01.json"
    """
    slug = re.sub(r"[^a-z0-9]+", "-", business_name.lower()).strip("-") or "studiobook"
    return f"backup-{slug}-{day}.json"


def _default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def write_backup(path: Path, payload: Dict[str, Any]) -> Path:
    """Write the backup as indented UTF-8 JSON."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False, default=_default)
    except OSError as exc:
        raise StoreError(f"Could not write backup to {path}: {exc}") from exc

    logger.info(
        "Wrote backup with %d service(s) and %d appointment(s) to %s",
        len(payload.get("services", [])),
        len(payload.get("appointments", [])),
        path,
    )
    return path
