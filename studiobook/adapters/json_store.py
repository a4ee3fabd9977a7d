"""
Local JSON file store for services and appointments.
"""

import json
import logging
import uuid
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List

from ..domain.exceptions import AppointmentNotFoundError, ServiceNotFoundError, StoreError
from ..domain.models import Appointment, Service
from .rows import appointment_from_row, appointment_to_row, service_from_row, service_to_row

logger = logging.getLogger(__name__)


class JsonFileStore:
    """
    Keeps the whole book in a single JSON document.

    Layout::

        {
            "services": [{"id": ..., "name": ..., "price": ..., ...}],
            "appointments": [{"id": ..., "client_name": ..., "service_ids": [...], ...}]
        }

    Every call reads the file again, so the returned lists are always a
    fresh snapshot. Writes go through a temp file and an atomic rename.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    # --- Services ---

    def list_services(self) -> List[Service]:
        data = self._load()
        services = [service_from_row(row) for row in data["services"]]
        return sorted(services, key=lambda s: s.name.lower())

    def create_service(self, service: Service) -> Service:
        data = self._load()
        row = {"id": self._new_id(), **service_to_row(service)}
        data["services"].append(row)
        self._save(data)
        return service_from_row(row)

    def update_service(self, service_id: str, service: Service) -> Service:
        data = self._load()
        row = self._find_row(data["services"], service_id, ServiceNotFoundError)
        row.update(service_to_row(service))
        self._save(data)
        return service_from_row(row)

    def delete_service(self, service_id: str) -> None:
        data = self._load()
        row = self._find_row(data["services"], service_id, ServiceNotFoundError)
        data["services"].remove(row)
        self._save(data)

    # --- Appointments ---

    def list_appointments(self) -> List[Appointment]:
        data = self._load()
        appointments = [appointment_from_row(row) for row in data["appointments"]]
        return sorted(appointments, key=lambda a: (a.date, a.time))

    def create_appointment(self, appointment: Appointment) -> Appointment:
        data = self._load()
        created = replace(appointment, id=self._new_id())
        data["appointments"].append(self._appointment_row(created))
        self._save(data)
        return created

    def update_appointment(self, appointment_id: str, appointment: Appointment) -> Appointment:
        data = self._load()
        row = self._find_row(data["appointments"], appointment_id, AppointmentNotFoundError)
        updated = replace(appointment, id=appointment_id)
        row.clear()
        row.update(self._appointment_row(updated))
        self._save(data)
        return updated

    def delete_appointment(self, appointment_id: str) -> None:
        data = self._load()
        row = self._find_row(data["appointments"], appointment_id, AppointmentNotFoundError)
        data["appointments"].remove(row)
        self._save(data)

    def set_attended(self, appointment_id: str, attended: bool) -> None:
        data = self._load()
        row = self._find_row(data["appointments"], appointment_id, AppointmentNotFoundError)
        row["attended"] = attended
        self._save(data)

    # --- File handling ---

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())

    @staticmethod
    def _appointment_row(appointment: Appointment) -> Dict[str, Any]:
        return {
            "id": appointment.id,
            **appointment_to_row(appointment),
            "service_ids": list(appointment.service_ids),
        }

    @staticmethod
    def _find_row(rows: List[Dict[str, Any]], row_id: str, error_type) -> Dict[str, Any]:
        for row in rows:
            if str(row.get("id")) == row_id:
                return row
        raise error_type(f"No record with id {row_id}")

    def _load(self) -> Dict[str, Any]:
        """Load the document, returning an empty book if the file is missing."""
        if not self.path.exists():
            logger.debug("Store file %s does not exist yet, starting empty", self.path)
            return {"services": [], "appointments": []}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            raise StoreError(f"Could not read store file {self.path}: {exc}") from exc

        if not isinstance(data, dict):
            raise StoreError(f"Store file {self.path} must contain a JSON object")

        data.setdefault("services", [])
        data.setdefault("appointments", [])
        return data

    def _save(self, data: Dict[str, Any]) -> None:
        """Write the document atomically."""
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(self.path)
        except OSError as exc:
            if temp_path.exists():
                temp_path.unlink()
            raise StoreError(f"Could not write store file {self.path}: {exc}") from exc

        logger.debug(
            "Saved %d service(s) and %d appointment(s) to %s",
            len(data["services"]),
            len(data["appointments"]),
            self.path,
        )
