"""
Remote store backed by a Supabase (PostgREST) database.
"""

import logging
from collections import defaultdict
from typing import Any, Dict, List

import requests

from ..domain.exceptions import AppointmentNotFoundError, ServiceNotFoundError, StoreError
from ..domain.models import Appointment, Service
from .rows import appointment_from_row, appointment_to_row, service_from_row, service_to_row

logger = logging.getLogger(__name__)


class RestStore:
    """
    Client for the ``services``, ``appointments`` and ``appointment_services`` tables.

    ``appointment_services`` links an appointment to each service of its
    bundle. Writes to the link table happen after the appointment row is
    saved; a failure there is logged and does not undo the appointment.
    """

    SERVICES = "services"
    APPOINTMENTS = "appointments"
    LINKS = "appointment_services"

    def __init__(self, url: str, api_key: str, timeout: int = 30):
        """
        Initialize the REST client.

        Args:
            url: Project URL, e.g. https://xyz.supabase.co
            api_key: Project API key
            timeout: Request timeout in seconds
        """
        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self.timeout = timeout
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    # --- Services ---

    def list_services(self) -> List[Service]:
        rows = self._request("GET", self.SERVICES, params={"select": "*", "order": "name.asc"})
        return [service_from_row(row) for row in rows]

    def create_service(self, service: Service) -> Service:
        rows = self._request("POST", self.SERVICES, json=service_to_row(service), returning=True)
        return service_from_row(rows[0])

    def update_service(self, service_id: str, service: Service) -> Service:
        rows = self._request(
            "PATCH",
            self.SERVICES,
            params={"id": f"eq.{service_id}"},
            json=service_to_row(service),
            returning=True,
        )
        if not rows:
            raise ServiceNotFoundError(f"No service with id {service_id}")
        return service_from_row(rows[0])

    def delete_service(self, service_id: str) -> None:
        self._request("DELETE", self.SERVICES, params={"id": f"eq.{service_id}"})

    # --- Appointments ---

    def list_appointments(self) -> List[Appointment]:
        rows = self._request(
            "GET",
            self.APPOINTMENTS,
            params={"select": "*", "order": "date.asc,time.asc"},
        )
        links = self._request("GET", self.LINKS, params={"select": "appointment_id,service_id"})

        bundles: Dict[str, List[str]] = defaultdict(list)
        for link in links:
            bundles[str(link["appointment_id"])].append(str(link["service_id"]))

        return [appointment_from_row(row, bundles.get(str(row["id"]))) for row in rows]

    def create_appointment(self, appointment: Appointment) -> Appointment:
        rows = self._request(
            "POST",
            self.APPOINTMENTS,
            json=appointment_to_row(appointment),
            returning=True,
        )
        created = appointment_from_row(rows[0], appointment.service_ids)
        self._link_services(created.id, list(appointment.service_ids))
        return created

    def update_appointment(self, appointment_id: str, appointment: Appointment) -> Appointment:
        rows = self._request(
            "PATCH",
            self.APPOINTMENTS,
            params={"id": f"eq.{appointment_id}"},
            json=appointment_to_row(appointment),
            returning=True,
        )
        if not rows:
            raise AppointmentNotFoundError(f"No appointment with id {appointment_id}")

        updated = appointment_from_row(rows[0], appointment.service_ids)
        self._unlink_services(appointment_id)
        self._link_services(appointment_id, list(appointment.service_ids))
        return updated

    def delete_appointment(self, appointment_id: str) -> None:
        self._request("DELETE", self.APPOINTMENTS, params={"id": f"eq.{appointment_id}"})
        self._unlink_services(appointment_id)

    def set_attended(self, appointment_id: str, attended: bool) -> None:
        self._request(
            "PATCH",
            self.APPOINTMENTS,
            params={"id": f"eq.{appointment_id}"},
            json={"attended": attended},
        )

    # --- Link table ---

    def _link_services(self, appointment_id: str, service_ids: List[str]) -> None:
        payload = [
            {"appointment_id": appointment_id, "service_id": service_id}
            for service_id in service_ids
        ]
        try:
            self._request("POST", self.LINKS, json=payload)
        except StoreError as exc:
            logger.warning("Could not link services to appointment %s: %s", appointment_id, exc)

    def _unlink_services(self, appointment_id: str) -> None:
        try:
            self._request("DELETE", self.LINKS, params={"appointment_id": f"eq.{appointment_id}"})
        except StoreError as exc:
            logger.warning("Could not clear services of appointment %s: %s", appointment_id, exc)

    # --- HTTP ---

    def _request(
        self,
        method: str,
        table: str,
        *,
        params: Dict[str, str] | None = None,
        json: Any = None,
        returning: bool = False,
    ) -> List[Dict[str, Any]]:
        """
        Perform a request against one table.

        Returns:
            Decoded rows (empty when the server sends no body)

        Raises:
            StoreError: If the request fails or the response is not JSON
        """
        headers = dict(self.headers)
        if returning:
            headers["Prefer"] = "return=representation"

        url = f"{self.base_url}/{table}"
        logger.debug("%s %s %s", method, url, params or "")

        try:
            response = requests.request(
                method,
                url,
                headers=headers,
                params=params,
                json=json,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise StoreError(f"{method} {table} failed: {e}") from e

        if not response.content:
            return []

        try:
            data = response.json()
        except ValueError as e:
            raise StoreError(f"{method} {table} returned invalid JSON: {e}") from e

        return data if isinstance(data, list) else [data]
