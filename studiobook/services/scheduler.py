"""
Application service for the appointment book.

The service reads a fresh snapshot from the store for every operation,
feeds it to the pure domain functions and writes validated results back.
The store is described by a protocol so the JSON file store, the REST
store or a test stub can be plugged in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Protocol, Sequence

import pendulum

from ..domain.aggregator import aggregate, appointments_of_day
from ..domain.availability import booked_slots, is_slot_free, slot_options
from ..domain.calendar_builder import generate_calendar_days
from ..domain.exceptions import (
    AppointmentNotFoundError,
    ServiceNotFoundError,
    SlotConflictError,
    ValidationError,
)
from ..domain.models import (
    MAX_BUNDLE_SIZE,
    Appointment,
    AppointmentDraft,
    CalendarDay,
    DaySummary,
    Service,
    TimeOption,
)
from ..domain.pricing import snapshot_total
from ..domain.time_grid import generate_time_options

logger = logging.getLogger(__name__)


class AppointmentStoreProtocol(Protocol):
    """Protocol describing the persistence behaviour needed by the service."""

    def list_services(self) -> List[Service]:
        """Return all services, ordered by name."""

    def create_service(self, service: Service) -> Service:
        """Persist a new service; the store assigns the id."""

    def update_service(self, service_id: str, service: Service) -> Service:
        """Replace the fields of an existing service."""

    def delete_service(self, service_id: str) -> None:
        """Remove a service."""

    def list_appointments(self) -> List[Appointment]:
        """Return all appointments with their bundles, ordered by date and time."""

    def create_appointment(self, appointment: Appointment) -> Appointment:
        """Persist a new appointment and its bundle; the store assigns the id."""

    def update_appointment(self, appointment_id: str, appointment: Appointment) -> Appointment:
        """Replace an appointment and its bundle."""

    def delete_appointment(self, appointment_id: str) -> None:
        """Remove an appointment and its bundle."""

    def set_attended(self, appointment_id: str, attended: bool) -> None:
        """Mark an appointment as attended or not."""


@dataclass(frozen=True)
class DayView:
    """Appointments of a day with the day and month totals."""
    date: str
    appointments: List[Appointment]
    summary: DaySummary


class SchedulerService:
    """
    Orchestrates store snapshots and the scheduling domain logic.
    """

    def __init__(
        self,
        store: AppointmentStoreProtocol,
        time_options: Sequence[str] | None = None,
        max_services: int = MAX_BUNDLE_SIZE,
    ) -> None:
        self._store = store
        self._time_options = list(time_options) if time_options is not None else generate_time_options()
        self._max_services = max_services

    @property
    def time_options(self) -> List[str]:
        return list(self._time_options)

    # --- Read side ---

    def services(self) -> List[Service]:
        return self._store.list_services()

    def appointments(self) -> List[Appointment]:
        return self._store.list_appointments()

    def get_appointment(self, appointment_id: str) -> Appointment:
        """
        Find one appointment by id.

        Raises:
            AppointmentNotFoundError: If no appointment has this id
        """
        return self._find_appointment(self._store.list_appointments(), appointment_id)

    def day_view(self, selected_date: str) -> DayView:
        """Appointments of the selected date plus the day and month totals."""
        appointments = self._store.list_appointments()
        services = self._store.list_services()

        return DayView(
            date=selected_date,
            appointments=appointments_of_day(appointments, selected_date),
            summary=aggregate(appointments, services, selected_date),
        )

    def calendar(
        self,
        year: int,
        month: int,
        selected_date: str,
        today_date: str,
    ) -> List[CalendarDay]:
        return generate_calendar_days(year, month, selected_date, today_date)

    def time_slots(self, date: str, exclude_appointment_id: str | None = None) -> List[TimeOption]:
        """Time grid for a date with occupied slots marked unavailable."""
        booked = booked_slots(self._store.list_appointments(), date, exclude_appointment_id)
        return slot_options(self._time_options, booked)

    # --- Appointments ---

    def book(self, draft: AppointmentDraft) -> Appointment:
        """
        Validate a new appointment form and persist it.

        Raises:
            ValidationError: If the form is incomplete or malformed
            SlotConflictError: If the slot is already taken
        """
        appointments = self._store.list_appointments()
        services = self._store.list_services()

        appointment = self._build_appointment(
            appointment_id="",
            draft=draft,
            appointments=appointments,
            services=services,
            attended=False,
        )

        created = self._store.create_appointment(appointment)
        logger.info(
            "Booked appointment %s on %s at %s (%d service(s), total %s)",
            created.id,
            created.date,
            created.time,
            len(created.service_ids),
            created.total_price,
        )
        return created

    def reschedule(self, appointment_id: str, draft: AppointmentDraft) -> Appointment:
        """
        Replace an existing appointment with an edited form.

        The appointment's own slot does not count as a conflict, and its
        attendance flag is kept.

        Raises:
            AppointmentNotFoundError: If the appointment does not exist
            ValidationError: If the form is incomplete or malformed
            SlotConflictError: If the new slot is taken by another appointment
        """
        appointments = self._store.list_appointments()
        existing = self._find_appointment(appointments, appointment_id)
        services = self._store.list_services()

        appointment = self._build_appointment(
            appointment_id=appointment_id,
            draft=draft,
            appointments=appointments,
            services=services,
            attended=existing.attended,
        )

        updated = self._store.update_appointment(appointment_id, appointment)
        logger.info("Updated appointment %s to %s at %s", appointment_id, updated.date, updated.time)
        return updated

    def cancel(self, appointment_id: str) -> None:
        """Delete an appointment."""
        self._find_appointment(self._store.list_appointments(), appointment_id)
        self._store.delete_appointment(appointment_id)
        logger.info("Deleted appointment %s", appointment_id)

    def toggle_attendance(self, appointment_id: str) -> bool:
        """Flip the attended flag and return its new value."""
        existing = self._find_appointment(self._store.list_appointments(), appointment_id)
        attended = not existing.attended
        self._store.set_attended(appointment_id, attended)
        return attended

    # --- Services ---

    def add_service(self, name: str, price, duration: int, description: str = "") -> Service:
        """
        Validate and persist a new service.

        Raises:
            ValidationError: If a field is missing or negative
        """
        service = self._build_service("", name, price, duration, description)
        created = self._store.create_service(service)
        logger.info("Created service %s (%s)", created.id, created.name)
        return created

    def update_service(
        self,
        service_id: str,
        name: str,
        price,
        duration: int,
        description: str = "",
    ) -> Service:
        """
        Replace the fields of a service.

        Stored appointment totals are snapshots and do not change.
        """
        self._find_service(self._store.list_services(), service_id)
        service = self._build_service(service_id, name, price, duration, description)
        return self._store.update_service(service_id, service)

    def service_in_use(self, service_id: str) -> bool:
        """Whether any appointment bundle still references the service."""
        return any(
            service_id in appointment.service_ids
            for appointment in self._store.list_appointments()
        )

    def remove_service(self, service_id: str) -> bool:
        """
        Delete a service.

        Returns:
            True if appointments still reference the service. Their totals
            are kept; appointments without a total fall back to zero.
        """
        self._find_service(self._store.list_services(), service_id)
        in_use = self.service_in_use(service_id)
        self._store.delete_service(service_id)

        if in_use:
            logger.warning("Deleted service %s which is still linked to appointments", service_id)

        return in_use

    # --- Helpers ---

    def _build_appointment(
        self,
        *,
        appointment_id: str,
        draft: AppointmentDraft,
        appointments: Sequence[Appointment],
        services: Sequence[Service],
        attended: bool,
    ) -> Appointment:
        date = self._validate_draft(draft)

        exclude = appointment_id or None
        if not is_slot_free(appointments, date, draft.time, exclude):
            raise SlotConflictError(date, draft.time)

        return Appointment(
            id=appointment_id,
            client_name=draft.client_name.strip(),
            phone=draft.phone.strip(),
            date=date,
            time=draft.time,
            service_ids=draft.bundle.ids,
            payment_method=draft.payment_method.strip(),
            notes=draft.notes.strip(),
            total_price=snapshot_total(draft.bundle, services),
            attended=attended,
        )

    def _validate_draft(self, draft: AppointmentDraft) -> str:
        """
        Reject forms lacking a client name, a service, a date or a time.

        Returns the date zero-padded as YYYY-MM-DD, the form every
        date comparison in the book relies on.
        """
        if not draft.client_name.strip():
            raise ValidationError("Informe o nome da cliente.")

        if not draft.bundle.primary:
            raise ValidationError("Selecione pelo menos um serviço.")

        if len(draft.bundle) > self._max_services:
            raise ValidationError(
                f"Você pode selecionar no máximo {self._max_services} serviços por agendamento."
            )

        if not draft.date:
            raise ValidationError("Informe a data.")

        try:
            date = pendulum.from_format(draft.date.strip(), "YYYY-MM-DD").to_date_string()
        except ValueError as exc:
            raise ValidationError(f"Data inválida: {draft.date!r}") from exc

        if not draft.time:
            raise ValidationError("Informe o horário.")

        if draft.time not in self._time_options:
            raise ValidationError(f"Horário fora da grade: {draft.time!r}")

        return date

    @staticmethod
    def _build_service(service_id: str, name: str, price, duration: int, description: str) -> Service:
        try:
            return Service(
                id=service_id,
                name=name.strip(),
                price=price,
                duration=int(duration),
                description=description.strip(),
            )
        except (TypeError, ValueError) as exc:
            raise ValidationError(str(exc)) from exc

    @staticmethod
    def _find_appointment(appointments: Sequence[Appointment], appointment_id: str) -> Appointment:
        for appointment in appointments:
            if appointment.id == appointment_id:
                return appointment
        raise AppointmentNotFoundError(f"Appointment not found: {appointment_id}")

    @staticmethod
    def _find_service(services: Sequence[Service], service_id: str) -> Service:
        for service in services:
            if service.id == service_id:
                return service
        raise ServiceNotFoundError(f"Service not found: {service_id}")
