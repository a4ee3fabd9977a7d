"""
Domain models for services, appointments and the derived calendar views.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Iterable, Iterator, List, Sequence, Tuple

from .exceptions import BundleLimitError

MAX_BUNDLE_SIZE = 5

ZERO = Decimal("0")


def to_money(value) -> Decimal:
    """
    Convert a price coming from config, JSON or a form into a Decimal.

    Floats go through ``str`` so 80.1 stays 80.1 instead of its binary expansion.
    Brazilian decimal commas ("80,50") are accepted.
    """
    if value is None:
        return ZERO
    if isinstance(value, bool):
        raise ValueError(f"Invalid monetary value: {value!r}")
    if isinstance(value, str):
        value = value.strip().replace(",", ".") or "0"
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid monetary value: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid monetary value: {value!r}")
    return result


@dataclass(frozen=True)
class Service:
    """
    A service offered by the studio.

    Invariant: name is not blank, price and duration are not negative.
    """
    id: str
    name: str
    price: Decimal
    duration: int
    description: str = ""

    def __post_init__(self):
        object.__setattr__(self, "price", to_money(self.price))
        if not self.name or not self.name.strip():
            raise ValueError("Service name must not be empty")
        if self.price < 0:
            raise ValueError(f"Service price must not be negative, got {self.price}")
        if self.duration < 0:
            raise ValueError(f"Service duration must not be negative, got {self.duration}")


@dataclass(frozen=True)
class ServiceBundle:
    """
    Ordered, duplicate-free selection of up to five services.

    The first member is the primary service of the appointment. Removing it
    promotes the next one.
    """
    ids: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "ids", tuple(self.ids))
        if len(set(self.ids)) != len(self.ids):
            raise ValueError(f"Service bundle contains duplicates: {self.ids}")
        if len(self.ids) > MAX_BUNDLE_SIZE:
            raise BundleLimitError(
                f"A bundle holds at most {MAX_BUNDLE_SIZE} services, got {len(self.ids)}"
            )

    @classmethod
    def from_ids(cls, ids: Iterable[str]) -> "ServiceBundle":
        """Build a bundle from ids, dropping blanks and repeated ids."""
        unique: List[str] = []
        for service_id in ids:
            if service_id and service_id not in unique:
                unique.append(service_id)
        return cls(ids=tuple(unique))

    @property
    def primary(self) -> str | None:
        """The primary service id, or None for an empty bundle."""
        return self.ids[0] if self.ids else None

    def toggle(self, service_id: str) -> "ServiceBundle":
        """
        Return a new bundle with the service added or removed.

        Raises:
            BundleLimitError: If the bundle is already full
        """
        if service_id in self.ids:
            return ServiceBundle(ids=tuple(i for i in self.ids if i != service_id))

        if len(self.ids) >= MAX_BUNDLE_SIZE:
            raise BundleLimitError(
                f"Você pode selecionar no máximo {MAX_BUNDLE_SIZE} serviços por agendamento."
            )

        return ServiceBundle(ids=self.ids + (service_id,))

    def total_price(self, services: Sequence[Service]) -> Decimal:
        """Sum the catalog prices of the members; unknown ids count as zero."""
        prices = {service.id: service.price for service in services}
        return sum((prices.get(service_id, ZERO) for service_id in self.ids), ZERO)

    def __len__(self) -> int:
        return len(self.ids)

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids)

    def __contains__(self, service_id: object) -> bool:
        return service_id in self.ids


@dataclass(frozen=True)
class Appointment:
    """
    A booked appointment.

    ``service_ids`` is the bundle of 1 to 5 services; ``service_id`` is the
    primary one and is derived, never stored separately.
    ``total_price`` of zero means no snapshot was taken.
    """
    id: str
    client_name: str
    date: str  # YYYY-MM-DD
    time: str  # HH:MM
    service_ids: Tuple[str, ...]
    phone: str = ""
    payment_method: str = ""
    notes: str = ""
    total_price: Decimal = ZERO
    attended: bool = False

    def __post_init__(self):
        object.__setattr__(self, "service_ids", tuple(self.service_ids))
        object.__setattr__(self, "total_price", to_money(self.total_price))
        if not self.client_name or not self.client_name.strip():
            raise ValueError("Client name must not be empty")
        if not 1 <= len(self.service_ids) <= MAX_BUNDLE_SIZE:
            raise ValueError(
                f"An appointment needs between 1 and {MAX_BUNDLE_SIZE} services, "
                f"got {len(self.service_ids)}"
            )
        if self.total_price < 0:
            raise ValueError(f"Total price must not be negative, got {self.total_price}")

    @property
    def service_id(self) -> str:
        """The primary service of the bundle."""
        return self.service_ids[0]

    @property
    def bundle(self) -> ServiceBundle:
        return ServiceBundle(ids=self.service_ids)


@dataclass(frozen=True)
class AppointmentDraft:
    """
    Appointment form as submitted by the user, before validation.
    """
    client_name: str
    date: str
    time: str
    bundle: ServiceBundle = field(default_factory=ServiceBundle)
    phone: str = ""
    payment_method: str = ""
    notes: str = ""

    @classmethod
    def from_appointment(cls, appointment: Appointment) -> "AppointmentDraft":
        """Prefill a draft for editing an existing appointment."""
        return cls(
            client_name=appointment.client_name,
            date=appointment.date,
            time=appointment.time,
            bundle=appointment.bundle,
            phone=appointment.phone,
            payment_method=appointment.payment_method,
            notes=appointment.notes,
        )


@dataclass(frozen=True)
class CalendarDay:
    """One cell of the 6x7 month grid."""
    date_str: str
    day_number: int
    is_current_month: bool
    is_today: bool
    is_selected: bool


@dataclass(frozen=True)
class DaySummary:
    """Appointment count and revenue for a selected day and its month."""
    day_count: int = 0
    day_total: Decimal = ZERO
    month_total: Decimal = ZERO


@dataclass(frozen=True)
class TimeOption:
    """A bookable time of day and whether it can still be selected."""
    time: str
    available: bool = True
