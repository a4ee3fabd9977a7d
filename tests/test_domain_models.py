"""
Tests for domain models.
"""

from decimal import Decimal

import pytest

from studiobook.domain.exceptions import BundleLimitError
from studiobook.domain.models import (
    Appointment,
    AppointmentDraft,
    Service,
    ServiceBundle,
    to_money,
)


class TestService:
    """Tests for Service model."""

    def test_create_valid_service(self):
        """Test creating a valid service converts the price to Decimal."""
        service = Service(id="s1", name="Manicure", price=80.1, duration=60)

        assert service.price == Decimal("80.1")
        assert service.description == ""

    @pytest.mark.parametrize(
        "kwargs,message",
        [
            ({"name": "  "}, "name must not be empty"),
            ({"price": -1}, "price must not be negative"),
            ({"duration": -5}, "duration must not be negative"),
            ({"price": "nan"}, "Invalid monetary value"),
            ({"price": "Infinity"}, "Invalid monetary value"),
        ],
    )
    def test_invalid_service_raises_error(self, kwargs, message):
        fields = {"id": "s1", "name": "Manicure", "price": 80, "duration": 60, **kwargs}

        with pytest.raises(ValueError, match=message):
            Service(**fields)


class TestToMoney:
    """Tests for price conversion."""

    def test_conversions(self):
        assert to_money("80,50") == Decimal("80.50")
        assert to_money(None) == 0
        assert to_money(150) == Decimal("150")
        assert to_money(Decimal("1.5")) == Decimal("1.5")

    @pytest.mark.parametrize(
        "value", ["abc", "nan", "NaN", "Infinity", "-inf", float("nan"), float("inf"), Decimal("NaN"), Decimal("Infinity")]
    )
    def test_invalid_value_raises(self, value):
        """Non-numeric and non-finite prices are rejected."""
        with pytest.raises(ValueError, match="Invalid monetary value"):
            to_money(value)


class TestServiceBundle:
    """Tests for the selected-services value object."""

    def test_toggle_adds_and_removes(self):
        bundle = ServiceBundle().toggle("s1").toggle("s2")

        assert bundle.ids == ("s1", "s2")
        assert bundle.toggle("s1").ids == ("s2",)

    def test_toggle_returns_new_bundle(self):
        bundle = ServiceBundle()
        bundle.toggle("s1")

        assert len(bundle) == 0

    def test_primary_is_promoted_when_removed(self):
        bundle = ServiceBundle.from_ids(["s1", "s2", "s3"])

        assert bundle.primary == "s1"
        assert bundle.toggle("s1").primary == "s2"

    def test_empty_bundle_has_no_primary(self):
        assert ServiceBundle().primary is None
        assert ServiceBundle.from_ids(["s1"]).toggle("s1").primary is None

    def test_capped_at_five(self):
        bundle = ServiceBundle.from_ids(["s1", "s2", "s3", "s4", "s5"])

        with pytest.raises(BundleLimitError):
            bundle.toggle("s6")

        # Removing still works on a full bundle
        assert len(bundle.toggle("s5")) == 4

    def test_from_ids_drops_duplicates_and_blanks(self):
        bundle = ServiceBundle.from_ids(["s1", "", "s2", "s1"])

        assert bundle.ids == ("s1", "s2")
        assert "s2" in bundle
        assert list(bundle) == ["s1", "s2"]

    def test_direct_construction_rejects_duplicates(self):
        with pytest.raises(ValueError, match="duplicates"):
            ServiceBundle(ids=("s1", "s1"))

    def test_total_price(self):
        services = [
            Service(id="s1", name="Manicure", price=80, duration=60),
            Service(id="s2", name="Pedicure", price=45, duration=45),
        ]

        assert ServiceBundle.from_ids(["s1", "s2", "gone"]).total_price(services) == 125
        assert ServiceBundle().total_price(services) == 0


class TestAppointment:
    """Tests for Appointment model."""

    def test_service_id_is_primary_of_bundle(self):
        appointment = Appointment(
            id="a",
            client_name="Ana",
            date="2025-06-01",
            time="10:00",
            service_ids=["s2", "s1"],
        )

        assert appointment.service_id == "s2"
        assert appointment.service_ids == ("s2", "s1")
        assert appointment.bundle.primary == "s2"
        assert appointment.total_price == 0
        assert appointment.attended is False

    def test_empty_bundle_raises_error(self):
        with pytest.raises(ValueError, match="between 1 and 5 services"):
            Appointment(id="a", client_name="Ana", date="2025-06-01", time="10:00", service_ids=())

    def test_oversized_bundle_raises_error(self):
        with pytest.raises(ValueError, match="between 1 and 5 services"):
            Appointment(
                id="a",
                client_name="Ana",
                date="2025-06-01",
                time="10:00",
                service_ids=[f"s{i}" for i in range(6)],
            )

    def test_blank_client_raises_error(self):
        with pytest.raises(ValueError, match="Client name"):
            Appointment(id="a", client_name=" ", date="2025-06-01", time="10:00", service_ids=["s1"])

    def test_negative_total_raises_error(self):
        with pytest.raises(ValueError, match="Total price"):
            Appointment(
                id="a",
                client_name="Ana",
                date="2025-06-01",
                time="10:00",
                service_ids=["s1"],
                total_price=-10,
            )

    def test_draft_from_appointment(self):
        appointment = Appointment(
            id="a",
            client_name="Ana",
            date="2025-06-01",
            time="10:00",
            service_ids=["s1", "s2"],
            phone="21 99999-0000",
            notes="francesinha",
        )

        draft = AppointmentDraft.from_appointment(appointment)

        assert draft.bundle.ids == ("s1", "s2")
        assert draft.phone == "21 99999-0000"
        assert draft.notes == "francesinha"
