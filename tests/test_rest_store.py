"""
Tests for the Supabase REST store, with requests patched out.
"""

import json
from dataclasses import replace
from typing import Any, Dict, List

import pytest
import requests

from studiobook.adapters import rest_store
from studiobook.adapters.rest_store import RestStore
from studiobook.adapters.rows import MISSING_SERVICE_ID
from studiobook.domain.exceptions import AppointmentNotFoundError, StoreError
from studiobook.domain.models import Appointment, Service
from studiobook.domain.pricing import effective_price


class FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200):
        self._payload = payload
        self.status_code = status_code
        self.content = b"" if payload is None else json.dumps(payload).encode()

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")

    def json(self):
        return self._payload


class FakeServer:
    """Records requests and answers from a queue keyed by (method, table)."""

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.responses: Dict[tuple, List[FakeResponse]] = {}

    def answer(self, method: str, table: str, *responses: FakeResponse):
        self.responses.setdefault((method, table), []).extend(responses)

    def __call__(self, method, url, headers=None, params=None, json=None, timeout=None):
        table = url.rsplit("/", 1)[-1]
        self.calls.append(
            {"method": method, "table": table, "headers": headers, "params": params, "json": json, "timeout": timeout}
        )
        queue = self.responses.get((method, table))
        return queue.pop(0) if queue else FakeResponse()


@pytest.fixture
def server(monkeypatch):
    fake = FakeServer()
    monkeypatch.setattr(rest_store.requests, "request", fake)
    return fake


@pytest.fixture
def store():
    return RestStore(url="https://demo.supabase.co/", api_key="secret", timeout=5)


APPOINTMENT_ROW = {
    "id": "a1",
    "client_name": "Ana",
    "phone": None,
    "date": "2025-06-01",
    "time": "10:00:00",
    "service_id": "s1",
    "payment_method": "pix",
    "notes": None,
    "total_price": "125.00",
    "attended": None,
}


class TestRestStore:
    """Tests for RestStore."""

    def test_list_services(self, server, store):
        server.answer("GET", "services", FakeResponse([
            {"id": 1, "name": "Manicure", "price": "80.00", "duration": 60, "description": None},
        ]))

        services = store.list_services()

        assert services == [Service(id="1", name="Manicure", price=80, duration=60)]
        call = server.calls[0]
        assert call["params"] == {"select": "*", "order": "name.asc"}
        assert call["headers"]["apikey"] == "secret"
        assert call["headers"]["Authorization"] == "Bearer secret"
        assert call["timeout"] == 5

    def test_list_appointments_rebuilds_bundles(self, server, store):
        legacy = dict(APPOINTMENT_ROW, id="a2", service_id="s3", total_price=0)
        server.answer("GET", "appointments", FakeResponse([APPOINTMENT_ROW, legacy]))
        server.answer("GET", "appointment_services", FakeResponse([
            {"appointment_id": "a1", "service_id": "s1"},
            {"appointment_id": "a1", "service_id": "s2"},
        ]))

        first, second = store.list_appointments()

        assert first.service_ids == ("s1", "s2")
        assert first.time == "10:00"
        assert first.total_price == 125
        assert first.attended is False
        assert second.service_ids == ("s3",)

    def test_appointment_without_services_is_kept(self, server, store):
        orphan = dict(APPOINTMENT_ROW, service_id=None, total_price=100)
        server.answer("GET", "appointments", FakeResponse([orphan]))
        server.answer("GET", "appointment_services", FakeResponse([]))

        appointments = store.list_appointments()

        assert len(appointments) == 1
        assert appointments[0].service_id == MISSING_SERVICE_ID
        assert effective_price(appointments[0], []) == 100
        assert effective_price(replace(appointments[0], total_price=0), []) == 0

    def test_create_appointment_links_services(self, server, store):
        server.answer("POST", "appointments", FakeResponse([APPOINTMENT_ROW]))
        appointment = Appointment(
            id="",
            client_name="Ana",
            date="2025-06-01",
            time="10:00",
            service_ids=("s1", "s2"),
            total_price=125,
        )

        created = store.create_appointment(appointment)

        assert created.id == "a1"
        assert created.service_ids == ("s1", "s2")
        insert, link = server.calls
        assert insert["headers"]["Prefer"] == "return=representation"
        assert insert["json"]["service_id"] == "s1"
        assert insert["json"]["total_price"] == 125.0
        assert link["table"] == "appointment_services"
        assert link["json"] == [
            {"appointment_id": "a1", "service_id": "s1"},
            {"appointment_id": "a1", "service_id": "s2"},
        ]

    def test_link_failure_is_not_fatal(self, server, store, caplog):
        server.answer("POST", "appointments", FakeResponse([APPOINTMENT_ROW]))
        server.answer("POST", "appointment_services", FakeResponse({"message": "boom"}, status_code=500))
        appointment = Appointment(id="", client_name="Ana", date="2025-06-01", time="10:00", service_ids=("s1",))

        created = store.create_appointment(appointment)

        assert created.id == "a1"
        assert "Could not link services" in caplog.text

    def test_update_appointment_replaces_links(self, server, store):
        server.answer("PATCH", "appointments", FakeResponse([APPOINTMENT_ROW]))
        appointment = Appointment(id="", client_name="Ana", date="2025-06-01", time="10:00", service_ids=("s2",))

        store.update_appointment("a1", appointment)

        assert [(c["method"], c["table"]) for c in server.calls] == [
            ("PATCH", "appointments"),
            ("DELETE", "appointment_services"),
            ("POST", "appointment_services"),
        ]
        assert server.calls[0]["params"] == {"id": "eq.a1"}
        assert server.calls[1]["params"] == {"appointment_id": "eq.a1"}

    def test_update_unknown_appointment(self, server, store):
        server.answer("PATCH", "appointments", FakeResponse([]))
        appointment = Appointment(id="", client_name="Ana", date="2025-06-01", time="10:00", service_ids=("s2",))

        with pytest.raises(AppointmentNotFoundError):
            store.update_appointment("nope", appointment)

    def test_set_attended(self, server, store):
        store.set_attended("a1", True)

        assert server.calls[0]["method"] == "PATCH"
        assert server.calls[0]["json"] == {"attended": True}

    def test_http_error_raises_store_error(self, server, store):
        server.answer("GET", "services", FakeResponse({"message": "denied"}, status_code=401))

        with pytest.raises(StoreError, match="GET services failed"):
            store.list_services()

    def test_connection_error_raises_store_error(self, monkeypatch, store):
        def fail(*args, **kwargs):
            raise requests.exceptions.ConnectionError("offline")

        monkeypatch.setattr(rest_store.requests, "request", fail)

        with pytest.raises(StoreError, match="offline"):
            store.delete_service("s1")
