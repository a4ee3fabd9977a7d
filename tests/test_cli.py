"""
Tests for the Typer CLI against a JSON store in a temp directory.
"""

import json

import pytest
from typer.testing import CliRunner

from studiobook.adapters.json_store import JsonFileStore
from studiobook.cli.app import app

runner = CliRunner()


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "business:\n"
        "  name: Vicky Nails\n"
        "store:\n"
        "  backend: json\n"
        "  path: book.json\n",
        encoding="utf-8",
    )
    return path


def _run(config_path, *args):
    return runner.invoke(app, [*args, "--config", str(config_path)])


def _store(config_path):
    return JsonFileStore(config_path.parent / "book.json")


def _add_services(config_path):
    assert _run(config_path, "add-service", "--name", "Manicure", "--price", "80", "--duration", "60").exit_code == 0
    assert _run(config_path, "add-service", "--name", "Pedicure", "--price", "45,50", "--duration", "45").exit_code == 0


class TestCli:
    """End-to-end CLI flows."""

    def test_book_and_show_day(self, config_path):
        _add_services(config_path)

        result = _run(
            config_path, "book",
            "--client", "Ana",
            "--date", "2025-06-01",
            "--time", "10:00",
            "--service", "manicure",
            "--service", "Pedicure",
            "--phone", "21 97606-2557",
        )
        assert result.exit_code == 0, result.output
        assert "Agendado" in result.output

        appointment = _store(config_path).list_appointments()[0]
        assert appointment.total_price == 125.5
        assert len(appointment.service_ids) == 2

        result = _run(config_path, "day", "2025-06-01")
        assert result.exit_code == 0, result.output
        assert "Ana" in result.output
        assert "R$ 125,50" in result.output

    def test_double_booking_is_rejected(self, config_path):
        _add_services(config_path)
        args = ("book", "--client", "Ana", "--date", "2025-06-01", "--time", "10:00", "--service", "Manicure")

        assert _run(config_path, *args).exit_code == 0
        result = _run(config_path, *args)

        assert result.exit_code == 1
        assert "already booked" in result.output
        assert len(_store(config_path).list_appointments()) == 1

    def test_slots_show_booked_times(self, config_path):
        _add_services(config_path)
        _run(config_path, "book", "--client", "Ana", "--date", "2025-06-01", "--time", "10:00", "--service", "Manicure")

        result = _run(config_path, "slots", "2025-06-01")

        assert result.exit_code == 0
        assert "10:00 ocupado" in result.output
        assert "10:30 ocupado" not in result.output

    def test_edit_attend_and_cancel(self, config_path):
        _add_services(config_path)
        _run(config_path, "book", "--client", "Ana", "--date", "2025-06-01", "--time", "10:00", "--service", "Manicure")
        appointment_id = _store(config_path).list_appointments()[0].id

        assert _run(config_path, "edit", appointment_id, "--time", "10:30").exit_code == 0
        assert _store(config_path).list_appointments()[0].time == "10:30"

        assert _run(config_path, "attend", appointment_id).exit_code == 0
        assert _store(config_path).list_appointments()[0].attended is True

        assert _run(config_path, "cancel", appointment_id, "--yes").exit_code == 0
        assert _store(config_path).list_appointments() == []

    def test_unknown_service_fails(self, config_path):
        result = _run(config_path, "book", "--client", "Ana", "--date", "2025-06-01", "--time", "10:00", "--service", "Spa")

        assert result.exit_code == 1
        assert "Serviço desconhecido" in result.output

    def test_invalid_date_fails(self, config_path):
        result = _run(config_path, "day", "01/06/2025")

        assert result.exit_code == 1

    def test_calendar(self, config_path):
        result = _run(config_path, "calendar", "--month", "2025-02", "--date", "2025-02-10")

        assert result.exit_code == 0, result.output
        assert "Fevereiro de 2025" in result.output
        assert "Dom" in result.output

    def test_message_and_backup(self, config_path, tmp_path):
        _add_services(config_path)
        _run(
            config_path, "book", "--client", "Ana", "--date", "2025-06-01", "--time", "10:00",
            "--service", "Manicure", "--phone", "21 97606-2557",
        )
        appointment_id = _store(config_path).list_appointments()[0].id

        result = _run(config_path, "message", appointment_id, "--kind", "lembrete")
        assert result.exit_code == 0, result.output
        assert "wa.me/5521976062557" in result.output

        result = _run(config_path, "backup", "--output", str(tmp_path / "backups"))
        assert result.exit_code == 0, result.output
        files = list((tmp_path / "backups").glob("backup-vicky-nails-*.json"))
        assert len(files) == 1
        data = json.loads(files[0].read_text(encoding="utf-8"))
        assert len(data["appointments"]) == 1
        assert len(data["services"]) == 2

    def test_services_listing_and_delete(self, config_path):
        _add_services(config_path)
        service_id = _store(config_path).list_services()[0].id

        result = _run(config_path, "services")
        assert result.exit_code == 0
        assert "Manicure" in result.output

        assert _run(config_path, "update-service", service_id, "--price", "90").exit_code == 0
        assert _store(config_path).list_services()[0].price == 90

        assert _run(config_path, "delete-service", service_id, "--yes").exit_code == 0
        assert [s.name for s in _store(config_path).list_services()] == ["Pedicure"]

    def test_delete_linked_service_keeps_totals(self, config_path):
        _add_services(config_path)
        _run(config_path, "book", "--client", "Ana", "--date", "2025-06-01", "--time", "10:00", "--service", "Manicure")
        service_id = next(s.id for s in _store(config_path).list_services() if s.name == "Manicure")

        result = _run(config_path, "delete-service", service_id, "--yes")

        assert result.exit_code == 0, result.output
        assert "Agendamentos vinculados" in result.output
        assert _store(config_path).list_appointments()[0].total_price == 80

    def test_missing_config(self, tmp_path):
        result = runner.invoke(app, ["services", "--config", str(tmp_path / "nope.yaml")])

        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "studiobook" in result.output
