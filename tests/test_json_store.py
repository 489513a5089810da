"""
Tests for the JSON appointment repository.
"""

import json

import pendulum
import pytest

from appointment_booking.adapters.json_store import JsonAppointmentRepository
from appointment_booking.domain.booking_store import BookingStore
from appointment_booking.domain.calendar_grid import BusinessHours
from appointment_booking.domain.exceptions import StorageError
from appointment_booking.domain.models import Appointment, AppointmentType


def _dt(text: str):
    return pendulum.parse(text, tz="Europe/Berlin")


def test_missing_file_yields_empty_store(tmp_path):
    repository = JsonAppointmentRepository(tmp_path / "appointments.json")

    store = repository.load(BusinessHours())

    assert store.all() == []


def test_save_and_load(tmp_path):
    path = tmp_path / "nested" / "appointments.json"
    repository = JsonAppointmentRepository(path)
    store = BookingStore(BusinessHours())
    store.add(Appointment(start=_dt("2024-11-25 09:00"), appointment_type=AppointmentType.MEDIUM))
    store.add(Appointment(start=_dt("2024-11-25 13:00"), appointment_type=AppointmentType.LONG))

    repository.save(store)
    loaded = repository.load(BusinessHours())

    assert loaded.all() == store.all()
    assert json.loads(path.read_text(encoding="utf-8"))["appointments"][0] == {
        "start": "2024-11-25T09:00:00+01:00",
        "type": "medium",
    }


def test_corrupt_json_raises(tmp_path):
    path = tmp_path / "appointments.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(StorageError) as excinfo:
        JsonAppointmentRepository(path).load(BusinessHours())

    assert excinfo.value.path == path


def test_wrong_shape_raises(tmp_path):
    path = tmp_path / "appointments.json"
    path.write_text(json.dumps([{"start": "2024-11-25T09:00:00+01:00"}]), encoding="utf-8")

    with pytest.raises(StorageError):
        JsonAppointmentRepository(path).load(BusinessHours())


@pytest.mark.parametrize(
    "entries",
    [
        # Overlapping bookings
        [
            {"start": "2024-11-25T09:00:00+01:00", "type": "long"},
            {"start": "2024-11-25T09:30:00+01:00", "type": "short"},
        ],
        # Unknown type
        [{"start": "2024-11-25T09:00:00+01:00", "type": "surgery"}],
        # Missing start
        [{"type": "short"}],
        # ISO duration instead of an instant
        [{"start": "P1D", "type": "short"}],
        # ISO interval instead of an instant
        [{"start": "2024-11-25T09:00/2024-11-25T10:00", "type": "short"}],
    ],
)
def test_invalid_entries_raise(tmp_path, entries):
    path = tmp_path / "appointments.json"
    path.write_text(json.dumps({"appointments": entries}), encoding="utf-8")

    with pytest.raises(StorageError):
        JsonAppointmentRepository(path).load(BusinessHours())


def test_save_replaces_file_without_leftovers(tmp_path):
    path = tmp_path / "appointments.json"
    path.write_text(json.dumps({"appointments": []}), encoding="utf-8")
    store = BookingStore(BusinessHours())
    store.add(Appointment(start=_dt("2024-11-25 09:00"), appointment_type=AppointmentType.SHORT))

    JsonAppointmentRepository(path).save(store)

    assert [p.name for p in tmp_path.iterdir()] == ["appointments.json"]
    assert len(json.loads(path.read_text(encoding="utf-8"))["appointments"]) == 1


def test_failed_save_keeps_previous_file(tmp_path, monkeypatch):
    path = tmp_path / "appointments.json"
    repository = JsonAppointmentRepository(path)
    store = BookingStore(BusinessHours())
    store.add(Appointment(start=_dt("2024-11-25 09:00"), appointment_type=AppointmentType.SHORT))
    repository.save(store)
    previous = path.read_text(encoding="utf-8")

    def failing_dump(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(json, "dump", failing_dump)
    store.add(Appointment(start=_dt("2024-11-25 10:00"), appointment_type=AppointmentType.SHORT))

    with pytest.raises(StorageError):
        repository.save(store)

    assert path.read_text(encoding="utf-8") == previous
    assert not (tmp_path / "appointments.json.tmp").exists()
