"""
JSON file persistence for booked appointments.
"""

import json
import logging
from pathlib import Path

import pendulum
from pendulum import DateTime

from ..domain.booking_store import BookingStore
from ..domain.calendar_grid import BusinessHours
from ..domain.exceptions import BookingError, StorageError
from ..domain.models import Appointment, AppointmentType

logger = logging.getLogger(__name__)


class JsonAppointmentRepository:
    """
    Loads and saves a ``BookingStore`` as a JSON document.

    Format:
        {"appointments": [{"start": "2024-11-25T09:00:00+01:00", "type": "medium"}]}

    Every loaded entry goes through ``BookingStore.add`` again, so a hand
    edited file cannot smuggle overlapping or out-of-hours bookings in.
    """

    def __init__(self, path: Path):
        self.path = path

    def load(self, business_hours: BusinessHours) -> BookingStore:
        """
        Load the persisted appointments.

        A missing file yields an empty store.

        Raises:
            StorageError: If the file is unreadable or holds invalid entries
        """
        store = BookingStore(business_hours)

        if not self.path.exists():
            logger.debug("No appointment file at %s, starting empty", self.path)
            return store

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(self.path, f"cannot read appointments: {exc}") from exc

        if not isinstance(data, dict) or not isinstance(data.get("appointments"), list):
            raise StorageError(self.path, "expected an object with an 'appointments' list")

        for entry in data["appointments"]:
            try:
                start = pendulum.parse(entry["start"])
                if not isinstance(start, DateTime):
                    raise ValueError(f"'{entry['start']}' is not a date and time")
                appointment = Appointment(
                    start=start.in_timezone(business_hours.timezone),
                    appointment_type=AppointmentType.parse(entry["type"]),
                )
                store.add(appointment)
            except (KeyError, TypeError, ValueError, BookingError) as exc:
                raise StorageError(self.path, f"invalid appointment entry {entry!r}: {exc}") from exc

        logger.debug("Loaded %d appointments from %s", len(store), self.path)
        return store

    def save(self, store: BookingStore) -> None:
        """
        Write all appointments of the store.

        Raises:
            StorageError: If the file cannot be written
        """
        data = {
            "appointments": [
                {"start": appointment.start.isoformat(), "type": appointment.appointment_type.value}
                for appointment in store.all()
            ]
        }

        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            # The store file is only ever replaced by a complete document
            tmp_path.replace(self.path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise StorageError(self.path, f"cannot write appointments: {exc}") from exc

        logger.debug("Saved %d appointments to %s", len(store), self.path)
