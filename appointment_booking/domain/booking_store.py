"""
In-memory store of committed appointments.
"""

import logging
from typing import Iterable, List

from pendulum import DateTime

from .calendar_grid import BusinessHours
from .exceptions import AppointmentNotFound, SlotUnavailable, UnavailableReason
from .models import Appointment, DateRange, TimeRange

logger = logging.getLogger(__name__)


class BookingStore:
    """
    Holds the practice's booked appointments.

    Invariant: stored appointments never overlap and always lie inside
    business hours. Appointments passed to the constructor are validated
    like ``add``; only ``including`` builds an unchecked copy.
    """

    def __init__(
        self,
        business_hours: BusinessHours,
        appointments: Iterable[Appointment] = (),
    ):
        self.business_hours = business_hours
        self._appointments: List[Appointment] = []
        for appointment in sorted(appointments, key=lambda a: a.start):
            self._validate(appointment)
            self._appointments.append(appointment)

    def __len__(self) -> int:
        return len(self._appointments)

    def overlaps(self, time_range: TimeRange) -> bool:
        """Check if any stored appointment intersects the half-open range."""
        return self.find_conflict(time_range) is not None

    def find_conflict(self, time_range: TimeRange) -> Appointment | None:
        for appointment in self._appointments:
            if appointment.start >= time_range.end:
                break
            if appointment.time_range().overlaps(time_range):
                return appointment
        return None

    def add(self, appointment: Appointment) -> Appointment:
        """
        Validate and insert an appointment.

        Raises:
            SlotUnavailable: If the start is off the 15 minute grid, the
                appointment leaves business hours or it overlaps a booking
        """
        self._validate(appointment)
        self._appointments.append(appointment)
        self._appointments.sort(key=lambda a: a.start)
        logger.info("Booked %s", appointment.format_display())
        return appointment

    def _validate(self, appointment: Appointment) -> None:
        if not self.business_hours.is_quantized(appointment.start):
            raise SlotUnavailable(appointment, UnavailableReason.OFF_GRID)

        time_range = appointment.time_range()

        if not self.business_hours.contains(time_range):
            raise SlotUnavailable(appointment, UnavailableReason.OUTSIDE_BUSINESS_HOURS)

        conflict = self.find_conflict(time_range)
        if conflict is not None:
            raise SlotUnavailable(appointment, UnavailableReason.OVERLAP, conflict=conflict)

    def remove(self, start: DateTime) -> Appointment:
        """
        Cancel the appointment starting at ``start``.

        Raises:
            AppointmentNotFound: If nothing starts at that instant
        """
        for index, appointment in enumerate(self._appointments):
            if appointment.start == start:
                del self._appointments[index]
                logger.info("Cancelled %s", appointment.format_display())
                return appointment
        raise AppointmentNotFound(start)

    def all(self) -> List[Appointment]:
        """Return every appointment in chronological order."""
        return list(self._appointments)

    def between(self, date_range: DateRange) -> List[Appointment]:
        """Return the appointments starting inside the range."""
        return [a for a in self._appointments if date_range.contains(a.start)]

    def including(self, appointment: Appointment) -> "BookingStore":
        """
        Return a copy that also holds a hypothetical appointment.

        The appointment is not validated and this store is left untouched.
        """
        extended = BookingStore(self.business_hours)
        extended._appointments = sorted([*self._appointments, appointment], key=lambda a: a.start)
        return extended
