"""
Application services for searching and booking appointments.

The service loads the booking store through a repository adapter and
delegates availability questions to the domain-level slot finder and
optimizer. This keeps the CLI thin and lets tests swap the repository for
an in-memory stub via a simple protocol.
"""

from __future__ import annotations

import logging
import random
from typing import List, Protocol

import pendulum
from pendulum import DateTime

from ..domain.booking_store import BookingStore
from ..domain.calendar_grid import BusinessHours
from ..domain.models import Appointment, AppointmentType, DateRange
from ..domain.slot_finder import free_slots
from ..domain.slot_optimizer import free_slots_optimized

logger = logging.getLogger(__name__)


class AppointmentRepositoryProtocol(Protocol):
    """Protocol describing the persistence behaviour needed by the service."""

    def load(self, business_hours: BusinessHours) -> BookingStore:
        """Return the persisted booking store."""

    def save(self, store: BookingStore) -> None:
        """Persist the booking store."""


def this_week_range(now: DateTime, business_hours: BusinessHours) -> DateRange:
    """
    From the next open quantum until the end of that week's Friday.

    After business hours on Friday (or on a weekend) the next open quantum
    lies in the following week, so the range runs to next Friday.
    """
    start = business_hours.next_working_instant(now)
    friday = start.start_of("week").add(days=4).end_of("day")
    if friday < start:
        friday = friday.add(weeks=1)
    return DateRange(start=start, end=friday)


def next_week_range(now: DateTime) -> DateRange:
    """From next Monday 00:00 until the end of that Friday."""
    next_monday = now.next(pendulum.MONDAY).start_of("day")
    return DateRange(start=next_monday, end=next_monday.add(days=4).end_of("day"))


class BookingService:
    """
    Orchestrates persistence, booking and slot calculation.

    The store is loaded lazily on first use and saved after every mutation.
    """

    def __init__(
        self,
        repository: AppointmentRepositoryProtocol,
        business_hours: BusinessHours,
    ) -> None:
        self._repository = repository
        self._business_hours = business_hours
        self._store: BookingStore | None = None

    @property
    def business_hours(self) -> BusinessHours:
        return self._business_hours

    @property
    def store(self) -> BookingStore:
        if self._store is None:
            self._store = self._repository.load(self._business_hours)
        return self._store

    def save(self) -> None:
        self._repository.save(self.store)

    def free_slots(
        self,
        date_range: DateRange,
        appointment_type: AppointmentType,
        *,
        optimized: bool = False,
    ) -> List[DateTime]:
        """Calculate free slots, optionally reduced to one per hour."""
        finder = free_slots_optimized if optimized else free_slots
        return finder(date_range, appointment_type, self._business_hours, self.store)

    def book(self, start: DateTime, appointment_type: AppointmentType) -> Appointment:
        """
        Book an appointment and persist it.

        Availability is re-checked by the store at commit time, so a slot that
        went stale since it was listed raises ``SlotUnavailable``.
        """
        appointment = self.store.add(Appointment(start=start, appointment_type=appointment_type))
        self.save()
        return appointment

    def cancel(self, start: DateTime) -> Appointment:
        """Cancel the appointment starting at ``start`` and persist the change."""
        appointment = self.store.remove(start)
        self.save()
        return appointment

    def appointments(self, date_range: DateRange | None = None) -> List[Appointment]:
        if date_range is None:
            return self.store.all()
        return self.store.between(date_range)

    def fill_random(
        self,
        date_range: DateRange,
        appointment_type: AppointmentType,
        percentage: int,
        rng: random.Random | None = None,
    ) -> List[Appointment]:
        """
        Fill the calendar with random appointments of one type.

        Appointments are added until the booked quanta would exceed the given
        percentage of the open quanta in the range, or until no free slot is
        left. Existing appointments count towards the percentage.

        Raises:
            ValueError: If the percentage is not between 1 and 100
        """
        if not 1 <= percentage <= 100:
            raise ValueError(f"percentage must be between 1 and 100, got {percentage}")

        rng = rng or random.Random()
        open_quanta = set(self._business_hours.quanta(date_range))
        added: List[Appointment] = []

        if not open_quanta:
            return added

        while True:
            reserved = sum(
                1
                for appointment in self.store.all()
                for quantum in appointment.reserved_quanta()
                if quantum in open_quanta
            )
            if (reserved + appointment_type.quanta) * 100 > percentage * len(open_quanta):
                break

            candidates = self.free_slots(date_range, appointment_type)
            if not candidates:
                break

            start = rng.choice(candidates)
            added.append(self.store.add(Appointment(start=start, appointment_type=appointment_type)))

        if added:
            self.save()
        logger.info(
            "Random fill added %d %s appointment(s) in %s",
            len(added),
            appointment_type.value,
            date_range,
        )
        return added
