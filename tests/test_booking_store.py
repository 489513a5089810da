"""
Tests for the booking store.
"""

import pendulum
import pytest

from appointment_booking.domain.booking_store import BookingStore
from appointment_booking.domain.calendar_grid import BusinessHours
from appointment_booking.domain.exceptions import (
    AppointmentNotFound,
    SlotUnavailable,
    UnavailableReason,
)
from appointment_booking.domain.models import Appointment, AppointmentType, DateRange, TimeRange


def _dt(text: str):
    return pendulum.parse(text, tz="Europe/Berlin")


def _appointment(text: str, appointment_type: AppointmentType) -> Appointment:
    return Appointment(start=_dt(text), appointment_type=appointment_type)


class TestBookingStoreAdd:
    """Tests for committing appointments."""

    def test_add_and_enumerate(self):
        store = BookingStore(BusinessHours())

        store.add(_appointment("2024-11-25 13:00", AppointmentType.LONG))
        store.add(_appointment("2024-11-25 09:00", AppointmentType.MEDIUM))

        assert [a.start for a in store.all()] == [_dt("2024-11-25 09:00"), _dt("2024-11-25 13:00")]
        assert len(store) == 2

    def test_constructor_sorts_given_appointments(self):
        store = BookingStore(
            BusinessHours(),
            [
                _appointment("2024-11-25 13:00", AppointmentType.LONG),
                _appointment("2024-11-25 09:00", AppointmentType.MEDIUM),
            ],
        )

        assert [a.start for a in store.all()] == [_dt("2024-11-25 09:00"), _dt("2024-11-25 13:00")]

    @pytest.mark.parametrize(
        "appointments, reason",
        [
            (
                [
                    _appointment("2024-11-25 09:00", AppointmentType.LONG),
                    _appointment("2024-11-25 09:30", AppointmentType.SHORT),
                ],
                UnavailableReason.OVERLAP,
            ),
            ([_appointment("2024-11-23 09:00", AppointmentType.SHORT)], UnavailableReason.OUTSIDE_BUSINESS_HOURS),
            ([_appointment("2024-11-25 09:10", AppointmentType.SHORT)], UnavailableReason.OFF_GRID),
        ],
    )
    def test_constructor_validates_given_appointments(self, appointments, reason):
        """A store cannot be built around overlapping or out-of-hours bookings."""
        with pytest.raises(SlotUnavailable) as excinfo:
            BookingStore(BusinessHours(), appointments)

        assert excinfo.value.reason is reason

    def test_overlap_raises_with_conflict(self):
        store = BookingStore(BusinessHours())
        existing = store.add(_appointment("2024-11-25 09:00", AppointmentType.MEDIUM))

        with pytest.raises(SlotUnavailable) as excinfo:
            store.add(_appointment("2024-11-25 09:15", AppointmentType.SHORT))

        assert excinfo.value.reason is UnavailableReason.OVERLAP
        assert excinfo.value.conflict == existing
        assert len(store) == 1

    def test_longer_appointment_overlapping_later_booking_raises(self):
        """A new booking that runs into an existing one is rejected too."""
        store = BookingStore(BusinessHours())
        store.add(_appointment("2024-11-25 09:30", AppointmentType.SHORT))

        with pytest.raises(SlotUnavailable) as excinfo:
            store.add(_appointment("2024-11-25 08:30", AppointmentType.LONG))

        assert excinfo.value.reason is UnavailableReason.OVERLAP

    def test_adjacent_appointments_are_allowed(self):
        store = BookingStore(BusinessHours())
        store.add(_appointment("2024-11-25 09:00", AppointmentType.MEDIUM))

        store.add(_appointment("2024-11-25 09:30", AppointmentType.SHORT))
        store.add(_appointment("2024-11-25 08:45", AppointmentType.SHORT))

        assert len(store) == 3

    @pytest.mark.parametrize(
        "start, appointment_type",
        [
            ("2024-11-25 11:45", AppointmentType.MEDIUM),  # straddles lunch
            ("2024-11-25 16:00", AppointmentType.LONG),  # runs past closing
            ("2024-11-25 07:45", AppointmentType.SHORT),  # before opening
            ("2024-11-23 09:00", AppointmentType.SHORT),  # Saturday
        ],
    )
    def test_outside_business_hours_raises(self, start, appointment_type):
        store = BookingStore(BusinessHours())

        with pytest.raises(SlotUnavailable) as excinfo:
            store.add(_appointment(start, appointment_type))

        assert excinfo.value.reason is UnavailableReason.OUTSIDE_BUSINESS_HOURS
        assert len(store) == 0

    def test_off_grid_start_raises(self):
        store = BookingStore(BusinessHours())

        with pytest.raises(SlotUnavailable) as excinfo:
            store.add(_appointment("2024-11-25 09:10", AppointmentType.SHORT))

        assert excinfo.value.reason is UnavailableReason.OFF_GRID


class TestBookingStoreQueries:
    """Tests for read-only queries and removal."""

    def test_overlaps(self):
        store = BookingStore(BusinessHours())
        store.add(_appointment("2024-11-25 09:00", AppointmentType.MEDIUM))

        assert store.overlaps(TimeRange(start=_dt("2024-11-25 09:15"), end=_dt("2024-11-25 09:30")))
        assert not store.overlaps(TimeRange(start=_dt("2024-11-25 09:30"), end=_dt("2024-11-25 10:00")))
        assert not store.overlaps(TimeRange(start=_dt("2024-11-25 08:00"), end=_dt("2024-11-25 09:00")))

    def test_between(self):
        store = BookingStore(BusinessHours())
        store.add(_appointment("2024-11-25 09:00", AppointmentType.MEDIUM))
        store.add(_appointment("2024-11-26 09:00", AppointmentType.MEDIUM))

        found = store.between(DateRange(start=_dt("2024-11-26 00:00"), end=_dt("2024-11-27 00:00")))

        assert [a.start for a in found] == [_dt("2024-11-26 09:00")]

    def test_remove(self):
        store = BookingStore(BusinessHours())
        store.add(_appointment("2024-11-25 09:00", AppointmentType.MEDIUM))

        removed = store.remove(_dt("2024-11-25 09:00"))

        assert removed.appointment_type is AppointmentType.MEDIUM
        assert store.all() == []

    def test_remove_unknown_raises(self):
        store = BookingStore(BusinessHours())

        with pytest.raises(AppointmentNotFound) as excinfo:
            store.remove(_dt("2024-11-25 09:00"))

        assert excinfo.value.start == _dt("2024-11-25 09:00")

    def test_including_leaves_store_untouched(self):
        store = BookingStore(BusinessHours())
        store.add(_appointment("2024-11-25 09:00", AppointmentType.MEDIUM))

        hypothetical = store.including(_appointment("2024-11-25 10:00", AppointmentType.SHORT))

        assert len(store) == 1
        assert len(hypothetical) == 2
        assert hypothetical.overlaps(TimeRange(start=_dt("2024-11-25 10:00"), end=_dt("2024-11-25 10:15")))
