"""
Domain layer - Pure scheduling logic without external dependencies.
"""

from .booking_store import BookingStore
from .calendar_grid import BusinessHours
from .exceptions import (
    AppointmentNotFound,
    BookingError,
    InvalidAppointmentType,
    InvalidDate,
    SlotUnavailable,
    StorageError,
    UnavailableReason,
)
from .models import Appointment, AppointmentType, DateRange, TimeRange
from .slot_finder import free_slots
from .slot_optimizer import free_slots_optimized, long_capacity

__all__ = [
    "Appointment",
    "AppointmentNotFound",
    "AppointmentType",
    "BookingError",
    "BookingStore",
    "BusinessHours",
    "DateRange",
    "InvalidAppointmentType",
    "InvalidDate",
    "SlotUnavailable",
    "StorageError",
    "TimeRange",
    "UnavailableReason",
    "free_slots",
    "free_slots_optimized",
    "long_capacity",
]
