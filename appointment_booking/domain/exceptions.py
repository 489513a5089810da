"""
Domain-specific exception hierarchy for the appointment booking application.

Every error carries structured context (the offending value, appointment or
path) so callers can build their own messages.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pendulum import DateTime

    from .models import Appointment


class UnavailableReason(str, Enum):
    """Why a requested appointment could not be committed."""

    OVERLAP = "overlap"
    OUTSIDE_BUSINESS_HOURS = "outside_business_hours"
    OFF_GRID = "off_grid"


class BookingError(Exception):
    """Base class for all application-level errors."""


class InvalidDate(BookingError):
    """Raised for malformed, naive or reversed dates and date ranges."""

    def __init__(self, message: str, *, value: Any = None) -> None:
        super().__init__(message)
        self.value = value


class SlotUnavailable(BookingError):
    """Raised when an appointment cannot be placed on the calendar."""

    def __init__(
        self,
        appointment: "Appointment",
        reason: UnavailableReason,
        conflict: "Appointment | None" = None,
    ) -> None:
        self.appointment = appointment
        self.reason = reason
        self.conflict = conflict
        super().__init__(self._describe())

    def _describe(self) -> str:
        target = self.appointment.format_display()
        if self.reason is UnavailableReason.OVERLAP and self.conflict is not None:
            return f"{target} overlaps existing appointment {self.conflict.format_display()}"
        if self.reason is UnavailableReason.OUTSIDE_BUSINESS_HOURS:
            return f"{target} is not within business hours"
        if self.reason is UnavailableReason.OFF_GRID:
            return f"{target} does not start on a 15 minute boundary"
        return f"{target} is unavailable ({self.reason.value})"


class InvalidAppointmentType(BookingError):
    """Raised when a value does not name a known appointment type."""

    def __init__(self, value: Any) -> None:
        super().__init__(f"Unknown appointment type: {value!r}")
        self.value = value


class AppointmentNotFound(BookingError):
    """Raised when cancelling an appointment that is not booked."""

    def __init__(self, start: "DateTime") -> None:
        super().__init__(f"No appointment starts at {start.format('YYYY-MM-DD HH:mm')}")
        self.start = start


class StorageError(BookingError):
    """Raised when persisted appointments cannot be read or written."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
