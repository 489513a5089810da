"""
Domain models for appointments, time ranges and query ranges.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List

import pendulum
from pendulum import DateTime

from .exceptions import InvalidAppointmentType, InvalidDate

# Atomic scheduling unit; every appointment boundary is a multiple of it.
QUANTUM_MINUTES = 15

INSTANT_FORMATS = ("YYYY-MM-DD HH:mm", "YYYY-MM-DD")


class AppointmentType(str, Enum):
    """
    The fixed catalogue of appointment kinds offered by the practice.
    """
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"

    @property
    def duration_minutes(self) -> int:
        return _DURATIONS[self]

    @property
    def quanta(self) -> int:
        """Duration in 15 minute quanta."""
        return self.duration_minutes // QUANTUM_MINUTES

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, value: object) -> "AppointmentType":
        """
        Resolve a member name, display alias or minute count to a type.

        Raises:
            InvalidAppointmentType: If the value matches no type
        """
        if isinstance(value, cls):
            return value

        key = str(value).strip().lower()
        for member in cls:
            if key == member.value or key == str(member.duration_minutes):
                return member
            if key in _ALIASES[member]:
                return member

        raise InvalidAppointmentType(value)


_DURATIONS = {
    AppointmentType.SHORT: 15,
    AppointmentType.MEDIUM: 30,
    AppointmentType.LONG: 90,
}

_DISPLAY_NAMES = {
    AppointmentType.SHORT: "Urgent Appointment",
    AppointmentType.MEDIUM: "Check-up",
    AppointmentType.LONG: "Implant Consultation",
}

_ALIASES = {
    AppointmentType.SHORT: {"urgent", "urgent appointment"},
    AppointmentType.MEDIUM: {"check-up", "checkup"},
    AppointmentType.LONG: {"implant", "implant consultation"},
}


def parse_instant(text: str, tz: str) -> DateTime:
    """
    Parse ``YYYY-MM-DD HH:mm`` (or a bare ``YYYY-MM-DD``) in the given timezone.

    Raises:
        InvalidDate: If the text matches none of the accepted formats
    """
    cleaned = text.strip()
    for fmt in INSTANT_FORMATS:
        try:
            return pendulum.from_format(cleaned, fmt, tz=tz)
        except ValueError:
            continue

    raise InvalidDate(
        f"Cannot parse '{text}', expected YYYY-MM-DD HH:MM",
        value=text,
    )


def format_interval(start: DateTime, end: DateTime) -> str:
    """
    Format an interval for display.
    Format: Weekday, DD.MM.YYYY | HH:MM – HH:MM (N min)
    """
    minutes = int((end - start).total_seconds() // 60)
    return (
        f"{start.format('dddd, DD.MM.YYYY')} | "
        f"{start.format('HH:mm')} – {end.format('HH:mm')} ({minutes} min)"
    )


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable half-open time range [start, end).

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another."""
        return self.start < other.end and self.end > other.start

    def contains(self, other: "TimeRange") -> bool:
        """Check if another range lies completely inside this one."""
        return self.start <= other.start and other.end <= self.end

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class DateRange:
    """
    Half-open query range bounding slot start instants.

    Unlike ``TimeRange`` an empty range (start == end) is allowed.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        for instant in (self.start, self.end):
            if instant.tzinfo is None:
                raise InvalidDate(f"Instant {instant} has no timezone", value=instant)
        if self.start > self.end:
            raise InvalidDate(
                f"Range start {self.start} is after range end {self.end}",
                value=(self.start, self.end),
            )

    @classmethod
    def parse(cls, start_text: str, end_text: str, tz: str) -> "DateRange":
        return cls(start=parse_instant(start_text, tz), end=parse_instant(end_text, tz))

    def contains(self, instant: DateTime) -> bool:
        return self.start <= instant < self.end

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('DD.MM.YYYY HH:mm')}"


@dataclass(frozen=True)
class Appointment:
    """
    A committed booking. The end is derived from the appointment type.
    """
    start: DateTime
    appointment_type: AppointmentType

    @property
    def end(self) -> DateTime:
        return self.start.add(minutes=self.appointment_type.duration_minutes)

    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end)

    def reserved_quanta(self) -> List[DateTime]:
        """Return the start of every 15 minute quantum this appointment occupies."""
        return [
            self.start.add(minutes=QUANTUM_MINUTES * index)
            for index in range(self.appointment_type.quanta)
        ]

    def format_display(self) -> str:
        return f"{format_interval(self.start, self.end)} {self.appointment_type.display_name}"
