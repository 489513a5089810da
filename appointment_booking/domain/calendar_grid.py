"""
Business hours and the 15 minute calendar grid.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import List, Tuple

import pendulum
from pendulum import DateTime

from .exceptions import InvalidDate
from .models import QUANTUM_MINUTES, DateRange, TimeRange

# 08:00 to 12:00 and 13:00 to 17:00
DEFAULT_INTERVALS: Tuple[Tuple[time, time], ...] = (
    (time(8, 0), time(12, 0)),
    (time(13, 0), time(17, 0)),
)

# Business days are Monday to Friday
DEFAULT_EXCLUDED_WEEKDAYS: Tuple[int, ...] = (5, 6)


@dataclass
class BusinessHours:
    """
    Configuration for business hours.

    ``intervals`` are the daily open blocks in chronological order;
    anything between them (the lunch gap) is closed.
    """
    intervals: List[Tuple[time, time]] = field(default_factory=lambda: list(DEFAULT_INTERVALS))
    exclude_weekdays: List[int] = field(default_factory=lambda: list(DEFAULT_EXCLUDED_WEEKDAYS))  # 0=Monday, 6=Sunday
    timezone: str = "Europe/Berlin"

    def _as_datetime(self, value: date | datetime) -> DateTime:
        if isinstance(value, datetime):
            return pendulum.instance(value, tz=self.timezone).in_timezone(self.timezone)
        if isinstance(value, date):
            return pendulum.datetime(value.year, value.month, value.day, tz=self.timezone)
        raise InvalidDate(f"Expected a date or datetime, got {value!r}", value=value)

    def is_working_day(self, day: date | datetime) -> bool:
        """Check if a given date falls on a business day."""
        return self._as_datetime(day).weekday() not in self.exclude_weekdays

    def business_intervals(self, day: date | datetime) -> List[TimeRange]:
        """
        Get the open intervals for a specific day.
        Returns an empty list if it's not a business day.
        """
        current = self._as_datetime(day)

        if not self.is_working_day(current):
            return []

        return [
            TimeRange(
                start=current.set(hour=opens.hour, minute=opens.minute, second=0, microsecond=0),
                end=current.set(hour=closes.hour, minute=closes.minute, second=0, microsecond=0),
            )
            for opens, closes in self.intervals
        ]

    def intervals_between(self, date_range: DateRange) -> List[TimeRange]:
        """
        Collect every full business interval that overlaps the date range.

        Intervals are returned unclipped so callers can reason about the
        whole open block around a query.
        """
        blocks: List[TimeRange] = []

        current = date_range.start.in_timezone(self.timezone).start_of("day")

        while current < date_range.end:
            for interval in self.business_intervals(current):
                if interval.end > date_range.start and interval.start < date_range.end:
                    blocks.append(interval)
            current = current.add(days=1)

        return blocks

    def interval_containing(self, instant: datetime) -> TimeRange | None:
        """Return the open interval that contains the instant, if any."""
        current = self._as_datetime(instant)
        for interval in self.business_intervals(current):
            if interval.start <= current < interval.end:
                return interval
        return None

    def is_working_instant(self, instant: datetime) -> bool:
        return self.interval_containing(instant) is not None

    def contains(self, time_range: TimeRange) -> bool:
        """Check that a range sits inside a single open interval."""
        interval = self.interval_containing(time_range.start)
        return interval is not None and interval.contains(time_range)

    def quantize(self, instant: datetime) -> DateTime:
        """Round up to the next 15 minute boundary (unchanged if already on one)."""
        current = self._as_datetime(instant)
        floored = current.set(
            minute=current.minute - current.minute % QUANTUM_MINUTES,
            second=0,
            microsecond=0,
        )
        if floored == current:
            return floored
        return floored.add(minutes=QUANTUM_MINUTES)

    @staticmethod
    def is_quantized(instant: datetime) -> bool:
        return instant.minute % QUANTUM_MINUTES == 0 and instant.second == 0 and instant.microsecond == 0

    def quanta(self, date_range: DateRange) -> List[DateTime]:
        """List every open quantum start inside the date range."""
        result: List[DateTime] = []
        first = self.quantize(date_range.start)

        for interval in self.intervals_between(date_range):
            current = max(interval.start, first)
            while current < interval.end and current < date_range.end:
                result.append(current)
                current = current.add(minutes=QUANTUM_MINUTES)

        return result

    def next_working_instant(self, instant: datetime) -> DateTime:
        """
        Return the first open quantum at or after the instant.

        Raises:
            ValueError: If no business day exists within the next week
        """
        current = self.quantize(instant)
        if self.is_working_instant(current):
            return current

        day = current.start_of("day")
        for _ in range(8):
            for interval in self.business_intervals(day):
                if interval.start >= current:
                    return interval.start
            day = day.add(days=1)

        raise ValueError("Business hours contain no open interval")
