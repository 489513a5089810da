"""
Enumerates bookable start times for an appointment type.

Candidates are tried on every 15 minute quantum; the appointment duration
only decides how far ahead each candidate must stay free.
"""

from typing import List

from pendulum import DateTime

from .booking_store import BookingStore
from .calendar_grid import BusinessHours
from .models import QUANTUM_MINUTES, AppointmentType, DateRange, TimeRange


def free_slots(
    date_range: DateRange,
    appointment_type: AppointmentType,
    business_hours: BusinessHours,
    store: BookingStore,
) -> List[DateTime]:
    """
    Find every start time where the appointment fits.

    Args:
        date_range: Half-open range bounding the start instants
        appointment_type: Requested appointment type
        business_hours: Calendar grid with the open intervals
        store: Already booked appointments

    Returns:
        Chronologically ordered start instants. The appointment starting at
        each lies inside one business interval and overlaps no booking.
    """
    slots: List[DateTime] = []
    first_start = business_hours.quantize(date_range.start)

    for interval in business_hours.intervals_between(date_range):
        last_start = interval.end.subtract(minutes=appointment_type.duration_minutes)
        current = max(interval.start, first_start)

        # Closing time minus duration may fall before opening; loop is then empty
        while current <= last_start and current < date_range.end:
            candidate = TimeRange(
                start=current,
                end=current.add(minutes=appointment_type.duration_minutes),
            )
            if not store.overlaps(candidate):
                slots.append(current)
            current = current.add(minutes=QUANTUM_MINUTES)

    return slots
