"""
Reduces the free slot list to one offering per 60 minute window.

Patients do not care where inside an hour their appointment lands, so for
every window the optimizer offers the start that keeps the most room for
long appointments in the surrounding business interval.

Algorithm:
1. Group the free slots by the hour they start in
2. For each candidate, provisionally book it and count how many
   non-overlapping long appointments still fit in its business interval
3. Keep the candidate with the highest count; ties go to the earliest
"""

import logging
from typing import Dict, List

from pendulum import DateTime

from .booking_store import BookingStore
from .calendar_grid import BusinessHours
from .models import Appointment, AppointmentType, DateRange, TimeRange
from .slot_finder import free_slots

logger = logging.getLogger(__name__)


def long_capacity(
    store: BookingStore,
    interval: TimeRange,
    hypothetical: Appointment | None = None,
) -> int:
    """
    Count the independent long appointments that fit in an interval.

    The optional hypothetical appointment is treated as booked; the store
    itself is never modified.
    """
    if hypothetical is not None:
        store = store.including(hypothetical)

    starts = free_slots(
        DateRange(start=interval.start, end=interval.end),
        AppointmentType.LONG,
        store.business_hours,
        store,
    )

    # Greedy earliest-first packing is optimal for equal-length intervals
    count = 0
    next_free: DateTime | None = None
    for start in starts:
        if next_free is None or start >= next_free:
            count += 1
            next_free = start.add(minutes=AppointmentType.LONG.duration_minutes)

    return count


def group_by_window(slots: List[DateTime]) -> Dict[DateTime, List[DateTime]]:
    """Group slot starts by the hour-aligned window they fall into."""
    windows: Dict[DateTime, List[DateTime]] = {}
    for slot in slots:
        windows.setdefault(slot.start_of("hour"), []).append(slot)
    return windows


def free_slots_optimized(
    date_range: DateRange,
    appointment_type: AppointmentType,
    business_hours: BusinessHours,
    store: BookingStore,
) -> List[DateTime]:
    """
    Return the free slots filtered to at most one per 60 minute window.

    Long requests are returned unchanged: a window can never hold two of
    them side by side, so there is nothing to choose between.
    """
    slots = free_slots(date_range, appointment_type, business_hours, store)

    if appointment_type is AppointmentType.LONG:
        return slots

    optimized: List[DateTime] = []

    for window_start, candidates in group_by_window(slots).items():
        if len(candidates) == 1:
            optimized.append(candidates[0])
            continue

        best_slot = candidates[0]
        best_count = -1

        for candidate in candidates:
            interval = business_hours.interval_containing(candidate)
            if interval is None:
                continue
            count = long_capacity(
                store,
                interval,
                hypothetical=Appointment(start=candidate, appointment_type=appointment_type),
            )
            # Strictly greater keeps the earliest candidate on ties
            if count > best_count:
                best_slot = candidate
                best_count = count

        logger.debug(
            "Window %s: picked %s out of %d candidates (long capacity %d)",
            window_start.format("YYYY-MM-DD HH:mm"),
            best_slot.format("HH:mm"),
            len(candidates),
            best_count,
        )
        optimized.append(best_slot)

    return optimized
