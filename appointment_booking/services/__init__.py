"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .booking_service import (
    AppointmentRepositoryProtocol,
    BookingService,
    next_week_range,
    this_week_range,
)

__all__ = [
    "AppointmentRepositoryProtocol",
    "BookingService",
    "next_week_range",
    "this_week_range",
]
