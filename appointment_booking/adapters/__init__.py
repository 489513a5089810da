"""
Adapters layer - Persistence of booked appointments.
"""

from .json_store import JsonAppointmentRepository

__all__ = ["JsonAppointmentRepository"]
