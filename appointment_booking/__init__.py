"""
Appointment booking - free slot search and optimization for a practice calendar.
"""

__version__ = "0.1.0"
