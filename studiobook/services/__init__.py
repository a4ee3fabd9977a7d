"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .scheduler import AppointmentStoreProtocol, DayView, SchedulerService

__all__ = ["AppointmentStoreProtocol", "DayView", "SchedulerService"]
