"""
Domain-specific exception hierarchy for the studiobook application.
"""


class StudioBookError(Exception):
    """Base class for all application-level errors."""


class ValidationError(StudioBookError):
    """Raised when a submitted appointment or service form is incomplete or malformed."""


class SlotConflictError(StudioBookError):
    """Raised when a time slot is already taken by another appointment."""

    def __init__(self, date: str, time: str):
        super().__init__(f"Slot {date} {time} is already booked")
        self.date = date
        self.time = time


class BundleLimitError(StudioBookError):
    """Raised when a service bundle would exceed its maximum size."""


class AppointmentNotFoundError(StudioBookError):
    """Raised when an appointment id does not exist in the store."""


class ServiceNotFoundError(StudioBookError):
    """Raised when a service id does not exist in the store."""


class StoreError(StudioBookError):
    """Raised when the persistence backend cannot be read or written."""


class MessagingError(StudioBookError):
    """Raised when an outbound message cannot be prepared."""
