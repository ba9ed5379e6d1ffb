"""
Custom exceptions for the scheduling and booking services.
Raised in the services and translated to HTTP responses in the routers.
"""


class SchedulingError(Exception):
    """Base exception for all scheduling errors."""
    pass


class ConstraintLoadError(SchedulingError):
    """Raised when staff hours, blocks or bookings could not be read from the database."""
    pass


class StaffNotFoundError(SchedulingError):
    """Raised when the requested staff member does not exist or is inactive."""
    pass


class SlotUnavailableError(SchedulingError):
    """Raised when the requested start time is no longer open for the staff member."""

    def __init__(self, message: str, reason: str = None):
        super().__init__(message)
        self.reason = reason


class BookingNotFoundError(SchedulingError):
    """Raised when a booking (or booking group) does not exist."""
    pass


class InvalidBookingRequestError(SchedulingError):
    """Raised when a booking request cannot be satisfied as specified (unknown service, wrong provider)."""
    pass


class WaitlistEntryStateError(SchedulingError):
    """Raised when a waitlist entry is not in a state that allows the requested action."""
    pass
