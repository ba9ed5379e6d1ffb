# bookingapp/db/models/__init__.py
from .user import User
from .provider import Provider
from .staff import Staff, CustomRole, staff_services
from .service import Service
from .availability import WorkHoursRule, ShiftOverride, TimeBlock
from .booking import Booking, BookingService
from .waitlist import WaitlistEntry
from .event import BookingEvent

__all__ = [
    "User",
    "Provider",
    "Staff",
    "CustomRole",
    "staff_services",
    "Service",
    "WorkHoursRule",
    "ShiftOverride",
    "TimeBlock",
    "Booking",
    "BookingService",
    "WaitlistEntry",
    "BookingEvent",
]
