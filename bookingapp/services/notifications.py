"""
Notification and event hand-off.

Delivery (email, SMS, push) happens outside this service; here we only record
booking events in the outbox table and log what would be sent.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from bookingapp.db.models.booking import Booking
from bookingapp.db.models.event import BookingEvent
from bookingapp.db.models.waitlist import WaitlistEntry

logger = logging.getLogger(__name__)


def record_event(db: Session, event_type: str, booking_id: Optional[int] = None, payload: Optional[dict] = None) -> BookingEvent:
    """Add an outbox row in the caller's transaction; the caller commits."""
    event = BookingEvent(booking_id=booking_id, event_type=event_type, payload=payload or {})
    db.add(event)
    return event


def send_booking_confirmation(booking: Booking, recipient: Optional[str] = None) -> None:
    recipient = recipient or (booking.customer.email if booking.customer else None)
    if not recipient:
        logger.info(f"Booking {booking.id} confirmed, no recipient on file")
        return
    logger.info(
        f"Queued confirmation for booking {booking.id} to {recipient}: "
        f"{booking.booking_date} {booking.start_time.strftime('%H:%M')}"
    )


def send_waitlist_notification(entry: WaitlistEntry) -> None:
    recipient = entry.customer_email or entry.customer_phone
    if not recipient:
        logger.info(f"Waitlist entry {entry.id} has no contact details, nothing sent")
        return
    logger.info(f"Queued waitlist availability notice for entry {entry.id} to {recipient}")
