"""
Booking flows: pure business logic, no HTTP/request awareness.

Public API:
  create_booking(db, customer, provider_id, staff_id, service_ids, booking_date, start_time, ...)
  reschedule_booking(db, booking_id, booking_date, start_time, staff_id=None)
  reschedule_group(db, group_booking_id, booking_date, start_time)
  cancel_booking(db, booking)
  quick_book_waitlist_entry(db, entry, start_time, booking_date=None, staff_id=None, service_id=None)
  notify_waitlist_entry(db, entry)

Every requested time is re-checked against freshly loaded constraints before
rows are written. There is no lock between that check and the insert, so two
concurrent requests for the same time can both pass; the database write is
the only point of conflict resolution.
"""
import logging
from datetime import date as date_type, time as time_type
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bookingapp.core.config import get_settings
from bookingapp.db.models.booking import Booking, BookingService, INACTIVE_BOOKING_STATUSES
from bookingapp.db.models.service import Service
from bookingapp.db.models.staff import Staff
from bookingapp.db.models.user import User
from bookingapp.db.models.waitlist import WaitlistEntry, OPEN_WAITLIST_STATUSES
from bookingapp.services.notifications import (
    record_event,
    send_booking_confirmation,
    send_waitlist_notification,
)
from bookingapp.services.scheduling.constraints import load_constraints
from bookingapp.services.scheduling.exceptions import (
    BookingNotFoundError,
    InvalidBookingRequestError,
    SchedulingError,
    SlotUnavailableError,
    StaffNotFoundError,
    WaitlistEntryStateError,
)
from bookingapp.services.scheduling.slots import check_slot
from bookingapp.services.scheduling.timeutils import minutes_to_time, time_to_minutes
from bookingapp.services.scheduling.types import SlotOptions, WaitlistFilter
from bookingapp.services.scheduling.waitlist import find_waitlist_matches

logger = logging.getLogger(__name__)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _get_staff(db: Session, provider_id: int, staff_id: int) -> Staff:
    staff = db.query(Staff).filter(Staff.id == staff_id).first()
    if not staff or not staff.is_active or staff.provider_id != provider_id:
        raise StaffNotFoundError(f"Staff {staff_id} is not available at this provider")
    return staff


def _get_services(db: Session, provider_id: int, service_ids: Sequence[int]) -> List[Service]:
    if not service_ids:
        raise InvalidBookingRequestError("At least one service is required")

    services = []
    for service_id in service_ids:
        service = db.query(Service).filter(Service.id == service_id).first()
        if not service or not service.is_active or service.provider_id != provider_id:
            raise InvalidBookingRequestError(f"Service {service_id} is not offered by this provider")
        services.append(service)
    return services


def _booking_span(booking: Booking) -> int:
    """Minutes a booking keeps its staff busy, from first service start to last recovery minute."""
    if not booking.services:
        return time_to_minutes(booking.end_time) - time_to_minutes(booking.start_time)
    return sum(line.service.total_minutes for line in booking.services)


def _ensure_slot_open(
    db: Session,
    staff_id: int,
    booking_date: date_type,
    start_time: time_type,
    total_minutes: int,
    travel_buffer: int = 0,
    exclude_booking_ids: Sequence[int] = (),
) -> None:
    """
    Raises SlotUnavailableError if the staff member cannot take this time.

    Applies the provider's own gap policy so a start hidden from /availability
    cannot be booked directly.
    """
    staff = db.query(Staff).filter(Staff.id == staff_id).first()
    provider = staff.provider if staff else None
    constraints = load_constraints(db, staff_id, booking_date, exclude_booking_ids)
    slot = check_slot(
        constraints,
        time_to_minutes(start_time),
        total_minutes,
        SlotOptions(
            avoid_gaps=bool(provider and provider.avoid_gaps),
            travel_buffer=travel_buffer,
        ),
    )
    if not slot.available:
        logger.info(f"Slot {booking_date} {slot.time} unavailable for staff {staff_id}: {slot.reason}")
        raise SlotUnavailableError(
            f"The requested time {slot.time} on {booking_date} is no longer available",
            reason=slot.reason,
        )


def _lay_out_services(booking: Booking, services: List[Service], staff_id: int, start_minutes: int) -> None:
    """Stack services back to back; each one starts after the previous one's buffer and finishing time."""
    cursor = start_minutes
    for service in services:
        booking.services.append(BookingService(
            service_id=service.id,
            staff_id=staff_id,
            start_time=minutes_to_time(cursor),
            end_time=minutes_to_time(cursor + service.duration_minutes),
        ))
        cursor += service.total_minutes


# ── Booking creation ──────────────────────────────────────────────────────────

def create_booking(
    db: Session,
    customer: Optional[User],
    provider_id: int,
    staff_id: int,
    service_ids: Sequence[int],
    booking_date: date_type,
    start_time: time_type,
    location_type: str = "at_salon",
    travel_buffer_minutes: Optional[int] = None,
    group_booking_id: Optional[str] = None,
) -> Booking:
    staff = _get_staff(db, provider_id, staff_id)
    services = _get_services(db, provider_id, service_ids)

    travel = 0
    if location_type == "at_home":
        travel = travel_buffer_minutes if travel_buffer_minutes is not None else get_settings().DEFAULT_TRAVEL_BUFFER

    total = sum(s.total_minutes for s in services)
    _ensure_slot_open(db, staff.id, booking_date, start_time, total, travel_buffer=travel)

    start_minutes = time_to_minutes(start_time)
    last = services[-1]
    booking = Booking(
        provider_id=provider_id,
        customer_id=customer.id if customer else None,
        staff_id=staff.id,
        group_booking_id=group_booking_id,
        booking_date=booking_date,
        start_time=start_time,
        end_time=minutes_to_time(start_minutes + total - last.total_minutes + last.duration_minutes),
        location_type=location_type,
        travel_buffer_minutes=travel,
        amount=sum(s.price for s in services),
        status="pending",
    )
    _lay_out_services(booking, services, staff.id, start_minutes)
    db.add(booking)
    db.flush()

    record_event(db, "booking.created", booking.id, {
        "source": "customer",
        "staff_id": staff.id,
        "date": booking_date.isoformat(),
        "start_time": start_time.strftime("%H:%M"),
    })
    db.commit()
    db.refresh(booking)

    logger.info(f"Booking {booking.id} created for staff {staff.id} on {booking_date} at {start_time}")
    send_booking_confirmation(booking)
    return booking


# ── Reschedule ────────────────────────────────────────────────────────────────

def _get_active_booking(db: Session, booking_id: int) -> Booking:
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        raise BookingNotFoundError(f"Booking {booking_id} not found")
    if booking.status in INACTIVE_BOOKING_STATUSES:
        raise InvalidBookingRequestError(f"Cannot reschedule a booking that is {booking.status}")
    return booking


def _move_booking(booking: Booking, booking_date: date_type, new_start: int, staff_id: Optional[int] = None) -> None:
    offset = new_start - time_to_minutes(booking.start_time)
    booking.booking_date = booking_date
    booking.start_time = minutes_to_time(new_start)
    booking.end_time = minutes_to_time(time_to_minutes(booking.end_time) + offset)
    if staff_id:
        booking.staff_id = staff_id
    for line in booking.services:
        line.start_time = minutes_to_time(time_to_minutes(line.start_time) + offset)
        line.end_time = minutes_to_time(time_to_minutes(line.end_time) + offset)
        if staff_id:
            line.staff_id = staff_id


def reschedule_booking(
    db: Session,
    booking_id: int,
    booking_date: date_type,
    start_time: time_type,
    staff_id: Optional[int] = None,
) -> Booking:
    booking = _get_active_booking(db, booking_id)
    target_staff = _get_staff(db, booking.provider_id, staff_id or booking.staff_id)

    _ensure_slot_open(
        db, target_staff.id, booking_date, start_time, _booking_span(booking),
        travel_buffer=booking.travel_buffer_minutes or 0,
        exclude_booking_ids=[booking.id],
    )

    previous = f"{booking.booking_date} {booking.start_time.strftime('%H:%M')}"
    _move_booking(booking, booking_date, time_to_minutes(start_time), target_staff.id)
    record_event(db, "booking.rescheduled", booking.id, {
        "from": previous,
        "to": f"{booking_date.isoformat()} {start_time.strftime('%H:%M')}",
        "staff_id": target_staff.id,
    })
    db.commit()
    db.refresh(booking)

    logger.info(f"Booking {booking.id} rescheduled from {previous} to {booking_date} {start_time}")
    return booking


def reschedule_group(db: Session, group_booking_id: str, booking_date: date_type, start_time: time_type) -> List[Booking]:
    """
    Move every active booking of a group together. The whole group's time
    is checked once against the first booking's staff member, then all
    members are shifted by the same offset in a single commit.
    """
    members = (
        db.query(Booking)
        .filter(
            Booking.group_booking_id == group_booking_id,
            Booking.status.notin_(INACTIVE_BOOKING_STATUSES),
        )
        .order_by(Booking.start_time, Booking.id)
        .all()
    )
    if not members:
        raise BookingNotFoundError(f"Booking group {group_booking_id} not found")

    first = members[0]
    total = sum(_booking_span(b) for b in members)
    travel = max(b.travel_buffer_minutes or 0 for b in members)

    _ensure_slot_open(
        db, first.staff_id, booking_date, start_time, total,
        travel_buffer=travel,
        exclude_booking_ids=[b.id for b in members],
    )

    offset = time_to_minutes(start_time) - time_to_minutes(first.start_time)
    for booking in members:
        _move_booking(booking, booking_date, time_to_minutes(booking.start_time) + offset)
        record_event(db, "booking.rescheduled", booking.id, {"group_booking_id": group_booking_id})
    db.commit()
    for booking in members:
        db.refresh(booking)

    logger.info(f"Group {group_booking_id} ({len(members)} bookings) moved to {booking_date} {start_time}")
    return members


# ── Cancellation ──────────────────────────────────────────────────────────────

def cancel_booking(db: Session, booking: Booking, cancelled_by: str = "customer") -> Booking:
    if booking.status in INACTIVE_BOOKING_STATUSES or booking.status == "completed":
        raise InvalidBookingRequestError(f"Cannot cancel booking because it is already {booking.status}")

    booking.status = "cancelled"
    record_event(db, "booking.cancelled", booking.id, {"cancelled_by": cancelled_by})
    db.commit()
    db.refresh(booking)
    logger.info(f"Booking {booking.id} cancelled by {cancelled_by}")

    # freed time may satisfy someone on the waitlist; never fail the cancellation over it
    try:
        matches = find_waitlist_matches(
            db,
            booking.provider_id,
            WaitlistFilter(
                date=booking.booking_date,
                staff_id=booking.staff_id,
                max_matches=get_settings().WAITLIST_MAX_MATCHES,
            ),
        )
        if matches:
            record_event(db, "waitlist.matches_available", booking.id, {
                "entry_ids": [m.entry_id for m in matches],
                "date": booking.booking_date.isoformat(),
                "staff_id": booking.staff_id,
            })
            db.commit()
    except (SchedulingError, SQLAlchemyError) as e:
        db.rollback()
        logger.error(f"Error matching waitlist after cancelling booking {booking.id}: {e}")

    return booking


# ── Waitlist actions ──────────────────────────────────────────────────────────

def _ensure_open(entry: WaitlistEntry) -> None:
    if entry.status not in OPEN_WAITLIST_STATUSES:
        raise WaitlistEntryStateError(f"Waitlist entry is already {entry.status}")


def quick_book_waitlist_entry(
    db: Session,
    entry: WaitlistEntry,
    start_time: time_type,
    booking_date: Optional[date_type] = None,
    staff_id: Optional[int] = None,
    service_id: Optional[int] = None,
) -> Booking:
    """
    Turn a waitlist entry into a confirmed booking at the chosen time.
    The time is taken as given by the operator; it is not re-validated here.
    """
    _ensure_open(entry)

    booking_date = booking_date or entry.preferred_date
    staff_id = staff_id or entry.staff_id
    service_id = service_id or entry.service_id
    if booking_date is None:
        raise InvalidBookingRequestError("A booking date is required for this waitlist entry")
    if staff_id is None:
        raise InvalidBookingRequestError("A staff member is required for this waitlist entry")
    if service_id is None:
        raise InvalidBookingRequestError("A service is required for this waitlist entry")

    staff = _get_staff(db, entry.provider_id, staff_id)
    service = _get_services(db, entry.provider_id, [service_id])[0]

    start_minutes = time_to_minutes(start_time)
    booking = Booking(
        provider_id=entry.provider_id,
        customer_id=entry.customer_id,
        staff_id=staff.id,
        booking_date=booking_date,
        start_time=start_time,
        end_time=minutes_to_time(start_minutes + service.duration_minutes),
        amount=service.price,
        status="confirmed",
    )
    _lay_out_services(booking, [service], staff.id, start_minutes)
    db.add(booking)
    db.flush()

    entry.status = "booked"
    entry.booking_id = booking.id
    record_event(db, "booking.created", booking.id, {
        "source": "waitlist",
        "waitlist_entry_id": entry.id,
        "staff_id": staff.id,
    })
    db.commit()
    db.refresh(booking)

    logger.info(f"Waitlist entry {entry.id} booked as booking {booking.id}")
    send_booking_confirmation(booking, recipient=entry.customer_email or entry.customer_phone)
    return booking


def notify_waitlist_entry(db: Session, entry: WaitlistEntry) -> WaitlistEntry:
    _ensure_open(entry)
    entry.status = "contacted"
    db.commit()
    db.refresh(entry)
    send_waitlist_notification(entry)
    return entry
