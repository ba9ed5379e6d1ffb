from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from bookingapp.api.deps import can_act_for_provider, get_provider_or_404, require_provider_permission, scheduling_http_error
from bookingapp.core.permissions import MANAGE_BOOKINGS, VIEW_SCHEDULE
from bookingapp.core.security import get_current_user
from bookingapp.db.base import get_db
from bookingapp.db.models.booking import Booking
from bookingapp.db.models.user import User
from bookingapp.schemas.booking import BookingCreate, BookingReschedule, BookingResponse, GroupReschedule
from bookingapp.services import bookings as booking_service
from bookingapp.services.scheduling.exceptions import SchedulingError

router = APIRouter(prefix="/bookings", tags=["bookings"])


def _get_booking_for_user(db: Session, booking_id: int, user: User, permission: str) -> Booking:
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")

    if booking.customer_id == user.id:
        return booking
    provider = get_provider_or_404(db, booking.provider_id)
    if not can_act_for_provider(db, provider, user, permission):
        raise HTTPException(status_code=403, detail="Not your booking")
    return booking


# Customer creates booking

@router.post("", response_model=BookingResponse)
def create_booking(
    booking: BookingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if current_user.role != "customer":
        raise HTTPException(status_code=403, detail="Only customers can create bookings")

    get_provider_or_404(db, booking.provider_id)

    try:
        return booking_service.create_booking(
            db,
            current_user,
            provider_id=booking.provider_id,
            staff_id=booking.staff_id,
            service_ids=booking.service_ids,
            booking_date=booking.booking_date,
            start_time=booking.start_time,
            location_type=booking.location_type,
            travel_buffer_minutes=booking.travel_buffer_minutes,
            group_booking_id=booking.group_booking_id,
        )
    except SchedulingError as e:
        raise scheduling_http_error(e)


# Provider views their bookings for a day

@router.get("/provider/{provider_id}", response_model=List[BookingResponse])
def provider_bookings(
    provider_id: int,
    date: Optional[str] = Query(None, description="date in YYYY-MM-DD"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_provider_permission(db, provider_id, current_user, VIEW_SCHEDULE)

    query = db.query(Booking).filter(Booking.provider_id == provider_id)
    if date:
        try:
            target_date = datetime.strptime(date, "%Y-%m-%d").date()
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid date format, use YYYY-MM-DD")
        query = query.filter(Booking.booking_date == target_date)

    return query.order_by(Booking.booking_date, Booking.start_time).all()


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(booking_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _get_booking_for_user(db, booking_id, current_user, VIEW_SCHEDULE)


# Reschedule a single booking

@router.post("/{booking_id}/reschedule", response_model=BookingResponse)
def reschedule_booking(
    booking_id: int,
    payload: BookingReschedule,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    booking = _get_booking_for_user(db, booking_id, current_user, MANAGE_BOOKINGS)
    try:
        return booking_service.reschedule_booking(
            db, booking.id, payload.booking_date, payload.start_time, staff_id=payload.staff_id
        )
    except SchedulingError as e:
        raise scheduling_http_error(e)


# Reschedule every booking in a group together

@router.post("/groups/{group_booking_id}/reschedule", response_model=List[BookingResponse])
def reschedule_group(
    group_booking_id: str,
    payload: GroupReschedule,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    first = db.query(Booking).filter(Booking.group_booking_id == group_booking_id).first()
    if not first:
        raise HTTPException(status_code=404, detail="Booking group not found")
    require_provider_permission(db, first.provider_id, current_user, MANAGE_BOOKINGS)

    try:
        return booking_service.reschedule_group(db, group_booking_id, payload.booking_date, payload.start_time)
    except SchedulingError as e:
        raise scheduling_http_error(e)


# Cancel booking (customer or provider side)

@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    booking = _get_booking_for_user(db, booking_id, current_user, MANAGE_BOOKINGS)
    cancelled_by = "customer" if booking.customer_id == current_user.id else "provider"
    try:
        return booking_service.cancel_booking(db, booking, cancelled_by=cancelled_by)
    except SchedulingError as e:
        raise scheduling_http_error(e)
