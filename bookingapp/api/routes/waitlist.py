# bookingapp/api/routes/waitlist.py
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from bookingapp.api.deps import get_provider_or_404, can_act_for_provider, require_provider_permission, scheduling_http_error
from bookingapp.core.permissions import MANAGE_WAITLIST
from bookingapp.core.security import get_current_user
from bookingapp.db.base import get_db
from bookingapp.db.models.service import Service
from bookingapp.db.models.staff import Staff
from bookingapp.db.models.user import User
from bookingapp.db.models.waitlist import WaitlistEntry
from bookingapp.schemas.booking import BookingResponse
from bookingapp.schemas.waitlist import (
    QuickBookRequest,
    WaitlistEntryCreate,
    WaitlistEntryResponse,
    WaitlistMatchResponse,
)
from bookingapp.services import bookings as booking_service
from bookingapp.services.scheduling import WaitlistFilter, find_waitlist_matches
from bookingapp.services.scheduling.exceptions import SchedulingError

router = APIRouter(prefix="/waitlist", tags=["waitlist"])

WAITLIST_STATUSES = ("waiting", "contacted", "booked", "cancelled")


def _get_entry(db: Session, entry_id: int) -> WaitlistEntry:
    entry = db.query(WaitlistEntry).filter(WaitlistEntry.id == entry_id).first()
    if not entry:
        raise HTTPException(status_code=404, detail="Waitlist entry not found")
    return entry


@router.post("", response_model=WaitlistEntryResponse)
def add_to_waitlist(
    payload: WaitlistEntryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    provider = get_provider_or_404(db, payload.provider_id)

    if current_user.role != "customer" and not can_act_for_provider(db, provider, current_user, MANAGE_WAITLIST):
        raise HTTPException(status_code=403, detail="Not allowed for this provider")

    if payload.service_id is not None:
        service = db.query(Service).filter(Service.id == payload.service_id).first()
        if not service or service.provider_id != provider.id:
            raise HTTPException(status_code=400, detail="Unknown service for this provider")
    if payload.staff_id is not None:
        staff = db.query(Staff).filter(Staff.id == payload.staff_id).first()
        if not staff or staff.provider_id != provider.id:
            raise HTTPException(status_code=400, detail="Unknown staff for this provider")

    entry = WaitlistEntry(
        customer_id=current_user.id if current_user.role == "customer" else None,
        status="waiting",
        **payload.model_dump(),
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


@router.get("", response_model=List[WaitlistEntryResponse])
def list_waitlist(
    provider_id: int = Query(...),
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_provider_permission(db, provider_id, current_user, MANAGE_WAITLIST)
    if status and status not in WAITLIST_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")

    query = db.query(WaitlistEntry).filter(WaitlistEntry.provider_id == provider_id)
    if status:
        query = query.filter(WaitlistEntry.status == status)
    return query.order_by(WaitlistEntry.priority.desc(), WaitlistEntry.created_at.asc(), WaitlistEntry.id.asc()).all()


@router.get("/matches", response_model=List[WaitlistMatchResponse])
def waitlist_matches(
    provider_id: int = Query(...),
    date: Optional[str] = Query(None, description="date in YYYY-MM-DD"),
    staff_id: Optional[int] = Query(None),
    max_matches: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_provider_permission(db, provider_id, current_user, MANAGE_WAITLIST)

    target_date = None
    if date:
        try:
            target_date = datetime.strptime(date, "%Y-%m-%d").date()
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid date format, use YYYY-MM-DD")

    matches = find_waitlist_matches(
        db, provider_id, WaitlistFilter(date=target_date, staff_id=staff_id, max_matches=max_matches)
    )
    return [
        WaitlistMatchResponse(
            entry_id=m.entry_id,
            customer_name=m.customer_name,
            priority=m.priority,
            created_at=m.created_at,
            date=m.date,
            staff_id=m.staff_id,
            service_id=m.service_id,
            slots=m.slots,
        )
        for m in matches
    ]


@router.delete("/{entry_id}", response_model=WaitlistEntryResponse)
def remove_from_waitlist(
    entry_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    entry = _get_entry(db, entry_id)
    if entry.customer_id != current_user.id:
        require_provider_permission(db, entry.provider_id, current_user, MANAGE_WAITLIST)

    if entry.status == "booked":
        raise HTTPException(status_code=409, detail="Waitlist entry is already booked")

    entry.status = "cancelled"
    db.commit()
    db.refresh(entry)
    return entry


@router.post("/{entry_id}/notify", response_model=WaitlistEntryResponse)
def notify_entry(
    entry_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    entry = _get_entry(db, entry_id)
    require_provider_permission(db, entry.provider_id, current_user, MANAGE_WAITLIST)
    try:
        return booking_service.notify_waitlist_entry(db, entry)
    except SchedulingError as e:
        raise scheduling_http_error(e)


@router.post("/{entry_id}/quick-book", response_model=BookingResponse)
def quick_book(
    entry_id: int,
    payload: QuickBookRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    entry = _get_entry(db, entry_id)
    require_provider_permission(db, entry.provider_id, current_user, MANAGE_WAITLIST)
    try:
        return booking_service.quick_book_waitlist_entry(
            db,
            entry,
            payload.start_time,
            booking_date=payload.booking_date,
            staff_id=payload.staff_id,
            service_id=payload.service_id,
        )
    except SchedulingError as e:
        raise scheduling_http_error(e)
