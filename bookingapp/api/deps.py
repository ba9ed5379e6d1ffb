# bookingapp/api/deps.py
"""Shared router helpers: provider access checks and scheduling error translation."""
from fastapi import HTTPException
from sqlalchemy.orm import Session

from bookingapp.core.permissions import has_permission
from bookingapp.db.models.provider import Provider
from bookingapp.db.models.staff import Staff
from bookingapp.db.models.user import User
from bookingapp.services.scheduling.exceptions import (
    BookingNotFoundError,
    ConstraintLoadError,
    InvalidBookingRequestError,
    SchedulingError,
    SlotUnavailableError,
    StaffNotFoundError,
    WaitlistEntryStateError,
)


def get_provider_or_404(db: Session, provider_id: int) -> Provider:
    provider = db.query(Provider).filter(Provider.id == provider_id).first()
    if not provider:
        raise HTTPException(status_code=404, detail="Provider not found")
    return provider


def get_staff_or_404(db: Session, staff_id: int) -> Staff:
    staff = db.query(Staff).filter(Staff.id == staff_id).first()
    if not staff:
        raise HTTPException(status_code=404, detail="Staff not found")
    return staff


def can_act_for_provider(db: Session, provider: Provider, user: User, permission: str) -> bool:
    """Admins and the owning user always can; staff accounts need the permission."""
    if user.role == "admin" or provider.owner_id == user.id:
        return True
    staff = db.query(Staff).filter(Staff.provider_id == provider.id, Staff.user_id == user.id).first()
    return has_permission(staff, permission)


def require_provider_permission(db: Session, provider_id: int, user: User, permission: str) -> Provider:
    provider = get_provider_or_404(db, provider_id)
    if not can_act_for_provider(db, provider, user, permission):
        raise HTTPException(status_code=403, detail="Not allowed for this provider")
    return provider


def scheduling_http_error(e: SchedulingError) -> HTTPException:
    if isinstance(e, (StaffNotFoundError, BookingNotFoundError)):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, SlotUnavailableError):
        detail = f"Slot unavailable: {e.reason}" if e.reason else "Slot unavailable"
        return HTTPException(status_code=409, detail=detail)
    if isinstance(e, WaitlistEntryStateError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, ConstraintLoadError):
        return HTTPException(status_code=500, detail="Failed to verify availability")
    if isinstance(e, InvalidBookingRequestError):
        return HTTPException(status_code=400, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))
