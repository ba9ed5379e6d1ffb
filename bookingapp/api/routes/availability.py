# bookingapp/api/routes/availability.py
import logging
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from bookingapp.core.config import get_settings
from bookingapp.db.base import get_db
from bookingapp.db.models.service import Service
from bookingapp.db.models.staff import Staff
from bookingapp.schemas.availability import AvailabilityResponse
from bookingapp.services.scheduling import SlotOptions, calculate_available_slots, load_constraints
from bookingapp.services.scheduling.exceptions import ConstraintLoadError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/availability", tags=["availability"])


@router.get("", response_model=AvailabilityResponse)
def get_availability(
    date: str = Query(..., description="date in YYYY-MM-DD"),
    staff_id: Optional[str] = Query(None, description="staff id; 'any' is not aggregated"),
    mode: Literal["at_salon", "at_home"] = Query("at_salon"),
    duration: Optional[int] = Query(None, ge=1, description="minutes, ignored when service_id is given"),
    service_id: Optional[int] = Query(None),
    travel_buffer: Optional[int] = Query(None, ge=0, description="minutes of travel for at-home visits"),
    avoid_gaps: Optional[bool] = Query(None),
    include_unavailable: bool = Query(False),
    db: Session = Depends(get_db),
):
    """
    Returns bookable start times for one staff member on a date.
    Steps:
      - resolve the staff member's work windows, time blocks and bookings
      - walk each window at the provider's slot interval
      - drop starts that collide with bookings (plus buffers) or blocks
    """
    try:
        target_date = datetime.strptime(date, "%Y-%m-%d").date()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format, use YYYY-MM-DD")

    if not staff_id or staff_id == "any":
        return AvailabilityResponse(date=target_date, slots=[])

    try:
        staff_pk = int(staff_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid staff_id")

    staff = db.query(Staff).filter(Staff.id == staff_pk).first()
    if not staff:
        raise HTTPException(status_code=404, detail="Staff not found")
    provider = staff.provider

    settings = get_settings()
    if service_id is not None:
        service = db.query(Service).filter(Service.id == service_id).first()
        if not service or service.provider_id != staff.provider_id:
            raise HTTPException(status_code=404, detail="Service not found")
        total_minutes = service.total_minutes
    else:
        total_minutes = duration or settings.DEFAULT_SERVICE_DURATION

    travel = 0
    if mode == "at_home":
        travel = travel_buffer if travel_buffer is not None else settings.DEFAULT_TRAVEL_BUFFER

    options = SlotOptions(
        slot_interval=provider.slot_interval_minutes or settings.DEFAULT_SLOT_INTERVAL,
        avoid_gaps=provider.avoid_gaps if avoid_gaps is None else avoid_gaps,
        travel_buffer=travel,
        include_unavailable=include_unavailable,
    )

    try:
        constraints = load_constraints(db, staff.id, target_date)
    except ConstraintLoadError:
        logger.exception(f"Availability lookup failed for staff {staff.id} on {target_date}")
        return AvailabilityResponse(date=target_date, staff_id=staff.id, slots=[])

    slots = calculate_available_slots(constraints, total_minutes, target_date, options)
    return AvailabilityResponse(
        date=target_date,
        staff_id=staff.id,
        slots=[{"time": s.time, "available": s.available, "reason": s.reason} for s in slots],
    )
