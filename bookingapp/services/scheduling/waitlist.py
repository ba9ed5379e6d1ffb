"""
Waitlist matching: which open waitlist entries could be booked right now.

Matching is advisory and read-only. Nothing is reserved, so two operators
acting on the same match can still collide at booking time.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from bookingapp.core.config import get_settings
from bookingapp.db.models.provider import Provider
from bookingapp.db.models.service import Service
from bookingapp.db.models.staff import Staff
from bookingapp.db.models.waitlist import WaitlistEntry, OPEN_WAITLIST_STATUSES
from bookingapp.services.scheduling.constraints import load_constraints
from bookingapp.services.scheduling.exceptions import ConstraintLoadError
from bookingapp.services.scheduling.slots import calculate_available_slots
from bookingapp.services.scheduling.timeutils import MINUTES_PER_DAY, end_minutes, time_to_minutes
from bookingapp.services.scheduling.types import Constraints, SlotOptions, WaitlistFilter, WaitlistMatch

logger = logging.getLogger(__name__)


def rank_key(entry: WaitlistEntry) -> Tuple:
    """Higher priority first, then first come first served. Aware timestamps compare in UTC."""
    created = entry.created_at or datetime.max
    if created.tzinfo is not None:
        created = created.astimezone(timezone.utc).replace(tzinfo=None)
    return (-(entry.priority or 0), created, entry.id)


def find_waitlist_matches(db: Session, provider_id: int, filters: Optional[WaitlistFilter] = None) -> List[WaitlistMatch]:
    """
    Return up to filters.max_matches open entries that at least one staff
    member could serve on the entry's date, best ranked first.
    """
    filters = filters or WaitlistFilter(max_matches=get_settings().WAITLIST_MAX_MATCHES)

    provider = db.query(Provider).filter(Provider.id == provider_id).first()
    if not provider:
        return []

    query = db.query(WaitlistEntry).filter(
        WaitlistEntry.provider_id == provider_id,
        WaitlistEntry.status.in_(OPEN_WAITLIST_STATUSES),
    )
    if filters.date:
        query = query.filter(or_(WaitlistEntry.preferred_date == filters.date, WaitlistEntry.preferred_date.is_(None)))
    if filters.staff_id:
        query = query.filter(or_(WaitlistEntry.staff_id == filters.staff_id, WaitlistEntry.staff_id.is_(None)))

    entries = sorted(query.all(), key=rank_key)

    options = SlotOptions(
        slot_interval=provider.slot_interval_minutes or get_settings().DEFAULT_SLOT_INTERVAL,
        avoid_gaps=bool(provider.avoid_gaps),
    )
    # constraints only depend on staff and date, so entries can share them within this call
    cache: Dict[Tuple[int, object], Optional[Constraints]] = {}

    matches = []
    for entry in entries:
        if len(matches) >= filters.max_matches:
            break
        match = _match_entry(db, entry, provider_id, filters, options, cache)
        if match:
            matches.append(match)

    logger.info(f"Waitlist matching for provider {provider_id}: {len(matches)} of {len(entries)} open entries fulfillable")
    return matches


def _match_entry(db, entry, provider_id, filters, options, cache) -> Optional[WaitlistMatch]:
    target_date = filters.date or entry.preferred_date
    if target_date is None:
        return None

    duration = entry.service.total_minutes if entry.service else get_settings().DEFAULT_SERVICE_DURATION
    window_start = time_to_minutes(entry.preferred_time_start) if entry.preferred_time_start else 0
    window_end = end_minutes(entry.preferred_time_end) if entry.preferred_time_end else MINUTES_PER_DAY

    for staff_id in candidate_staff_ids(db, entry, provider_id, filters.staff_id):
        key = (staff_id, target_date)
        if key not in cache:
            try:
                cache[key] = load_constraints(db, staff_id, target_date)
            except ConstraintLoadError as e:
                logger.warning(f"Skipping staff {staff_id} for waitlist entry {entry.id}: {e}")
                cache[key] = None
        constraints = cache[key]
        if constraints is None:
            continue

        slots = calculate_available_slots(constraints, duration, target_date, options)
        in_window = [s.time for s in slots if window_start <= time_to_minutes(s.time) < window_end]
        if in_window:
            return WaitlistMatch(
                entry_id=entry.id,
                customer_name=entry.customer_name,
                priority=entry.priority or 0,
                created_at=entry.created_at,
                date=target_date,
                staff_id=staff_id,
                service_id=entry.service_id,
                slots=in_window,
            )
    return None


def candidate_staff_ids(db: Session, entry: WaitlistEntry, provider_id: int, staff_filter: Optional[int] = None) -> List[int]:
    """The entry's preferred staff, else everyone at the provider who performs the preferred service."""
    if entry.staff_id:
        ids = [entry.staff_id]
    else:
        query = db.query(Staff).filter(Staff.provider_id == provider_id, Staff.is_active == True)
        if entry.service_id:
            query = query.filter(Staff.services.any(Service.id == entry.service_id))
        ids = [s.id for s in query.order_by(Staff.id).all()]

    if staff_filter:
        ids = [i for i in ids if i == staff_filter]
    return ids
