"""
Constraint loading: turns a staff member's stored schedule into the plain
values the slot calculator works on.

Window precedence for a date:
  1. shift overrides dated exactly on that day
  2. recurring shift overrides whose pattern lands on that day
  3. the weekly work-hours rule for the weekday
  4. nothing: closed when the provider enforces work hours,
     otherwise the default business window
"""
import logging
from datetime import date as date_type
from typing import Iterable, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bookingapp.core.config import get_settings
from bookingapp.db.models.availability import ShiftOverride, TimeBlock, WorkHoursRule
from bookingapp.db.models.booking import Booking, BookingService, INACTIVE_BOOKING_STATUSES
from bookingapp.db.models.staff import Staff
from bookingapp.services.scheduling.exceptions import ConstraintLoadError
from bookingapp.services.scheduling.timeutils import MINUTES_PER_DAY, end_minutes, time_to_minutes
from bookingapp.services.scheduling.types import BufferedInterval, Constraints, Interval

logger = logging.getLogger(__name__)

RECURRENCE_PATTERNS = ("daily", "weekly", "biweekly", "monthly")


def load_constraints(
    db: Session,
    staff_id: int,
    target_date: date_type,
    exclude_booking_ids: Iterable[int] = (),
) -> Constraints:
    """
    Load work windows, time blocks and existing bookings for one staff member
    on one date. Read-only.

    exclude_booking_ids leaves the given bookings out of the busy list, so a
    booking being rescheduled does not conflict with itself.

    Raises ConstraintLoadError when the database cannot be read.
    """
    try:
        staff = db.query(Staff).filter(Staff.id == staff_id).first()
        if not staff or not staff.is_active:
            logger.info(f"Staff {staff_id} not found or inactive, no availability on {target_date}")
            return Constraints(work_hours_enabled=True)

        work_hours_enabled = staff.provider.work_hours_enabled if staff.provider else True

        return Constraints(
            work_hours_enabled=work_hours_enabled,
            staff_shifts=resolve_work_windows(db, staff_id, target_date, work_hours_enabled),
            time_blocks=load_time_blocks(db, staff_id, target_date),
            existing_bookings=load_booked_intervals(db, staff_id, target_date, exclude_booking_ids),
        )
    except SQLAlchemyError as e:
        logger.error(f"Failed to load availability constraints for staff {staff_id} on {target_date}: {e}")
        raise ConstraintLoadError(f"Could not load availability for staff {staff_id}") from e


def resolve_work_windows(
    db: Session, staff_id: int, target_date: date_type, work_hours_enabled: bool
) -> List[Interval]:
    overrides = db.query(ShiftOverride).filter(
        ShiftOverride.staff_id == staff_id,
        ShiftOverride.shift_date <= target_date,
    ).all()

    exact = [o for o in overrides if o.shift_date == target_date]
    if exact:
        return _to_windows(exact)

    recurring = [o for o in overrides if shift_recurs_on(o, target_date)]
    if recurring:
        return _to_windows(recurring)

    rules = db.query(WorkHoursRule).filter(
        WorkHoursRule.staff_id == staff_id,
        WorkHoursRule.weekday == target_date.isoweekday(),
    ).all()
    if rules:
        if any(r.is_closed for r in rules):
            return []
        return _to_windows(r for r in rules if r.start_time and r.end_time)

    if work_hours_enabled:
        return []

    settings = get_settings()
    return [Interval(time_to_minutes(settings.DEFAULT_WORK_START), time_to_minutes(settings.DEFAULT_WORK_END))]


def shift_recurs_on(override: ShiftOverride, target_date: date_type) -> bool:
    """True if a recurring override repeats on target_date (the first shift_date itself is not a repeat)."""
    pattern = override.recurrence_pattern
    if pattern not in RECURRENCE_PATTERNS:
        return False
    if target_date <= override.shift_date:
        return False
    if override.recurrence_end_date and target_date > override.recurrence_end_date:
        return False

    days_apart = (target_date - override.shift_date).days
    if pattern == "daily":
        return True
    if pattern == "weekly":
        return days_apart % 7 == 0
    if pattern == "biweekly":
        return days_apart % 14 == 0
    return target_date.day == override.shift_date.day


def load_time_blocks(db: Session, staff_id: int, target_date: date_type) -> List[Interval]:
    rows = db.query(TimeBlock).filter(
        TimeBlock.staff_id == staff_id,
        TimeBlock.start_date <= target_date,
        TimeBlock.end_date >= target_date,
    ).all()

    blocks = []
    for block in rows:
        if block.whole_day:
            blocks.append(Interval(0, MINUTES_PER_DAY))
            continue
        start = time_to_minutes(block.start_time)
        end = end_minutes(block.end_time)
        if end > start:
            blocks.append(Interval(start, end))
    return sorted(blocks, key=lambda b: (b.start, b.end))


def load_booked_intervals(
    db: Session,
    staff_id: int,
    target_date: date_type,
    exclude_booking_ids: Iterable[int] = (),
) -> List[BufferedInterval]:
    excluded = list(exclude_booking_ids)

    lines_q = (
        db.query(BookingService)
        .join(Booking, BookingService.booking_id == Booking.id)
        .filter(
            BookingService.staff_id == staff_id,
            Booking.booking_date == target_date,
            Booking.status.notin_(INACTIVE_BOOKING_STATUSES),
        )
    )
    bare_q = db.query(Booking).filter(
        Booking.staff_id == staff_id,
        Booking.booking_date == target_date,
        Booking.status.notin_(INACTIVE_BOOKING_STATUSES),
        ~Booking.services.any(),
    )
    if excluded:
        lines_q = lines_q.filter(Booking.id.notin_(excluded))
        bare_q = bare_q.filter(Booking.id.notin_(excluded))

    intervals = []
    for line in lines_q.all():
        service = line.service
        booking = line.booking
        buffer_minutes = (service.buffer_minutes or 0) if service else 0
        # travel after an at-home visit keeps the staff member away after the last service
        if booking.services and booking.services[-1].id == line.id:
            buffer_minutes += booking.travel_buffer_minutes or 0
        intervals.append(BufferedInterval(
            start=time_to_minutes(line.start_time),
            end=end_minutes(line.end_time),
            buffer_minutes=buffer_minutes,
            processing_minutes=(service.processing_minutes or 0) if service else 0,
            finishing_minutes=(service.finishing_minutes or 0) if service else 0,
            booking_id=booking.id,
        ))

    for booking in bare_q.all():
        intervals.append(BufferedInterval(
            start=time_to_minutes(booking.start_time),
            end=end_minutes(booking.end_time),
            buffer_minutes=booking.travel_buffer_minutes or 0,
            booking_id=booking.id,
        ))

    return sorted(intervals, key=lambda i: (i.start, i.end))


def _to_windows(rows) -> List[Interval]:
    windows = []
    for row in rows:
        start = time_to_minutes(row.start_time)
        end = end_minutes(row.end_time)
        if end > start:
            windows.append(Interval(start, end))
    return sorted(windows, key=lambda w: (w.start, w.end))
