"""
Slot calculation: enumerate bookable start times for one staff member on one day.

Pure functions over Constraints; no database access. A closed or fully booked
day is not an error, it simply yields no available slots.
"""
import logging
from datetime import date as date_type
from typing import Dict, List, Optional

from bookingapp.services.scheduling.timeutils import MINUTES_PER_DAY, minutes_to_hhmm
from bookingapp.services.scheduling.types import Constraints, Interval, Slot, SlotOptions

logger = logging.getLogger(__name__)

OUTSIDE_WORK_HOURS = "Outside work hours"
BEYOND_WORK_HOURS = "Extends beyond work hours"
BOOKING_CONFLICT = "Conflicts with existing booking"
TIME_BLOCKED = "Time block"
UNUSABLE_GAP = "Leaves unusable gap"


def calculate_available_slots(
    constraints: Constraints,
    duration_minutes: int,
    target_date: Optional[date_type] = None,
    options: Optional[SlotOptions] = None,
) -> List[Slot]:
    """
    Walk each work window in steps of options.slot_interval and evaluate every
    start time whose service fits before the window closes.

    Returns slots ordered by start time. Only available slots are returned
    unless options.include_unavailable is set, in which case every candidate
    comes back with its availability flag and reason.
    """
    options = options or SlotOptions()

    if constraints.work_hours_enabled and not constraints.staff_shifts:
        return []
    if _has_whole_day_block(constraints):
        return []

    blocked = constraints.blocked_segments()
    step = max(1, options.slot_interval)
    candidates: Dict[int, Slot] = {}

    windows = sorted((w for w in constraints.staff_shifts if w.length > 0), key=lambda w: (w.start, w.end))
    for window in windows:
        start = window.start
        while start < window.end and start + duration_minutes <= window.end:
            slot = _evaluate(start, duration_minutes, window, blocked, constraints.time_blocks, options)
            previous = candidates.get(start)
            # overlapping windows may produce the same start; an open one wins
            if previous is None or (slot.available and not previous.available):
                candidates[start] = slot
            start += step

    slots = [candidates[start] for start in sorted(candidates)]
    if not options.include_unavailable:
        slots = [s for s in slots if s.available]

    logger.debug(f"{len(slots)} slots for {duration_minutes} min on {target_date}")
    return slots


def check_slot(
    constraints: Constraints,
    start_minutes: int,
    duration_minutes: int,
    options: Optional[SlotOptions] = None,
) -> Slot:
    """Evaluate one arbitrary start time with the same rules the calculator applies."""
    options = options or SlotOptions()
    label = minutes_to_hhmm(start_minutes)

    if constraints.work_hours_enabled and not constraints.staff_shifts:
        return Slot(label, False, OUTSIDE_WORK_HOURS)
    if _has_whole_day_block(constraints):
        return Slot(label, False, TIME_BLOCKED)

    windows = [w for w in constraints.staff_shifts if w.contains(start_minutes, start_minutes + duration_minutes)]
    if not windows:
        return Slot(label, False, OUTSIDE_WORK_HOURS)

    # same merge as the calculator: any window that accepts the start wins
    blocked = constraints.blocked_segments()
    slot = None
    for window in sorted(windows, key=lambda w: (w.start, w.end)):
        slot = _evaluate(start_minutes, duration_minutes, window, blocked, constraints.time_blocks, options)
        if slot.available:
            return slot
    return slot


def _evaluate(
    start: int,
    duration_minutes: int,
    window: Interval,
    blocked: List[Interval],
    time_blocks: List[Interval],
    options: SlotOptions,
) -> Slot:
    label = minutes_to_hhmm(start)
    occupied_end = start + duration_minutes + options.travel_buffer

    if occupied_end > window.end:
        return Slot(label, False, BEYOND_WORK_HOURS)
    if any(segment.overlaps(start, occupied_end) for segment in blocked):
        return Slot(label, False, BOOKING_CONFLICT)
    if any(block.overlaps(start, occupied_end) for block in time_blocks):
        return Slot(label, False, TIME_BLOCKED)
    if options.avoid_gaps and _leaves_unusable_gap(occupied_end, window, blocked + time_blocks, duration_minutes):
        return Slot(label, False, UNUSABLE_GAP)
    return Slot(label, True)


def _leaves_unusable_gap(occupied_end: int, window: Interval, commitments: List[Interval], min_gap: int) -> bool:
    """
    True if the idle time before the next commitment is too short to book another service into.

    The threshold is the requested duration, not the slot interval: a gap that
    cannot hold one more service of the same length is treated as wasted.
    Only commitments inside the same window count; the window end does not.
    """
    upcoming = [c.start for c in commitments if occupied_end <= c.start < window.end]
    if not upcoming:
        return False
    gap = min(upcoming) - occupied_end
    return 0 < gap < min_gap


def _has_whole_day_block(constraints: Constraints) -> bool:
    return any(b.start <= 0 and b.end >= MINUTES_PER_DAY for b in constraints.time_blocks)
