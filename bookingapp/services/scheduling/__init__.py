"""
Scheduling core: constraint loading, slot calculation and waitlist matching.

Public API:
  load_constraints(db, staff_id, date)
  calculate_available_slots(constraints, duration_minutes, date, options)
  check_slot(constraints, start_minutes, duration_minutes, options)
  find_waitlist_matches(db, provider_id, filters)
"""
from .constraints import load_constraints
from .slots import calculate_available_slots, check_slot
from .types import (
    BufferedInterval,
    Constraints,
    Interval,
    Slot,
    SlotOptions,
    WaitlistFilter,
    WaitlistMatch,
)
from .waitlist import find_waitlist_matches

__all__ = [
    "load_constraints",
    "calculate_available_slots",
    "check_slot",
    "find_waitlist_matches",
    "BufferedInterval",
    "Constraints",
    "Interval",
    "Slot",
    "SlotOptions",
    "WaitlistFilter",
    "WaitlistMatch",
]
