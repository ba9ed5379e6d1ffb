"""
Internal data types for scheduling logic.
Decoupled from SQLAlchemy models so the slot math can run on plain values.

All times are minutes since midnight on the provider's local date.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional


@dataclass(frozen=True)
class Interval:
    """Half-open window [start, end) in minutes since midnight."""
    start: int
    end: int

    @property
    def length(self) -> int:
        return max(0, self.end - self.start)

    def overlaps(self, start: int, end: int) -> bool:
        return start < self.end and end > self.start

    def contains(self, start: int, end: int) -> bool:
        return self.start <= start and end <= self.end


@dataclass(frozen=True)
class BufferedInterval:
    """
    An existing booked service as seen by the scheduler.

    The staff member is busy for the service itself, then the buffer.
    Processing time after the buffer leaves them free, and finishing
    time after processing makes them busy again.
    """
    start: int
    end: int
    buffer_minutes: int = 0
    processing_minutes: int = 0
    finishing_minutes: int = 0
    booking_id: Optional[int] = None

    def blocked_segments(self) -> List[Interval]:
        segments = [Interval(self.start, self.end + self.buffer_minutes)]
        if self.finishing_minutes > 0:
            finishing_start = self.end + self.buffer_minutes + self.processing_minutes
            segments.append(Interval(finishing_start, finishing_start + self.finishing_minutes))
        return segments


@dataclass
class Constraints:
    work_hours_enabled: bool = True
    staff_shifts: List[Interval] = field(default_factory=list)
    time_blocks: List[Interval] = field(default_factory=list)
    existing_bookings: List[BufferedInterval] = field(default_factory=list)

    def blocked_segments(self) -> List[Interval]:
        segments = []
        for booking in self.existing_bookings:
            segments.extend(booking.blocked_segments())
        return segments


@dataclass(frozen=True)
class SlotOptions:
    slot_interval: int = 15
    avoid_gaps: bool = False
    travel_buffer: int = 0
    include_unavailable: bool = False


@dataclass(frozen=True)
class Slot:
    time: str  # HH:MM
    available: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class WaitlistFilter:
    date: Optional[date] = None
    staff_id: Optional[int] = None
    max_matches: int = 10


@dataclass
class WaitlistMatch:
    entry_id: int
    customer_name: str
    priority: int
    created_at: Optional[datetime]
    date: date
    staff_id: int
    service_id: Optional[int]
    slots: List[str] = field(default_factory=list)

    @property
    def first_slot(self) -> Optional[str]:
        return self.slots[0] if self.slots else None
