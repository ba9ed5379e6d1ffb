"""Helpers for converting between wall-clock times and minutes since midnight."""
from datetime import time as time_type
from typing import Union

MINUTES_PER_DAY = 24 * 60


def time_to_minutes(t: Union[time_type, str]) -> int:
    """Accepts a time object or an 'HH:MM' / 'HH:MM:SS' string."""
    if isinstance(t, str):
        parts = t.split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time value: {t!r}")
        return int(parts[0]) * 60 + int(parts[1])
    return t.hour * 60 + t.minute


def minutes_to_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def minutes_to_time(minutes: int) -> time_type:
    """
    Convert minutes since midnight to a time object.
    24:00 is clamped to 23:59 since time() cannot represent end of day.
    """
    if minutes >= MINUTES_PER_DAY:
        return time_type(23, 59)
    return time_type(minutes // 60, minutes % 60)


def end_minutes(t: time_type) -> int:
    """End-of-window minutes; 23:59 is treated as midnight so whole-evening windows stay half-open."""
    minutes = time_to_minutes(t)
    return MINUTES_PER_DAY if minutes == MINUTES_PER_DAY - 1 else minutes
