"""
Time source for everything that needs "now".

Services never call ``datetime.now()`` directly; they receive a ``Clock`` so
tests can freeze or advance time deterministically.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: the current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as aware UTC; naive values are taken to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_wall_clock(value: datetime, utc_offset_minutes: int = 0) -> datetime:
    """Shift an instant into the caller's wall clock (fixed offset from UTC)."""
    return ensure_utc(value) + timedelta(minutes=utc_offset_minutes)
