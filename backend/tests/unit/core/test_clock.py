# backend/tests/unit/core/test_clock.py
from datetime import datetime, timedelta, timezone

from mentorship.core.clock import ensure_utc, to_wall_clock, utc_now


def test_utc_now_is_aware():
    assert utc_now().tzinfo is not None
    assert utc_now().utcoffset() == timedelta(0)


def test_ensure_utc_tags_naive_values():
    naive = datetime(2030, 1, 15, 12, 0)
    assert ensure_utc(naive) == datetime(2030, 1, 15, 12, 0, tzinfo=timezone.utc)


def test_ensure_utc_converts_other_offsets():
    plus_two = timezone(timedelta(hours=2))
    value = ensure_utc(datetime(2030, 1, 15, 14, 0, tzinfo=plus_two))
    assert value == datetime(2030, 1, 15, 12, 0, tzinfo=timezone.utc)
    assert value.tzinfo == timezone.utc


def test_to_wall_clock_shifts_by_offset():
    instant = datetime(2030, 1, 15, 23, 30, tzinfo=timezone.utc)
    assert to_wall_clock(instant, 60).date().day == 16
    assert to_wall_clock(instant, -60).hour == 22
    assert to_wall_clock(instant).hour == 23
