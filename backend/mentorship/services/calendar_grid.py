# backend/mentorship/services/calendar_grid.py
"""
Month grid geometry for the mentor calendar.

Pure functions only: no database, no clock. ``today`` is an argument so the
same inputs always produce the same grid.
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Set

from ..core.clock import to_wall_clock

SUNDAY = calendar.SUNDAY


@dataclass(frozen=True)
class CalendarDay:
    """One cell of the month grid."""

    date: date
    is_current_month: bool
    is_today: bool
    is_selectable: bool
    has_availability: bool
    has_session: bool


def _local_dates(instants: Iterable[datetime], utc_offset_minutes: int) -> Set[date]:
    return {to_wall_clock(value, utc_offset_minutes).date() for value in instants}


def build_month_grid(
    year: int,
    month_index: int,
    *,
    today: date,
    slots: Iterable = (),
    sessions: Iterable = (),
    first_weekday: int = SUNDAY,
    utc_offset_minutes: int = 0,
) -> List[CalendarDay]:
    """
    Build the whole-week grid that displays ``month_index`` (0 = January) of ``year``.

    Leading cells come from the previous month and trailing cells from the
    next, so the result length is always a multiple of 7 and the target month
    occupies one contiguous run.

    Args:
        year: Calendar year
        month_index: 0-11
        today: The viewer's current date; earlier days are not selectable
        slots: Objects with ``start_time``, ``is_available`` and ``is_booked``
        sessions: Objects with ``start_time``
        first_weekday: Column the week starts on (0=Monday ... 6=Sunday)
        utc_offset_minutes: Viewer's wall-clock offset used to bucket instants into dates
    """
    month = month_index + 1
    open_dates = _local_dates(
        (s.start_time for s in slots if s.is_available and not s.is_booked),
        utc_offset_minutes,
    )
    session_dates = _local_dates((s.start_time for s in sessions), utc_offset_minutes)

    grid = calendar.Calendar(firstweekday=first_weekday)
    return [
        CalendarDay(
            date=day,
            is_current_month=day.month == month,
            is_today=day == today,
            is_selectable=day >= today,
            has_availability=day in open_dates,
            has_session=day in session_dates,
        )
        for day in grid.itermonthdates(year, month)
    ]


def visible_range(
    year: int, month_index: int, first_weekday: int = SUNDAY
) -> tuple[date, date]:
    """First and last date shown by the grid for the given month."""
    days = list(calendar.Calendar(firstweekday=first_weekday).itermonthdates(year, month_index + 1))
    return days[0], days[-1]
