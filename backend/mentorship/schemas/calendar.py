# backend/mentorship/schemas/calendar.py
from datetime import date
from typing import List

from pydantic import Field

from ._strict_base import StrictModel


class CalendarDayResponse(StrictModel):
    date: date
    is_current_month: bool
    is_today: bool
    is_selectable: bool
    has_availability: bool
    has_session: bool


class CalendarMonthResponse(StrictModel):
    year: int
    month: int = Field(..., description="0 = January ... 11 = December")
    first_weekday: int = Field(..., description="0 = Monday ... 6 = Sunday")
    days: List[CalendarDayResponse]
