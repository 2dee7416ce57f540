# backend/mentorship/schemas/time_slot.py
"""Slot and availability schemas."""

from datetime import date, datetime
from typing import List

from pydantic import Field, model_validator

from ..core.constants import MAX_SLOTS_PER_REQUEST
from ._strict_base import StrictModel, StrictRequestModel


class TimeSlotResponse(StrictModel):
    id: str
    mentor_id: str
    start_time: datetime
    end_time: datetime
    is_available: bool
    is_booked: bool


class MentorAvailabilityResponse(StrictModel):
    """Slots grouped under one date of the caller's wall clock."""

    date: date
    slots: List[TimeSlotResponse]


class SlotWindow(StrictRequestModel):
    start_time: datetime = Field(..., description="Slot start (ISO 8601 with offset)")
    end_time: datetime = Field(..., description="Slot end (ISO 8601 with offset)")

    @model_validator(mode="after")
    def _require_offsets(self) -> "SlotWindow":
        if self.start_time.tzinfo is None or self.end_time.tzinfo is None:
            raise ValueError("start_time and end_time must include a UTC offset")
        return self


class SlotPublishRequest(StrictRequestModel):
    slots: List[SlotWindow] = Field(..., min_length=1, max_length=MAX_SLOTS_PER_REQUEST)
