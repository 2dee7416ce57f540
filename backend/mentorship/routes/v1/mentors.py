# backend/mentorship/routes/v1/mentors.py
"""
Mentor availability routes - API v1

Endpoints:
    GET /{mentor_id}/availability - Slots grouped by date for a date range
    GET /{mentor_id}/calendar - Month grid with availability/session markers
    POST /me/slots - Caller (as mentor) publishes new slots
    POST /me/slots/{slot_id}/withdraw - Caller withdraws an unbooked slot
"""

import asyncio
from datetime import date
import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, status

from ...api.dependencies import (
    get_availability_service,
    get_calendar_service,
    get_current_user_id,
    get_current_user_id_optional,
)
from ...core.exceptions import DomainException
from ...schemas.calendar import CalendarDayResponse, CalendarMonthResponse
from ...schemas.time_slot import (
    MentorAvailabilityResponse,
    SlotPublishRequest,
    TimeSlotResponse,
)
from ...services.availability_service import AvailabilityService
from ...services.calendar_service import CalendarService
from .common import ULID_PATH_PATTERN, handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["mentors-v1"])


@router.get("/{mentor_id}/availability", response_model=List[MentorAvailabilityResponse])
async def get_mentor_availability(
    mentor_id: str = Path(..., min_length=1, max_length=64),
    start: date = Query(..., description="First date (YYYY-MM-DD), inclusive"),
    end: date = Query(..., description="Last date (YYYY-MM-DD), inclusive"),
    utc_offset_minutes: int = Query(0, description="Caller's wall-clock offset from UTC"),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> List[MentorAvailabilityResponse]:
    try:
        days = await asyncio.to_thread(
            availability_service.get_availability,
            mentor_id,
            start,
            end,
            utc_offset_minutes=utc_offset_minutes,
        )
        return [
            MentorAvailabilityResponse(
                date=day.date,
                slots=[TimeSlotResponse.model_validate(slot) for slot in day.slots],
            )
            for day in days
        ]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{mentor_id}/calendar", response_model=CalendarMonthResponse)
async def get_mentor_calendar(
    mentor_id: str = Path(..., min_length=1, max_length=64),
    year: int = Query(...),
    month: int = Query(..., description="0 = January ... 11 = December"),
    utc_offset_minutes: int = Query(0),
    viewer_id: Optional[str] = Depends(get_current_user_id_optional),
    calendar_service: CalendarService = Depends(get_calendar_service),
) -> CalendarMonthResponse:
    try:
        grid = await asyncio.to_thread(
            calendar_service.get_month,
            mentor_id,
            year,
            month,
            viewer_id=viewer_id,
            utc_offset_minutes=utc_offset_minutes,
        )
        return CalendarMonthResponse(
            year=grid.year,
            month=grid.month_index,
            first_weekday=grid.first_weekday,
            days=[CalendarDayResponse.model_validate(day) for day in grid.days],
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/me/slots",
    response_model=List[TimeSlotResponse],
    status_code=status.HTTP_201_CREATED,
)
async def publish_slots(
    payload: SlotPublishRequest = Body(...),
    current_user_id: str = Depends(get_current_user_id),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> List[TimeSlotResponse]:
    try:
        slots = await asyncio.to_thread(
            availability_service.publish_slots,
            current_user_id,
            [(w.start_time, w.end_time) for w in payload.slots],
        )
        return [TimeSlotResponse.model_validate(slot) for slot in slots]
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/me/slots/{slot_id}/withdraw", response_model=TimeSlotResponse)
async def withdraw_slot(
    slot_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user_id: str = Depends(get_current_user_id),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> TimeSlotResponse:
    try:
        slot = await asyncio.to_thread(
            availability_service.withdraw_slot, current_user_id, slot_id
        )
        return TimeSlotResponse.model_validate(slot)
    except DomainException as e:
        handle_domain_exception(e)
