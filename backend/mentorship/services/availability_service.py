# backend/mentorship/services/availability_service.py
"""
Availability Service: read a mentor's slots and let the mentor publish or
withdraw them.

Reads here are advisory. The booking and reschedule engines never trust a
previously returned availability list; they re-check the slot row with a
conditional write at the moment of booking.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from ..core.clock import Clock, ensure_utc, to_wall_clock
from ..core.config import settings
from ..core.constants import (
    MAX_SLOT_MINUTES,
    MAX_SLOTS_PER_REQUEST,
    MAX_UTC_OFFSET_MINUTES,
    MAX_YEAR,
    MIN_SLOT_MINUTES,
    MIN_YEAR,
)
from ..core.exceptions import (
    ConcurrentModificationException,
    SlotAlreadyBookedException,
    SlotNotFoundException,
    SlotOverlapException,
    ValidationException,
)
from ..models.time_slot import TimeSlot
from ..repositories.factory import RepositoryFactory
from ..repositories.time_slot_repository import TimeSlotRepository
from .base import BaseService

logger = logging.getLogger(__name__)

Window = Tuple[datetime, datetime]


@dataclass
class MentorAvailability:
    """Slots of one mentor grouped under one wall-clock date."""

    date: date
    slots: List[TimeSlot] = field(default_factory=list)


def validate_utc_offset(utc_offset_minutes: int) -> None:
    if abs(utc_offset_minutes) > MAX_UTC_OFFSET_MINUTES:
        raise ValidationException(
            f"utc_offset_minutes must be within +/-{MAX_UTC_OFFSET_MINUTES}",
            code="INVALID_UTC_OFFSET",
            details={"utc_offset_minutes": utc_offset_minutes},
        )


def local_dates_to_utc_bounds(
    first_day: date, last_day: date, utc_offset_minutes: int
) -> Tuple[datetime, datetime]:
    """UTC half-open interval covering ``first_day``..``last_day`` in the caller's wall clock."""
    offset = timedelta(minutes=utc_offset_minutes)
    start = datetime.combine(first_day, time.min, tzinfo=timezone.utc) - offset
    end = datetime.combine(last_day + timedelta(days=1), time.min, tzinfo=timezone.utc) - offset
    return start, end


def _fmt_window(start: datetime, end: datetime) -> str:
    return f"{start.isoformat()}/{end.isoformat()}"


class AvailabilityService(BaseService):
    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        slot_repository: Optional[TimeSlotRepository] = None,
        max_range_days: Optional[int] = None,
    ):
        super().__init__(db, clock=clock)
        self.slot_repository = slot_repository or RepositoryFactory.create_time_slot_repository(db)
        self.max_range_days = max_range_days or settings.availability_max_range_days

    @BaseService.measure_operation("get_availability")
    def get_availability(
        self,
        mentor_id: str,
        range_start: date,
        range_end: date,
        utc_offset_minutes: int = 0,
    ) -> List[MentorAvailability]:
        """
        Offered slots of a mentor for an inclusive date range.

        Withdrawn slots are left out; booked slots are included with
        ``is_booked`` set so callers can show them as taken. Dates without any
        slot are omitted. Output is ordered by date, then slot start.
        """
        if range_end < range_start:
            raise ValidationException(
                "End date must not be before start date",
                code="INVALID_DATE_RANGE",
                details={"start": range_start.isoformat(), "end": range_end.isoformat()},
            )
        if range_start.year < MIN_YEAR or range_end.year > MAX_YEAR:
            raise ValidationException(
                f"Dates must fall between the years {MIN_YEAR} and {MAX_YEAR}",
                code="INVALID_DATE_RANGE",
                details={"start": range_start.isoformat(), "end": range_end.isoformat()},
            )
        span = (range_end - range_start).days + 1
        if span > self.max_range_days:
            raise ValidationException(
                f"Date range must be at most {self.max_range_days} days",
                code="DATE_RANGE_TOO_LARGE",
                details={"days": span, "max_days": self.max_range_days},
            )
        validate_utc_offset(utc_offset_minutes)

        start_utc, end_utc = local_dates_to_utc_bounds(range_start, range_end, utc_offset_minutes)
        slots = self.slot_repository.get_slots_in_range(
            mentor_id, start_utc, end_utc, available_only=True
        )

        grouped: Dict[date, MentorAvailability] = {}
        for slot in slots:
            day = to_wall_clock(slot.start_time, utc_offset_minutes).date()
            grouped.setdefault(day, MentorAvailability(date=day)).slots.append(slot)
        return [grouped[day] for day in sorted(grouped)]

    def _validate_windows(self, windows: Sequence[Window], now: datetime) -> List[Window]:
        if not windows:
            raise ValidationException("At least one slot is required", code="NO_SLOTS")
        if len(windows) > MAX_SLOTS_PER_REQUEST:
            raise ValidationException(
                f"At most {MAX_SLOTS_PER_REQUEST} slots can be published at once",
                code="TOO_MANY_SLOTS",
            )

        normalized: List[Window] = []
        for raw_start, raw_end in windows:
            if any(not MIN_YEAR <= value.year <= MAX_YEAR for value in (raw_start, raw_end)):
                raise ValidationException(
                    f"Slots must fall between the years {MIN_YEAR} and {MAX_YEAR}",
                    code="INVALID_SLOT_WINDOW",
                    details={"start": raw_start.isoformat(), "end": raw_end.isoformat()},
                )
            start, end = ensure_utc(raw_start), ensure_utc(raw_end)
            if start >= end:
                raise ValidationException(
                    "Slot start must be before its end",
                    code="INVALID_SLOT_WINDOW",
                    details={"start": start.isoformat(), "end": end.isoformat()},
                )
            minutes = (end - start).total_seconds() / 60
            if minutes < MIN_SLOT_MINUTES or minutes > MAX_SLOT_MINUTES:
                raise ValidationException(
                    f"Slots must last between {MIN_SLOT_MINUTES} and {MAX_SLOT_MINUTES} minutes",
                    code="INVALID_SLOT_DURATION",
                    details={"minutes": minutes},
                )
            if start <= now:
                raise ValidationException(
                    "Slots must start in the future",
                    code="SLOT_START_IN_PAST",
                    details={"start": start.isoformat()},
                )
            normalized.append((start, end))

        normalized.sort()
        for (prev_start, prev_end), (start, end) in zip(normalized, normalized[1:]):
            if start < prev_end:
                raise ValidationException(
                    "Requested slots overlap each other",
                    code="SLOT_WINDOWS_OVERLAP",
                    details={
                        "first": _fmt_window(prev_start, prev_end),
                        "second": _fmt_window(start, end),
                    },
                )
        return normalized

    @BaseService.measure_operation("publish_slots")
    def publish_slots(self, mentor_id: str, windows: Sequence[Window]) -> List[TimeSlot]:
        """
        Open new bookable slots for a mentor.

        Raises:
            ValidationException: Empty request, bad window, past start, or overlap
                within the request
            SlotOverlapException: A window intersects one of the mentor's existing slots
        """
        normalized = self._validate_windows(windows, self.now())
        self.log_operation("publish_slots", mentor_id=mentor_id, count=len(normalized))

        with self.transaction():
            for start, end in normalized:
                existing = self.slot_repository.find_overlapping(mentor_id, start, end)
                if existing:
                    clash = existing[0]
                    raise SlotOverlapException(
                        mentor_id,
                        _fmt_window(start, end),
                        _fmt_window(clash.start_time, clash.end_time),
                    )
            slots = self.slot_repository.create_slots(mentor_id, normalized)

        return slots

    @BaseService.measure_operation("withdraw_slot")
    def withdraw_slot(self, mentor_id: str, slot_id: str) -> TimeSlot:
        """
        Stop offering a slot. Booked slots cannot be withdrawn; cancel the
        session first.
        """
        slot = self.slot_repository.get_for_mentor(slot_id, mentor_id)
        if slot is None:
            raise SlotNotFoundException(slot_id, mentor_id)
        if slot.is_booked:
            raise SlotAlreadyBookedException(slot_id)

        with self.transaction():
            if not self.slot_repository.withdraw(slot_id, mentor_id, self.now()):
                fresh = self.slot_repository.get_fresh(slot_id)
                if fresh is not None and fresh.is_booked:
                    raise SlotAlreadyBookedException(slot_id)
                raise ConcurrentModificationException("slot", slot_id)

        self.log_operation("withdraw_slot", mentor_id=mentor_id, slot_id=slot_id)
        withdrawn = self.slot_repository.get_fresh(slot_id)
        if withdrawn is None:
            raise SlotNotFoundException(slot_id, mentor_id)
        return withdrawn
