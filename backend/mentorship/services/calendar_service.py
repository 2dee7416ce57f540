# backend/mentorship/services/calendar_service.py
"""Calendar Service: load what a month grid needs and hand it to the pure builder."""

from dataclasses import dataclass
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock, to_wall_clock
from ..core.config import settings
from ..core.constants import MAX_YEAR, MIN_YEAR
from ..core.exceptions import ValidationException
from ..models.session import MentorSession
from ..repositories.factory import RepositoryFactory
from ..repositories.session_repository import SessionRepository
from ..repositories.time_slot_repository import TimeSlotRepository
from .availability_service import local_dates_to_utc_bounds, validate_utc_offset
from .base import BaseService
from .calendar_grid import CalendarDay, build_month_grid, visible_range

logger = logging.getLogger(__name__)


@dataclass
class CalendarMonth:
    year: int
    month_index: int
    first_weekday: int
    days: List[CalendarDay]


class CalendarService(BaseService):
    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        slot_repository: Optional[TimeSlotRepository] = None,
        session_repository: Optional[SessionRepository] = None,
        first_weekday: Optional[int] = None,
    ):
        super().__init__(db, clock=clock)
        self.slot_repository = slot_repository or RepositoryFactory.create_time_slot_repository(db)
        self.session_repository = (
            session_repository or RepositoryFactory.create_session_repository(db)
        )
        self.first_weekday = (
            settings.calendar_first_weekday if first_weekday is None else first_weekday
        )

    @BaseService.measure_operation("get_calendar_month")
    def get_month(
        self,
        mentor_id: str,
        year: int,
        month_index: int,
        viewer_id: Optional[str] = None,
        utc_offset_minutes: int = 0,
    ) -> CalendarMonth:
        """
        Month grid of ``mentor_id``'s calendar as seen by ``viewer_id``.

        ``has_availability`` reflects the mentor's open slots; ``has_session``
        reflects the viewer's own non-cancelled sessions.
        """
        if not 0 <= month_index <= 11:
            raise ValidationException(
                "month must be between 0 (January) and 11 (December)",
                code="INVALID_MONTH",
                details={"month": month_index},
            )
        if not MIN_YEAR <= year <= MAX_YEAR:
            raise ValidationException(
                f"year must be between {MIN_YEAR} and {MAX_YEAR}",
                code="INVALID_YEAR",
                details={"year": year},
            )
        validate_utc_offset(utc_offset_minutes)

        first_day, last_day = visible_range(year, month_index, self.first_weekday)
        start_utc, end_utc = local_dates_to_utc_bounds(first_day, last_day, utc_offset_minutes)

        slots = self.slot_repository.get_slots_in_range(mentor_id, start_utc, end_utc)
        sessions: List[MentorSession] = []
        if viewer_id:
            sessions = self.session_repository.get_for_participant_between(
                viewer_id, start_utc, end_utc
            )

        today = to_wall_clock(self.now(), utc_offset_minutes).date()
        days = build_month_grid(
            year,
            month_index,
            today=today,
            slots=slots,
            sessions=sessions,
            first_weekday=self.first_weekday,
            utc_offset_minutes=utc_offset_minutes,
        )
        return CalendarMonth(
            year=year, month_index=month_index, first_weekday=self.first_weekday, days=days
        )
