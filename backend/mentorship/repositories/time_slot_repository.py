# backend/mentorship/repositories/time_slot_repository.py
"""
Time slot data access.

The claim/release/withdraw methods are single conditional UPDATE statements.
Each one names the state it expects in its WHERE clause and reports whether a
row matched, so two requests racing for the same slot can never both win: the
database serializes the writes and only the first one still sees
``is_booked = false``.
"""

from datetime import datetime
import logging
from typing import List, Optional, Sequence, cast

from sqlalchemy.exc import SQLAlchemyError

from ..core.exceptions import RepositoryException
from ..models.time_slot import TimeSlot
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TimeSlotRepository(BaseRepository[TimeSlot]):
    """Repository for mentor time slots."""

    def __init__(self, db):
        super().__init__(db, TimeSlot)
        self.logger = logging.getLogger(__name__)

    # Queries

    def get_for_mentor(self, slot_id: str, mentor_id: str) -> Optional[TimeSlot]:
        """Return the slot only if it belongs to ``mentor_id``."""
        try:
            return cast(
                Optional[TimeSlot],
                self.db.query(TimeSlot)
                .filter(TimeSlot.id == slot_id, TimeSlot.mentor_id == mentor_id)
                .first(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting slot {slot_id} for mentor {mentor_id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve slot: {str(e)}")

    def get_slots_in_range(
        self,
        mentor_id: str,
        range_start: datetime,
        range_end: datetime,
        available_only: bool = False,
    ) -> List[TimeSlot]:
        """
        Slots of a mentor starting in ``[range_start, range_end)``, ordered by start.

        Args:
            mentor_id: Mentor whose slots to load
            range_start: Inclusive lower bound (aware UTC)
            range_end: Exclusive upper bound (aware UTC)
            available_only: Skip withdrawn slots
        """
        try:
            query = self.db.query(TimeSlot).filter(
                TimeSlot.mentor_id == mentor_id,
                TimeSlot.start_time >= range_start,
                TimeSlot.start_time < range_end,
            )
            if available_only:
                query = query.filter(TimeSlot.is_available.is_(True))
            return cast(
                List[TimeSlot], query.order_by(TimeSlot.start_time.asc(), TimeSlot.id.asc()).all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting slots for mentor {mentor_id}: {str(e)}")
            raise RepositoryException(f"Failed to get slots: {str(e)}")

    def find_overlapping(
        self, mentor_id: str, start_time: datetime, end_time: datetime
    ) -> List[TimeSlot]:
        """Slots of the mentor whose interval intersects ``[start_time, end_time)``."""
        try:
            query = self.db.query(TimeSlot).filter(
                TimeSlot.mentor_id == mentor_id,
                TimeSlot.start_time < end_time,
                TimeSlot.end_time > start_time,
            )
            if self.dialect_name == "postgresql":
                query = query.with_for_update()
            return cast(List[TimeSlot], query.order_by(TimeSlot.start_time.asc()).all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking slot overlap for mentor {mentor_id}: {str(e)}")
            raise RepositoryException(f"Failed to check slot overlap: {str(e)}")

    def create_slots(self, mentor_id: str, windows: Sequence[tuple]) -> List[TimeSlot]:
        """Insert available, unbooked slots for ``(start, end)`` windows."""
        try:
            slots = [
                TimeSlot(
                    mentor_id=mentor_id,
                    start_time=start,
                    end_time=end,
                    is_available=True,
                    is_booked=False,
                )
                for start, end in windows
            ]
            self.db.add_all(slots)
            self.db.flush()
            return slots
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating slots for mentor {mentor_id}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to create slots: {str(e)}")

    # Conditional writes

    def claim(self, slot_id: str, mentor_id: str, now: datetime) -> bool:
        """
        Atomically mark a bookable slot as booked.

        Returns:
            True if this call won the slot, False if the slot was not bookable
            at the moment of the write (unknown, withdrawn, booked, or past).
        """
        try:
            updated = (
                self.db.query(TimeSlot)
                .filter(
                    TimeSlot.id == slot_id,
                    TimeSlot.mentor_id == mentor_id,
                    TimeSlot.is_available.is_(True),
                    TimeSlot.is_booked.is_(False),
                    TimeSlot.start_time > now,
                )
                .update(
                    {
                        TimeSlot.is_booked: True,
                        TimeSlot.version: TimeSlot.version + 1,
                        TimeSlot.updated_at: now,
                    },
                    synchronize_session="fetch",
                )
            )
            return bool(updated == 1)
        except SQLAlchemyError as e:
            self.logger.error(f"Error claiming slot {slot_id}: {str(e)}")
            raise RepositoryException(f"Failed to claim slot: {str(e)}")

    def release(self, slot_id: str, now: datetime) -> bool:
        """
        Free a booked slot. ``is_available`` is left as the mentor set it.

        Returns:
            True if the slot was booked and is now free.
        """
        try:
            updated = (
                self.db.query(TimeSlot)
                .filter(TimeSlot.id == slot_id, TimeSlot.is_booked.is_(True))
                .update(
                    {
                        TimeSlot.is_booked: False,
                        TimeSlot.version: TimeSlot.version + 1,
                        TimeSlot.updated_at: now,
                    },
                    synchronize_session="fetch",
                )
            )
            return bool(updated == 1)
        except SQLAlchemyError as e:
            self.logger.error(f"Error releasing slot {slot_id}: {str(e)}")
            raise RepositoryException(f"Failed to release slot: {str(e)}")

    def withdraw(self, slot_id: str, mentor_id: str, now: datetime) -> bool:
        """Stop offering an unbooked slot. Booked slots are never withdrawn."""
        try:
            updated = (
                self.db.query(TimeSlot)
                .filter(
                    TimeSlot.id == slot_id,
                    TimeSlot.mentor_id == mentor_id,
                    TimeSlot.is_booked.is_(False),
                )
                .update(
                    {
                        TimeSlot.is_available: False,
                        TimeSlot.version: TimeSlot.version + 1,
                        TimeSlot.updated_at: now,
                    },
                    synchronize_session="fetch",
                )
            )
            return bool(updated == 1)
        except SQLAlchemyError as e:
            self.logger.error(f"Error withdrawing slot {slot_id}: {str(e)}")
            raise RepositoryException(f"Failed to withdraw slot: {str(e)}")
