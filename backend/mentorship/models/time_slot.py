# backend/mentorship/models/time_slot.py
"""
TimeSlot model.

A slot is a bounded interval a mentor has opened for booking. Its two flags
are the only shared mutable state the booking engines contend on:

- ``is_available``: the mentor offers the interval
- ``is_booked``: a non-cancelled session currently occupies it

``is_booked`` implies ``is_available``; the check constraint below backs the
invariant that every conditional write in the repository already keeps.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, Index, Integer, String
import ulid

from ..database import Base
from .types import UTCDateTime


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class TimeSlot(Base):
    __tablename__ = "time_slots"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    mentor_id = Column(String(64), nullable=False, index=True)

    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=False)

    is_available = Column(Boolean, nullable=False, default=True)
    is_booked = Column(Boolean, nullable=False, default=False)

    # Bumped by every conditional write; lets callers detect lost updates
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(UTCDateTime, nullable=False, default=_now_utc)
    updated_at = Column(UTCDateTime, nullable=True, onupdate=_now_utc)

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_time_slots_start_before_end"),
        CheckConstraint(
            "NOT is_booked OR is_available", name="ck_time_slots_booked_implies_available"
        ),
        Index("ix_time_slots_mentor_start", "mentor_id", "start_time"),
    )

    def __repr__(self) -> str:
        return (
            f"<TimeSlot {self.id} mentor={self.mentor_id} "
            f"{self.start_time.isoformat() if self.start_time else None} "
            f"available={self.is_available} booked={self.is_booked}>"
        )
