# backend/mentorship/models/session.py
"""
MentorSession model.

A session is the booked commitment between a mentor and a mentee on one of
the mentor's slots. ``start_time``/``end_time`` are copied from the slot at
booking time and moved together with ``slot_id`` on reschedule. Sessions are
never deleted; cancellation is a terminal status.
"""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import SessionStatus, SessionType
from ..database import Base
from .types import UTCDateTime


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class MentorSession(Base):
    __tablename__ = "mentor_sessions"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    # Participants (identities are owned by the external identity provider)
    mentor_id = Column(String(64), nullable=False, index=True)
    mentee_id = Column(String(64), nullable=False, index=True)

    slot_id = Column(String(26), ForeignKey("time_slots.id"), nullable=False, index=True)

    session_type = Column(String(20), nullable=False, default=SessionType.ONE_ON_ONE.value)
    topic = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    start_time = Column(UTCDateTime, nullable=False, index=True)
    end_time = Column(UTCDateTime, nullable=False)

    status = Column(String(20), nullable=False, default=SessionStatus.PENDING.value, index=True)
    meeting_url = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)

    # Lifecycle timestamps
    confirmed_at = Column(UTCDateTime, nullable=True)
    completed_at = Column(UTCDateTime, nullable=True)
    cancelled_at = Column(UTCDateTime, nullable=True)

    # Cancellation tracking
    cancelled_by_id = Column(String(64), nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    reschedule_count = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(UTCDateTime, nullable=False, default=_now_utc)
    updated_at = Column(UTCDateTime, nullable=True, onupdate=_now_utc)

    slot = relationship("TimeSlot")

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_mentor_sessions_start_before_end"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'completed', 'cancelled')",
            name="ck_mentor_sessions_status",
        ),
        CheckConstraint(
            "session_type IN ('one-on-one', 'group', 'workshop')",
            name="ck_mentor_sessions_type",
        ),
        Index("ix_mentor_sessions_mentor_start", "mentor_id", "start_time"),
        Index("ix_mentor_sessions_mentee_start", "mentee_id", "start_time"),
    )

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.mentor_id, self.mentee_id)

    def __repr__(self) -> str:
        return f"<MentorSession {self.id} {self.status} slot={self.slot_id}>"
