# backend/mentorship/schemas/session.py
"""
Session schemas.

Responses carry the stored status plus the derived ``display_state`` and
``available_actions``, computed against the request's clock when the
response is built.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ..core.enums import DisplayState, SessionAction, SessionListFilter, SessionStatus, SessionType
from ..models.session import MentorSession
from ..services.session_lifecycle import available_actions, derive_display_state
from ._strict_base import StrictModel, StrictRequestModel


class SessionBookRequest(StrictRequestModel):
    mentor_id: str = Field(..., min_length=1, max_length=64)
    slot_id: str = Field(..., min_length=1, max_length=26)
    type: SessionType = Field(default=SessionType.ONE_ON_ONE, description="Session format")
    topic: str = Field(..., description="What the session is about (1-200 characters)")
    description: Optional[str] = None


class SessionCancelRequest(StrictRequestModel):
    reason: Optional[str] = None


class SessionRescheduleRequest(StrictRequestModel):
    new_slot_id: str = Field(..., min_length=1, max_length=26)


class SessionNotesUpdate(StrictRequestModel):
    notes: Optional[str] = None


class SessionResponse(StrictModel):
    id: str
    mentor_id: str
    mentee_id: str
    slot_id: str
    type: SessionType
    topic: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    status: SessionStatus
    meeting_url: Optional[str] = None
    notes: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by_id: Optional[str] = None
    cancellation_reason: Optional[str] = None
    reschedule_count: int = 0
    created_at: Optional[datetime] = None
    display_state: DisplayState
    available_actions: List[SessionAction]

    @classmethod
    def from_session(cls, session: MentorSession, now: datetime) -> "SessionResponse":
        return cls(
            id=session.id,
            mentor_id=session.mentor_id,
            mentee_id=session.mentee_id,
            slot_id=session.slot_id,
            type=SessionType(session.session_type),
            topic=session.topic,
            description=session.description,
            start_time=session.start_time,
            end_time=session.end_time,
            status=SessionStatus(session.status),
            meeting_url=session.meeting_url,
            notes=session.notes,
            confirmed_at=session.confirmed_at,
            completed_at=session.completed_at,
            cancelled_at=session.cancelled_at,
            cancelled_by_id=session.cancelled_by_id,
            cancellation_reason=session.cancellation_reason,
            reschedule_count=session.reschedule_count or 0,
            created_at=session.created_at,
            display_state=derive_display_state(
                session.status, session.start_time, session.end_time, now
            ),
            available_actions=available_actions(session, now),
        )


class SessionListResponse(StrictModel):
    filter: SessionListFilter
    items: List[SessionResponse]
    limit: int
    offset: int
