# backend/mentorship/services/session_lifecycle.py
"""
Session lifecycle: the status state machine, derived display state, and the
mentor-driven transitions (confirm, complete) plus participant queries.

Display state and available actions are computed from the stored status,
the session interval, and the injected clock on every read. They are never
persisted, so they cannot drift as time passes.

State machine::

    pending   -> confirmed | cancelled
    confirmed -> completed | cancelled
    completed, cancelled: terminal

Rescheduling keeps the status (a self-edge on pending/confirmed) unless the
reconfirmation policy sends a confirmed session back to pending.
"""

from datetime import datetime
import logging
from typing import Dict, FrozenSet, List, Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.constants import DEFAULT_QUERY_LIMIT, MAX_NOTES_LENGTH, MAX_QUERY_LIMIT
from ..core.enums import DisplayState, SessionAction, SessionListFilter, SessionStatus
from ..core.exceptions import (
    ConcurrentModificationException,
    ForbiddenException,
    InvalidSessionTransitionException,
    SessionInPastException,
    SessionNotFoundException,
    ValidationException,
)
from ..events.publisher import NotificationDispatcher
from ..events.session_events import SessionCompleted, SessionConfirmed
from ..models.session import MentorSession
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..repositories.session_repository import SessionRepository
from .base import BaseService

logger = logging.getLogger(__name__)

TRANSITIONS: Dict[SessionStatus, FrozenSet[SessionStatus]] = {
    SessionStatus.PENDING: frozenset({SessionStatus.CONFIRMED, SessionStatus.CANCELLED}),
    SessionStatus.CONFIRMED: frozenset({SessionStatus.COMPLETED, SessionStatus.CANCELLED}),
    SessionStatus.COMPLETED: frozenset(),
    SessionStatus.CANCELLED: frozenset(),
}


def can_transition(current: SessionStatus, target: SessionStatus) -> bool:
    return target in TRANSITIONS[SessionStatus(current)]


def assert_transition(session_id: str, current: SessionStatus, target: SessionStatus) -> None:
    if not can_transition(current, target):
        raise InvalidSessionTransitionException(
            session_id, SessionStatus(current).value, SessionStatus(target).value
        )


def is_reschedulable_status(status: SessionStatus) -> bool:
    return SessionStatus(status) in SessionStatus.active()


def derive_display_state(
    status: SessionStatus, start_time: datetime, end_time: datetime, now: datetime
) -> DisplayState:
    """
    How a session should be presented at ``now``.

    A terminal session inside its own window is reported as past: it can no
    longer be joined.
    """
    if end_time < now:
        return DisplayState.PAST
    if start_time > now:
        return DisplayState.UPCOMING
    if SessionStatus(status) in SessionStatus.active():
        return DisplayState.JOINABLE_NOW
    return DisplayState.PAST


def available_actions(session: MentorSession, now: datetime) -> List[SessionAction]:
    state = derive_display_state(session.status, session.start_time, session.end_time, now)
    actions: List[SessionAction] = []
    if state == DisplayState.JOINABLE_NOW and session.meeting_url:
        actions.append(SessionAction.JOIN)
    if state == DisplayState.UPCOMING and is_reschedulable_status(session.status):
        actions.append(SessionAction.RESCHEDULE)
        actions.append(SessionAction.CANCEL)
    return actions


def load_session_for_actor(
    repository: SessionRepository, session_id: str, actor_id: Optional[str]
) -> MentorSession:
    """
    Fetch a session, enforcing that ``actor_id`` (when given) is a participant.

    Raises:
        SessionNotFoundException: Unknown id
        ForbiddenException: Actor is neither the mentor nor the mentee
    """
    session = repository.get_fresh(session_id)
    if session is None:
        raise SessionNotFoundException(session_id)
    if actor_id is not None and not session.is_participant(actor_id):
        raise ForbiddenException(
            "You do not have access to this session",
            code="NOT_SESSION_PARTICIPANT",
            details={"session_id": session_id},
        )
    return session


class SessionLifecycleService(BaseService):
    """Mentor-driven status transitions and participant-scoped session reads."""

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        notifier: Optional[NotificationDispatcher] = None,
        session_repository: Optional[SessionRepository] = None,
    ):
        super().__init__(db, clock=clock, notifier=notifier)
        self.session_repository = (
            session_repository or RepositoryFactory.create_session_repository(db)
        )

    def _require_mentor(self, session: MentorSession, actor_id: str) -> None:
        if session.mentor_id != actor_id:
            raise ForbiddenException(
                "Only the mentor can perform this action",
                code="MENTOR_ONLY",
                details={"session_id": session.id},
            )

    def _apply_transition(
        self, session: MentorSession, target: SessionStatus, values: dict
    ) -> MentorSession:
        current = SessionStatus(session.status)
        with self.transaction():
            updated = self.session_repository.compare_and_set(
                session.id,
                expected_version=session.version,
                expected_statuses=[current],
                values={MentorSession.status: target.value, **values},
            )
            if not updated:
                raise ConcurrentModificationException("session", session.id)

        prometheus_metrics.inc_session_transition(current.value, target.value)
        refreshed = self.session_repository.get_fresh(session.id)
        if refreshed is None:
            raise SessionNotFoundException(session.id)
        return refreshed

    @BaseService.measure_operation("confirm_session")
    def confirm(self, session_id: str, actor_id: str) -> MentorSession:
        """Mentor accepts a pending session that has not started yet."""
        session = load_session_for_actor(self.session_repository, session_id, actor_id)
        self._require_mentor(session, actor_id)
        assert_transition(session.id, session.status, SessionStatus.CONFIRMED)

        now = self.now()
        if session.start_time <= now:
            raise SessionInPastException(session.id, session.start_time.isoformat())

        session = self._apply_transition(
            session, SessionStatus.CONFIRMED, {MentorSession.confirmed_at: now}
        )
        self.log_operation("confirm_session", session_id=session.id, mentor_id=actor_id)
        self.publish_after_commit(
            SessionConfirmed(
                session_id=session.id,
                mentor_id=session.mentor_id,
                mentee_id=session.mentee_id,
                confirmed_at=now,
            )
        )
        return session

    @BaseService.measure_operation("complete_session")
    def complete(self, session_id: str, actor_id: str) -> MentorSession:
        """Mentor marks a confirmed session as held once it has started."""
        session = load_session_for_actor(self.session_repository, session_id, actor_id)
        self._require_mentor(session, actor_id)
        assert_transition(session.id, session.status, SessionStatus.COMPLETED)

        now = self.now()
        if session.start_time > now:
            raise ValidationException(
                "A session cannot be completed before it starts",
                code="SESSION_NOT_STARTED",
                details={"session_id": session.id, "start_time": session.start_time.isoformat()},
            )

        session = self._apply_transition(
            session, SessionStatus.COMPLETED, {MentorSession.completed_at: now}
        )
        self.log_operation("complete_session", session_id=session.id, mentor_id=actor_id)
        self.publish_after_commit(
            SessionCompleted(
                session_id=session.id,
                mentor_id=session.mentor_id,
                mentee_id=session.mentee_id,
                completed_at=now,
            )
        )
        return session

    @BaseService.measure_operation("list_sessions")
    def list_sessions(
        self,
        requester_id: str,
        list_filter: SessionListFilter = SessionListFilter.UPCOMING,
        limit: int = DEFAULT_QUERY_LIMIT,
        offset: int = 0,
    ) -> List[MentorSession]:
        if limit < 1 or limit > MAX_QUERY_LIMIT:
            raise ValidationException(
                f"limit must be between 1 and {MAX_QUERY_LIMIT}", code="INVALID_LIMIT"
            )
        if offset < 0:
            raise ValidationException("offset must not be negative", code="INVALID_OFFSET")
        return self.session_repository.list_for_participant(
            requester_id, SessionListFilter(list_filter), self.now(), limit=limit, offset=offset
        )

    def get_session(self, session_id: str, requester_id: str) -> MentorSession:
        return load_session_for_actor(self.session_repository, session_id, requester_id)

    @BaseService.measure_operation("update_session_notes")
    def update_notes(
        self, session_id: str, requester_id: str, notes: Optional[str]
    ) -> MentorSession:
        """Replace the shared notes of a session. Allowed in any status."""
        cleaned = notes.strip() if notes is not None else None
        if cleaned is not None and len(cleaned) > MAX_NOTES_LENGTH:
            raise ValidationException(
                f"Notes must be at most {MAX_NOTES_LENGTH} characters",
                code="NOTES_TOO_LONG",
                details={"max_length": MAX_NOTES_LENGTH},
            )

        session = load_session_for_actor(self.session_repository, session_id, requester_id)
        with self.transaction():
            session.notes = cleaned or None
            self.session_repository.flush()

        self.log_operation("update_session_notes", session_id=session.id, user_id=requester_id)
        return session
