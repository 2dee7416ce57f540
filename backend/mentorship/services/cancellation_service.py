# backend/mentorship/services/cancellation_service.py
"""Cancellation Service: end a session early and free its slot."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.constants import MAX_REASON_LENGTH
from ..core.enums import SessionStatus
from ..core.exceptions import (
    ConcurrentModificationException,
    SessionNotCancellableException,
    SessionNotFoundException,
    ValidationException,
)
from ..events.publisher import NotificationDispatcher
from ..events.session_events import SessionCancelled
from ..models.session import MentorSession
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..repositories.session_repository import SessionRepository
from ..repositories.time_slot_repository import TimeSlotRepository
from .base import BaseService
from .session_lifecycle import assert_transition, load_session_for_actor

logger = logging.getLogger(__name__)


class CancellationService(BaseService):
    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        notifier: Optional[NotificationDispatcher] = None,
        slot_repository: Optional[TimeSlotRepository] = None,
        session_repository: Optional[SessionRepository] = None,
    ):
        super().__init__(db, clock=clock, notifier=notifier)
        self.slot_repository = slot_repository or RepositoryFactory.create_time_slot_repository(db)
        self.session_repository = (
            session_repository or RepositoryFactory.create_session_repository(db)
        )

    @BaseService.measure_operation("cancel_session")
    def cancel(
        self,
        session_id: str,
        reason: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> MentorSession:
        """
        Cancel a pending or confirmed session that has not started.

        Cancelling an already-cancelled session is a no-op: the session is
        returned as is, nothing is written and no event is sent.

        Raises:
            SessionNotFoundException: Unknown session
            ForbiddenException: Actor is not a participant
            SessionNotCancellableException: Completed, or already started
            ConcurrentModificationException: Session changed since it was read
        """
        clean_reason = reason.strip() if reason else None
        if clean_reason and len(clean_reason) > MAX_REASON_LENGTH:
            raise ValidationException(
                f"Cancellation reason must be at most {MAX_REASON_LENGTH} characters",
                code="REASON_TOO_LONG",
                details={"max_length": MAX_REASON_LENGTH},
            )

        session = load_session_for_actor(self.session_repository, session_id, actor_id)
        current = SessionStatus(session.status)

        if current == SessionStatus.CANCELLED:
            self.logger.info(f"Session {session.id} already cancelled; nothing to do")
            return session
        if current == SessionStatus.COMPLETED:
            raise SessionNotCancellableException(session.id, "session is completed")
        assert_transition(session.id, current, SessionStatus.CANCELLED)

        now = self.now()
        if session.start_time <= now:
            raise SessionNotCancellableException(session.id, "session has already started")

        self.log_operation("cancel_session", session_id=session.id, cancelled_by=actor_id)

        try:
            with self.transaction():
                if not self.session_repository.compare_and_set(
                    session.id,
                    expected_version=session.version,
                    expected_statuses=[current],
                    values={
                        MentorSession.status: SessionStatus.CANCELLED.value,
                        MentorSession.cancelled_at: now,
                        MentorSession.cancelled_by_id: actor_id,
                        MentorSession.cancellation_reason: clean_reason or None,
                        MentorSession.updated_at: now,
                    },
                ):
                    raise ConcurrentModificationException("session", session.id)
                if not self.slot_repository.release(session.slot_id, now):
                    raise ConcurrentModificationException("slot", session.slot_id)
        except ConcurrentModificationException:
            # Lost to a concurrent cancel: same outcome the caller asked for
            latest = self.session_repository.get_fresh(session.id)
            if latest is not None and latest.status == SessionStatus.CANCELLED.value:
                return latest
            raise

        prometheus_metrics.inc_session_transition(current.value, SessionStatus.CANCELLED.value)

        cancelled = self.session_repository.get_fresh(session.id)
        if cancelled is None:
            raise SessionNotFoundException(session.id)

        self.publish_after_commit(
            SessionCancelled(
                session_id=cancelled.id,
                mentor_id=cancelled.mentor_id,
                mentee_id=cancelled.mentee_id,
                slot_id=cancelled.slot_id,
                cancelled_at=now,
                cancelled_by=actor_id,
                reason=cancelled.cancellation_reason,
            )
        )
        return cancelled
