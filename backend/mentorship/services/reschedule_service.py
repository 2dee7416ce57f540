# backend/mentorship/services/reschedule_service.py
"""
Reschedule Service: move a session to another slot of the same mentor.

The three writes (claim the new slot, move the session, release the old
slot) share one transaction and each is conditional. If any of them matches
no row the whole reschedule rolls back, so a failed attempt leaves both slots
and the session exactly as they were.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.enums import SessionStatus
from ..core.exceptions import (
    ConcurrentModificationException,
    CrossMentorRescheduleException,
    SessionNotFoundException,
    SessionNotReschedulableException,
    SlotNotFoundException,
    ValidationException,
)
from ..events.publisher import NotificationDispatcher
from ..events.session_events import SessionRescheduled
from ..models.session import MentorSession
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..repositories.session_repository import SessionRepository
from ..repositories.time_slot_repository import TimeSlotRepository
from .base import BaseService
from .scheduling_policy import SchedulingPolicy
from .session_lifecycle import is_reschedulable_status, load_session_for_actor
from .slot_rules import claim_slot_or_raise, ensure_slot_bookable

logger = logging.getLogger(__name__)


class RescheduleService(BaseService):
    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        notifier: Optional[NotificationDispatcher] = None,
        policy: Optional[SchedulingPolicy] = None,
        slot_repository: Optional[TimeSlotRepository] = None,
        session_repository: Optional[SessionRepository] = None,
    ):
        super().__init__(db, clock=clock, notifier=notifier)
        self.policy = policy or SchedulingPolicy()
        self.slot_repository = slot_repository or RepositoryFactory.create_time_slot_repository(db)
        self.session_repository = (
            session_repository or RepositoryFactory.create_session_repository(db)
        )

    def validate_reschedule_allowed(self, session: MentorSession) -> None:
        """Raise if the session's status or start time rules out moving it."""
        if not is_reschedulable_status(session.status):
            raise SessionNotReschedulableException(session.id, f"session is {session.status}")
        if session.start_time <= self.now():
            raise SessionNotReschedulableException(session.id, "session has already started")

    @BaseService.measure_operation("reschedule_session")
    def reschedule(
        self, session_id: str, new_slot_id: str, actor_id: Optional[str] = None
    ) -> MentorSession:
        """
        Move a pending or confirmed future session to ``new_slot_id``.

        Topic, description, participants and notes are preserved. The status
        is kept unless the policy asks confirmed sessions to be re-confirmed.

        Raises:
            SessionNotFoundException: Unknown session
            ForbiddenException: Actor is not a participant
            SessionNotReschedulableException: Terminal or already started
            ValidationException: New slot is the current slot
            SlotNotFoundException: Unknown new slot
            CrossMentorRescheduleException: New slot belongs to another mentor
            SlotInPastException / SlotUnavailableException / SlotAlreadyBookedException:
                New slot is not bookable
            ConcurrentModificationException: Session or old slot changed underneath us
        """
        session = load_session_for_actor(self.session_repository, session_id, actor_id)
        self.validate_reschedule_allowed(session)

        if new_slot_id == session.slot_id:
            raise ValidationException(
                "The session is already booked on this slot",
                code="SAME_SLOT",
                details={"session_id": session.id, "slot_id": new_slot_id},
            )

        now = self.now()
        new_slot = self.slot_repository.get_fresh(new_slot_id)
        if new_slot is None:
            raise SlotNotFoundException(new_slot_id)
        if new_slot.mentor_id != session.mentor_id:
            raise CrossMentorRescheduleException(session.id, session.mentor_id, new_slot.mentor_id)
        ensure_slot_bookable(new_slot, new_slot_id, now)

        current_status = SessionStatus(session.status)
        new_status = current_status
        if current_status == SessionStatus.CONFIRMED and self.policy.should_reconfirm(session):
            new_status = SessionStatus.PENDING

        old_slot_id = session.slot_id
        old_start = session.start_time

        self.log_operation(
            "reschedule_session",
            session_id=session.id,
            old_slot_id=old_slot_id,
            new_slot_id=new_slot_id,
        )

        values = {
            MentorSession.slot_id: new_slot.id,
            MentorSession.start_time: new_slot.start_time,
            MentorSession.end_time: new_slot.end_time,
            MentorSession.status: new_status.value,
            MentorSession.reschedule_count: MentorSession.reschedule_count + 1,
            MentorSession.updated_at: now,
        }
        if new_status != current_status:
            values[MentorSession.confirmed_at] = None

        with self.transaction():
            claim_slot_or_raise(
                self.slot_repository, new_slot.id, session.mentor_id, now, "reschedule"
            )
            if not self.session_repository.compare_and_set(
                session.id,
                expected_version=session.version,
                expected_statuses=[current_status],
                values=values,
            ):
                raise ConcurrentModificationException("session", session.id)
            if not self.slot_repository.release(old_slot_id, now):
                raise ConcurrentModificationException("slot", old_slot_id)

        if new_status != current_status:
            prometheus_metrics.inc_session_transition(current_status.value, new_status.value)

        moved = self.session_repository.get_fresh(session.id)
        if moved is None:
            raise SessionNotFoundException(session.id)

        self.publish_after_commit(
            SessionRescheduled(
                session_id=moved.id,
                mentor_id=moved.mentor_id,
                mentee_id=moved.mentee_id,
                old_slot_id=old_slot_id,
                new_slot_id=moved.slot_id,
                old_start_time=old_start,
                new_start_time=moved.start_time,
                status=moved.status,
                rescheduled_by=actor_id,
            )
        )
        return moved
