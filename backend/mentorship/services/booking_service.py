# backend/mentorship/services/booking_service.py
"""
Booking Service for the mentorship scheduling core.

Turns a bookable slot into a session. The slot is claimed with a single
conditional UPDATE, and the session row is inserted in the same transaction,
so when two mentees race for one slot exactly one of them gets a session and
the other gets a conflict error.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.constants import MAX_DESCRIPTION_LENGTH, MAX_TOPIC_LENGTH
from ..core.enums import SessionStatus, SessionType
from ..core.exceptions import SlotNotFoundException, ValidationException
from ..events.publisher import NotificationDispatcher
from ..events.session_events import SessionBooked
from ..models.session import MentorSession
from ..repositories.factory import RepositoryFactory
from ..repositories.session_repository import SessionRepository
from ..repositories.time_slot_repository import TimeSlotRepository
from .base import BaseService
from .meeting_links import MeetingLinkProvisioner
from .scheduling_policy import SchedulingPolicy
from .slot_rules import claim_slot_or_raise, ensure_slot_bookable

logger = logging.getLogger(__name__)


def normalize_topic(topic: Optional[str]) -> str:
    cleaned = (topic or "").strip()
    if not cleaned:
        raise ValidationException("Session topic is required", code="TOPIC_REQUIRED")
    if len(cleaned) > MAX_TOPIC_LENGTH:
        raise ValidationException(
            f"Session topic must be at most {MAX_TOPIC_LENGTH} characters",
            code="TOPIC_TOO_LONG",
            details={"max_length": MAX_TOPIC_LENGTH},
        )
    return cleaned


def normalize_description(description: Optional[str]) -> Optional[str]:
    if description is None:
        return None
    cleaned = description.strip()
    if len(cleaned) > MAX_DESCRIPTION_LENGTH:
        raise ValidationException(
            f"Session description must be at most {MAX_DESCRIPTION_LENGTH} characters",
            code="DESCRIPTION_TOO_LONG",
            details={"max_length": MAX_DESCRIPTION_LENGTH},
        )
    return cleaned or None


class BookingService(BaseService):
    """Creates sessions on mentor slots."""

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        notifier: Optional[NotificationDispatcher] = None,
        meeting_links: Optional[MeetingLinkProvisioner] = None,
        policy: Optional[SchedulingPolicy] = None,
        slot_repository: Optional[TimeSlotRepository] = None,
        session_repository: Optional[SessionRepository] = None,
    ):
        super().__init__(db, clock=clock, notifier=notifier)
        self.meeting_links = meeting_links
        self.policy = policy or SchedulingPolicy()
        self.slot_repository = slot_repository or RepositoryFactory.create_time_slot_repository(db)
        self.session_repository = (
            session_repository or RepositoryFactory.create_session_repository(db)
        )

    @BaseService.measure_operation("book_session")
    def book(
        self,
        mentor_id: str,
        slot_id: str,
        requester_id: str,
        session_type: SessionType,
        topic: str,
        description: Optional[str] = None,
    ) -> MentorSession:
        """
        Book ``slot_id`` of ``mentor_id`` for ``requester_id``.

        Args:
            mentor_id: Owner of the slot
            slot_id: Slot to occupy
            requester_id: The mentee making the booking
            session_type: one-on-one, group or workshop
            topic: Required, trimmed, at most 200 characters
            description: Optional free text

        Returns:
            The new session, pending or confirmed per the scheduling policy

        Raises:
            ValidationException: Bad input or self-booking
            SlotNotFoundException: Unknown slot, or slot of a different mentor
            SlotInPastException: Slot already started
            SlotUnavailableException: Slot withdrawn by the mentor
            SlotAlreadyBookedException: Slot taken, including by a concurrent request
        """
        # 1. Validate input before touching shared state
        clean_topic = normalize_topic(topic)
        clean_description = normalize_description(description)
        try:
            session_type = SessionType(session_type)
        except ValueError:
            raise ValidationException(
                f"Unknown session type: {session_type}", code="INVALID_SESSION_TYPE"
            )
        if requester_id == mentor_id:
            raise ValidationException(
                "You cannot book a session with yourself", code="SELF_BOOKING"
            )

        self.log_operation(
            "book_session", mentor_id=mentor_id, slot_id=slot_id, mentee_id=requester_id
        )

        # 2. Precise error for the common cases without writing anything
        now = self.now()
        slot = self.slot_repository.get_for_mentor(slot_id, mentor_id)
        if slot is None:
            raise SlotNotFoundException(slot_id, mentor_id)
        ensure_slot_bookable(slot, slot_id, now)

        status = (
            SessionStatus.CONFIRMED
            if self.policy.should_auto_confirm(mentor_id, session_type.value)
            else SessionStatus.PENDING
        )

        # 3. Claim and insert atomically
        with self.transaction():
            claim_slot_or_raise(self.slot_repository, slot_id, mentor_id, now, "book")
            session = self.session_repository.create(
                mentor_id=mentor_id,
                mentee_id=requester_id,
                slot_id=slot.id,
                session_type=session_type.value,
                topic=clean_topic,
                description=clean_description,
                start_time=slot.start_time,
                end_time=slot.end_time,
                status=status.value,
                confirmed_at=now if status == SessionStatus.CONFIRMED else None,
                reschedule_count=0,
                version=1,
                created_at=now,
            )

        # 4. Post-commit side effects never undo the booking
        self._handle_post_booking_tasks(session)
        return session

    def _handle_post_booking_tasks(self, session: MentorSession) -> None:
        self._provision_meeting_link(session)
        self.publish_after_commit(
            SessionBooked(
                session_id=session.id,
                mentor_id=session.mentor_id,
                mentee_id=session.mentee_id,
                slot_id=session.slot_id,
                status=session.status,
                start_time=session.start_time,
                end_time=session.end_time,
            )
        )

    def _provision_meeting_link(self, session: MentorSession) -> None:
        if self.meeting_links is None:
            return
        try:
            url = self.meeting_links.provision(session)
            if not url:
                return
            with self.transaction():
                session.meeting_url = url
                self.session_repository.flush()
        except Exception as e:
            self.logger.error(f"Failed to provision meeting link for session {session.id}: {e}")
