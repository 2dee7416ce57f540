# backend/tests/unit/services/test_reschedule_service.py
"""Reschedule engine: claim new slot, move session, release old slot atomically."""

from datetime import timedelta

import pytest

from mentorship.core.enums import SessionStatus
from mentorship.core.exceptions import (
    ConcurrentModificationException,
    CrossMentorRescheduleException,
    ForbiddenException,
    SessionNotFoundException,
    SessionNotReschedulableException,
    SlotAlreadyBookedException,
    SlotInPastException,
    SlotNotFoundException,
    SlotUnavailableException,
    ValidationException,
)
from mentorship.models.session import MentorSession
from mentorship.models.time_slot import TimeSlot
from mentorship.services.reschedule_service import RescheduleService
from mentorship.services.scheduling_policy import SchedulingPolicy
from mentorship.services.slot_rules import ensure_slot_bookable
from tests._helpers import (
    MENTEE_ID,
    NOW,
    OTHER_MENTEE_ID,
    OTHER_MENTOR_ID,
    UNKNOWN_ID,
    make_session,
    make_slot,
    reload,
)


@pytest.fixture
def service(db, clock, notifier):
    return RescheduleService(db, clock=clock, notifier=notifier)


@pytest.fixture
def booked(db):
    """A confirmed session tomorrow plus a free slot the day after."""
    old_slot = make_slot(db, start=NOW + timedelta(days=1))
    new_slot = make_slot(db, start=NOW + timedelta(days=2), minutes=45)
    session = make_session(db, old_slot, status=SessionStatus.CONFIRMED, topic="Interview prep")
    return session, old_slot, new_slot


class TestRescheduleHappyPath:
    def test_moves_session_and_swaps_slot_flags(self, db, service, notifier, booked):
        session, old_slot, new_slot = booked

        moved = service.reschedule(session.id, new_slot.id, actor_id=MENTEE_ID)

        assert moved.slot_id == new_slot.id
        assert moved.start_time == new_slot.start_time
        assert moved.end_time == new_slot.end_time
        assert moved.status == SessionStatus.CONFIRMED.value
        assert moved.reschedule_count == 1
        assert moved.topic == "Interview prep"
        assert moved.mentee_id == MENTEE_ID
        assert reload(db, TimeSlot, old_slot.id).is_booked is False
        assert reload(db, TimeSlot, new_slot.id).is_booked is True

        events = notifier.of_type("SessionRescheduled")
        assert len(events) == 1
        assert events[0].old_slot_id == old_slot.id
        assert events[0].new_slot_id == new_slot.id
        assert events[0].old_start_time == old_slot.start_time
        assert events[0].rescheduled_by == MENTEE_ID

    def test_old_slot_becomes_bookable_again(self, db, service, booked):
        session, old_slot, new_slot = booked
        service.reschedule(session.id, new_slot.id)

        stored = reload(db, TimeSlot, old_slot.id)
        assert stored.is_booked is False
        assert ensure_slot_bookable(stored, stored.id, NOW) is stored

    def test_reconfirm_policy_sends_confirmed_back_to_pending(self, db, clock, notifier, booked):
        session, _, new_slot = booked
        service = RescheduleService(
            db, clock=clock, notifier=notifier, policy=SchedulingPolicy(reconfirm_on_reschedule=True)
        )

        moved = service.reschedule(session.id, new_slot.id)

        assert moved.status == SessionStatus.PENDING.value
        assert moved.confirmed_at is None

    def test_can_reschedule_twice(self, db, service, booked):
        session, old_slot, new_slot = booked
        third = make_slot(db, start=NOW + timedelta(days=3))

        service.reschedule(session.id, new_slot.id)
        moved = service.reschedule(session.id, third.id)

        assert moved.reschedule_count == 2
        assert reload(db, TimeSlot, new_slot.id).is_booked is False
        assert reload(db, TimeSlot, old_slot.id).is_booked is False


class TestRescheduleRejections:
    def _assert_unchanged(self, db, session, old_slot):
        stored = reload(db, MentorSession, session.id)
        assert stored.slot_id == old_slot.id
        assert stored.reschedule_count == 0
        assert reload(db, TimeSlot, old_slot.id).is_booked is True

    def test_new_slot_already_booked(self, db, service, booked):
        session, old_slot, _ = booked
        taken = make_slot(db, start=NOW + timedelta(days=4))
        make_session(db, taken, mentee_id=OTHER_MENTEE_ID)

        with pytest.raises(SlotAlreadyBookedException):
            service.reschedule(session.id, taken.id)
        self._assert_unchanged(db, session, old_slot)

    def test_new_slot_withdrawn(self, db, service, booked):
        session, old_slot, _ = booked
        closed = make_slot(db, start=NOW + timedelta(days=4), is_available=False)
        with pytest.raises(SlotUnavailableException):
            service.reschedule(session.id, closed.id)

    def test_new_slot_in_the_past(self, db, service, booked):
        session, _, _ = booked
        past = make_slot(db, start=NOW - timedelta(days=1))
        with pytest.raises(SlotInPastException):
            service.reschedule(session.id, past.id)

    def test_unknown_new_slot(self, service, booked):
        session, _, _ = booked
        with pytest.raises(SlotNotFoundException):
            service.reschedule(session.id, UNKNOWN_ID)

    def test_unknown_session(self, service, booked):
        _, _, new_slot = booked
        with pytest.raises(SessionNotFoundException):
            service.reschedule(UNKNOWN_ID, new_slot.id)

    def test_cross_mentor_slot(self, db, service, booked):
        session, old_slot, _ = booked
        foreign = make_slot(db, mentor_id=OTHER_MENTOR_ID, start=NOW + timedelta(days=2))

        with pytest.raises(CrossMentorRescheduleException):
            service.reschedule(session.id, foreign.id)
        self._assert_unchanged(db, session, old_slot)

    def test_same_slot(self, service, booked):
        session, old_slot, _ = booked
        with pytest.raises(ValidationException) as exc_info:
            service.reschedule(session.id, old_slot.id)
        assert exc_info.value.code == "SAME_SLOT"

    @pytest.mark.parametrize("status", [SessionStatus.CANCELLED, SessionStatus.COMPLETED])
    def test_terminal_session(self, db, service, status):
        old_slot = make_slot(db)
        new_slot = make_slot(db, start=NOW + timedelta(days=2))
        session = make_session(db, old_slot, status=status)

        with pytest.raises(SessionNotReschedulableException):
            service.reschedule(session.id, new_slot.id)

    def test_started_session(self, db, service, clock, booked):
        session, _, new_slot = booked
        clock.set(session.start_time + timedelta(minutes=5))
        with pytest.raises(SessionNotReschedulableException):
            service.reschedule(session.id, new_slot.id)

    def test_non_participant(self, service, booked):
        session, _, new_slot = booked
        with pytest.raises(ForbiddenException):
            service.reschedule(session.id, new_slot.id, actor_id="stranger")

    def test_failure_mid_transaction_rolls_back_the_claim(
        self, db, service, notifier, booked, monkeypatch
    ):
        session, old_slot, new_slot = booked
        monkeypatch.setattr(service.slot_repository, "release", lambda slot_id, now: False)

        with pytest.raises(ConcurrentModificationException):
            service.reschedule(session.id, new_slot.id)

        self._assert_unchanged(db, session, old_slot)
        assert reload(db, TimeSlot, new_slot.id).is_booked is False
        assert notifier.of_type("SessionRescheduled") == []

    def test_stale_session_version_is_a_conflict(self, db, service, booked, monkeypatch):
        session, old_slot, new_slot = booked
        monkeypatch.setattr(
            service.session_repository, "compare_and_set", lambda *args, **kwargs: False
        )

        with pytest.raises(ConcurrentModificationException) as exc_info:
            service.reschedule(session.id, new_slot.id)

        assert exc_info.value.details["resource"] == "session"
        assert reload(db, TimeSlot, new_slot.id).is_booked is False
