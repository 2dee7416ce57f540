# backend/tests/unit/services/test_booking_service.py
"""Booking engine: slot claim plus session insert, all or nothing."""

from datetime import timedelta

import pytest

from mentorship.core.enums import SessionStatus, SessionType
from mentorship.core.exceptions import (
    SlotAlreadyBookedException,
    SlotInPastException,
    SlotNotFoundException,
    SlotUnavailableException,
    ValidationException,
)
from mentorship.models.session import MentorSession
from mentorship.models.time_slot import TimeSlot
from mentorship.repositories.session_repository import SessionRepository
from mentorship.services.booking_service import BookingService
from mentorship.services.meeting_links import TemplateMeetingLinkProvisioner
from mentorship.services.scheduling_policy import SchedulingPolicy
from tests._helpers import (
    MENTEE_ID,
    MENTOR_ID,
    NOW,
    OTHER_MENTEE_ID,
    OTHER_MENTOR_ID,
    UNKNOWN_ID,
    FailingDispatcher,
    make_slot,
    reload,
)


@pytest.fixture
def service(db, clock, notifier):
    return BookingService(db, clock=clock, notifier=notifier)


def _book(service, slot_id, requester_id=MENTEE_ID, mentor_id=MENTOR_ID, topic="Career planning"):
    return service.book(
        mentor_id=mentor_id,
        slot_id=slot_id,
        requester_id=requester_id,
        session_type=SessionType.ONE_ON_ONE,
        topic=topic,
    )


class TestBookHappyPath:
    def test_creates_pending_session_and_claims_slot(self, db, service, notifier):
        slot = make_slot(db)

        session = _book(service, slot.id)

        assert session.status == SessionStatus.PENDING.value
        assert session.mentor_id == MENTOR_ID
        assert session.mentee_id == MENTEE_ID
        assert session.slot_id == slot.id
        assert session.start_time == slot.start_time
        assert session.end_time == slot.end_time
        assert session.reschedule_count == 0
        assert reload(db, TimeSlot, slot.id).is_booked is True

        booked = notifier.of_type("SessionBooked")
        assert len(booked) == 1
        assert booked[0].session_id == session.id
        assert booked[0].status == "pending"

    def test_topic_and_description_are_trimmed(self, db, service):
        slot = make_slot(db)
        session = service.book(
            mentor_id=MENTOR_ID,
            slot_id=slot.id,
            requester_id=MENTEE_ID,
            session_type=SessionType.WORKSHOP,
            topic="  System design  ",
            description="   ",
        )
        assert session.topic == "System design"
        assert session.description is None
        assert session.session_type == "workshop"

    def test_auto_confirm_policy_books_confirmed(self, db, clock, notifier):
        service = BookingService(
            db, clock=clock, notifier=notifier, policy=SchedulingPolicy(auto_confirm=True)
        )
        slot = make_slot(db)

        session = _book(service, slot.id)

        assert session.status == SessionStatus.CONFIRMED.value
        assert session.confirmed_at == NOW

    def test_meeting_link_is_provisioned_after_commit(self, db, clock, notifier):
        service = BookingService(
            db,
            clock=clock,
            notifier=notifier,
            meeting_links=TemplateMeetingLinkProvisioner("https://meet.example.com/{session_id}"),
        )
        slot = make_slot(db)

        session = _book(service, slot.id)

        stored = reload(db, MentorSession, session.id)
        assert stored.meeting_url == f"https://meet.example.com/{session.id}"

    def test_failing_link_provisioner_does_not_undo_booking(self, db, clock, notifier):
        class Broken:
            def provision(self, session):
                raise RuntimeError("video provider down")

        service = BookingService(db, clock=clock, notifier=notifier, meeting_links=Broken())
        slot = make_slot(db)

        session = _book(service, slot.id)

        stored = reload(db, MentorSession, session.id)
        assert stored is not None
        assert stored.meeting_url is None
        assert len(notifier.of_type("SessionBooked")) == 1

    def test_failing_notifier_does_not_undo_booking(self, db, clock, caplog):
        service = BookingService(db, clock=clock, notifier=FailingDispatcher())
        slot = make_slot(db)

        session = _book(service, slot.id)

        assert reload(db, MentorSession, session.id).status == "pending"
        assert reload(db, TimeSlot, slot.id).is_booked is True
        assert "Failed to dispatch SessionBooked" in caplog.text


class TestBookRejections:
    def test_double_booking_rejected_and_first_session_kept(self, db, service, notifier):
        slot = make_slot(db)
        first = _book(service, slot.id)

        with pytest.raises(SlotAlreadyBookedException):
            _book(service, slot.id, requester_id=OTHER_MENTEE_ID)

        assert SessionRepository(db).count_active_for_slot(slot.id) == 1
        assert reload(db, MentorSession, first.id).mentee_id == MENTEE_ID
        assert len(notifier.of_type("SessionBooked")) == 1

    def test_slot_in_the_past(self, db, service):
        slot = make_slot(db, start=NOW - timedelta(hours=2))
        with pytest.raises(SlotInPastException):
            _book(service, slot.id)

    def test_slot_starting_now_is_past(self, db, service):
        slot = make_slot(db, start=NOW)
        with pytest.raises(SlotInPastException):
            _book(service, slot.id)

    def test_withdrawn_slot(self, db, service):
        slot = make_slot(db, is_available=False)
        with pytest.raises(SlotUnavailableException):
            _book(service, slot.id)

    def test_unknown_slot(self, service):
        with pytest.raises(SlotNotFoundException):
            _book(service, UNKNOWN_ID)

    def test_slot_of_another_mentor_is_not_found(self, db, service):
        slot = make_slot(db, mentor_id=OTHER_MENTOR_ID)
        with pytest.raises(SlotNotFoundException):
            _book(service, slot.id)

    def test_self_booking(self, db, service):
        slot = make_slot(db)
        with pytest.raises(ValidationException) as exc_info:
            _book(service, slot.id, requester_id=MENTOR_ID)
        assert exc_info.value.code == "SELF_BOOKING"
        assert reload(db, TimeSlot, slot.id).is_booked is False

    @pytest.mark.parametrize(
        "topic,code",
        [("", "TOPIC_REQUIRED"), ("   ", "TOPIC_REQUIRED"), ("x" * 201, "TOPIC_TOO_LONG")],
    )
    def test_topic_validation(self, db, service, topic, code):
        slot = make_slot(db)
        with pytest.raises(ValidationException) as exc_info:
            _book(service, slot.id, topic=topic)
        assert exc_info.value.code == code

    def test_topic_at_limit_is_accepted(self, db, service):
        slot = make_slot(db)
        assert len(_book(service, slot.id, topic="x" * 200).topic) == 200

    def test_lost_race_after_precheck_reports_already_booked(self, db, service, session_factory):
        slot = make_slot(db)

        # A concurrent request claims the slot; ``db`` still holds the stale row
        other = session_factory()
        try:
            other.query(TimeSlot).filter(TimeSlot.id == slot.id).update({TimeSlot.is_booked: True})
            other.commit()
        finally:
            other.close()
        assert slot.is_booked is False

        with pytest.raises(SlotAlreadyBookedException):
            _book(service, slot.id)
        assert SessionRepository(db).count_active_for_slot(slot.id) == 0
