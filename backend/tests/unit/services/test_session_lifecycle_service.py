# backend/tests/unit/services/test_session_lifecycle_service.py
from datetime import timedelta

import pytest

from mentorship.core.enums import SessionListFilter, SessionStatus
from mentorship.core.exceptions import (
    ForbiddenException,
    InvalidSessionTransitionException,
    SessionInPastException,
    ValidationException,
)
from mentorship.models.session import MentorSession
from mentorship.services.session_lifecycle import SessionLifecycleService
from tests._helpers import MENTEE_ID, MENTOR_ID, NOW, make_session, make_slot, reload


@pytest.fixture
def service(db, clock, notifier):
    return SessionLifecycleService(db, clock=clock, notifier=notifier)


class TestConfirm:
    def test_mentor_confirms_pending_session(self, db, service, notifier):
        session = make_session(db, make_slot(db))

        confirmed = service.confirm(session.id, MENTOR_ID)

        assert confirmed.status == SessionStatus.CONFIRMED.value
        assert confirmed.confirmed_at == NOW
        assert confirmed.version == 2
        assert [e.session_id for e in notifier.of_type("SessionConfirmed")] == [session.id]

    def test_mentee_cannot_confirm(self, db, service):
        session = make_session(db, make_slot(db))
        with pytest.raises(ForbiddenException) as exc_info:
            service.confirm(session.id, MENTEE_ID)
        assert exc_info.value.code == "MENTOR_ONLY"

    def test_confirming_twice_is_an_invalid_transition(self, db, service):
        session = make_session(db, make_slot(db))
        service.confirm(session.id, MENTOR_ID)
        with pytest.raises(InvalidSessionTransitionException):
            service.confirm(session.id, MENTOR_ID)

    def test_cancelled_session_cannot_be_confirmed(self, db, service):
        session = make_session(db, make_slot(db), status=SessionStatus.CANCELLED)
        with pytest.raises(InvalidSessionTransitionException):
            service.confirm(session.id, MENTOR_ID)

    def test_started_session_cannot_be_confirmed(self, db, service, clock):
        slot = make_slot(db)
        session = make_session(db, slot)
        clock.set(slot.start_time + timedelta(minutes=1))
        with pytest.raises(SessionInPastException):
            service.confirm(session.id, MENTOR_ID)


class TestComplete:
    def test_mentor_completes_started_confirmed_session(self, db, service, clock, notifier):
        slot = make_slot(db)
        session = make_session(db, slot, status=SessionStatus.CONFIRMED)
        clock.set(slot.end_time)

        completed = service.complete(session.id, MENTOR_ID)

        assert completed.status == SessionStatus.COMPLETED.value
        assert completed.completed_at == slot.end_time
        assert len(notifier.of_type("SessionCompleted")) == 1

    def test_cannot_complete_before_start(self, db, service):
        session = make_session(db, make_slot(db), status=SessionStatus.CONFIRMED)
        with pytest.raises(ValidationException) as exc_info:
            service.complete(session.id, MENTOR_ID)
        assert exc_info.value.code == "SESSION_NOT_STARTED"

    def test_pending_session_cannot_be_completed(self, db, service, clock):
        slot = make_slot(db)
        session = make_session(db, slot)
        clock.set(slot.end_time)
        with pytest.raises(InvalidSessionTransitionException):
            service.complete(session.id, MENTOR_ID)

    def test_completed_is_terminal(self, db, service, clock):
        slot = make_slot(db)
        session = make_session(db, slot, status=SessionStatus.CONFIRMED)
        clock.set(slot.end_time)
        service.complete(session.id, MENTOR_ID)
        with pytest.raises(InvalidSessionTransitionException):
            service.complete(session.id, MENTOR_ID)


class TestQueries:
    def test_list_sessions_follows_the_clock(self, db, service, clock):
        slot = make_slot(db)
        session = make_session(db, slot, status=SessionStatus.CONFIRMED)

        assert [s.id for s in service.list_sessions(MENTEE_ID)] == [session.id]
        clock.set(slot.end_time + timedelta(minutes=1))
        assert service.list_sessions(MENTEE_ID) == []
        assert [s.id for s in service.list_sessions(MENTEE_ID, SessionListFilter.PAST)] == [
            session.id
        ]

    @pytest.mark.parametrize("limit,offset,code", [(0, 0, "INVALID_LIMIT"), (501, 0, "INVALID_LIMIT"), (10, -1, "INVALID_OFFSET")])
    def test_list_sessions_paging_bounds(self, service, limit, offset, code):
        with pytest.raises(ValidationException) as exc_info:
            service.list_sessions(MENTEE_ID, limit=limit, offset=offset)
        assert exc_info.value.code == code

    def test_get_session_requires_participant(self, db, service):
        session = make_session(db, make_slot(db))
        assert service.get_session(session.id, MENTEE_ID).id == session.id
        with pytest.raises(ForbiddenException):
            service.get_session(session.id, "stranger")


class TestNotes:
    def test_participants_can_edit_notes_in_any_status(self, db, service):
        session = make_session(db, make_slot(db), status=SessionStatus.CANCELLED)

        service.update_notes(session.id, MENTEE_ID, "  Bring the resume  ")

        assert reload(db, MentorSession, session.id).notes == "Bring the resume"

    def test_blank_notes_clear(self, db, service):
        session = make_session(db, make_slot(db))
        service.update_notes(session.id, MENTOR_ID, "draft")
        service.update_notes(session.id, MENTOR_ID, "   ")
        assert reload(db, MentorSession, session.id).notes is None

    def test_notes_length_limit(self, db, service):
        session = make_session(db, make_slot(db))
        with pytest.raises(ValidationException):
            service.update_notes(session.id, MENTOR_ID, "x" * 5001)
