# backend/tests/repositories/test_session_repository.py
from datetime import timedelta

from mentorship.core.enums import SessionListFilter, SessionStatus
from mentorship.models.session import MentorSession
from mentorship.repositories.session_repository import SessionRepository
from tests._helpers import MENTEE_ID, MENTOR_ID, NOW, OTHER_MENTEE_ID, make_session, make_slot, reload


def _at(db, days: float, status=SessionStatus.PENDING, mentee_id=MENTEE_ID):
    slot = make_slot(db, start=NOW + timedelta(days=days))
    return make_session(db, slot, mentee_id=mentee_id, status=status)


class TestListForParticipant:
    def test_upcoming_is_active_not_ended_soonest_first(self, db):
        later = _at(db, 3)
        sooner = _at(db, 1, SessionStatus.CONFIRMED)
        _at(db, 2, SessionStatus.CANCELLED)
        _at(db, -2, SessionStatus.CONFIRMED)
        repo = SessionRepository(db)

        upcoming = repo.list_for_participant(MENTEE_ID, SessionListFilter.UPCOMING, NOW)

        assert [s.id for s in upcoming] == [sooner.id, later.id]

    def test_past_includes_ended_and_terminal_latest_first(self, db):
        _at(db, 1)
        cancelled_future = _at(db, 2, SessionStatus.CANCELLED)
        ended = _at(db, -2, SessionStatus.CONFIRMED)
        completed = _at(db, -1, SessionStatus.COMPLETED)
        repo = SessionRepository(db)

        past = repo.list_for_participant(MENTEE_ID, SessionListFilter.PAST, NOW)

        assert [s.id for s in past] == [cancelled_future.id, completed.id, ended.id]

    def test_in_progress_session_counts_as_upcoming(self, db):
        running = _at(db, -1 / 48, SessionStatus.CONFIRMED)  # started 30 minutes ago
        repo = SessionRepository(db)

        assert [s.id for s in repo.list_for_participant(MENTEE_ID, SessionListFilter.UPCOMING, NOW)] == [running.id]
        assert repo.list_for_participant(MENTEE_ID, SessionListFilter.PAST, NOW) == []

    def test_mentor_sees_sessions_of_all_mentees(self, db):
        _at(db, 1, mentee_id=MENTEE_ID)
        _at(db, 2, mentee_id=OTHER_MENTEE_ID)
        repo = SessionRepository(db)

        assert len(repo.list_for_participant(MENTOR_ID, SessionListFilter.UPCOMING, NOW)) == 2
        assert len(repo.list_for_participant(OTHER_MENTEE_ID, SessionListFilter.UPCOMING, NOW)) == 1

    def test_limit_and_offset(self, db):
        ids = [_at(db, d).id for d in (1, 2, 3)]
        repo = SessionRepository(db)

        page = repo.list_for_participant(MENTEE_ID, SessionListFilter.UPCOMING, NOW, limit=1, offset=1)
        assert [s.id for s in page] == [ids[1]]


class TestCompareAndSet:
    def test_matching_version_and_status_applies_and_bumps_version(self, db):
        session = _at(db, 1)
        repo = SessionRepository(db)

        assert repo.compare_and_set(
            session.id,
            expected_version=1,
            expected_statuses=[SessionStatus.PENDING],
            values={MentorSession.status: SessionStatus.CONFIRMED.value},
        )
        db.commit()

        stored = reload(db, MentorSession, session.id)
        assert stored.status == "confirmed"
        assert stored.version == 2

    def test_stale_version_matches_nothing(self, db):
        session = _at(db, 1)
        repo = SessionRepository(db)

        assert not repo.compare_and_set(
            session.id,
            expected_version=7,
            expected_statuses=[SessionStatus.PENDING],
            values={MentorSession.status: SessionStatus.CONFIRMED.value},
        )

    def test_unexpected_status_matches_nothing(self, db):
        session = _at(db, 1, SessionStatus.CANCELLED)
        repo = SessionRepository(db)

        assert not repo.compare_and_set(
            session.id,
            expected_version=1,
            expected_statuses=[SessionStatus.PENDING, SessionStatus.CONFIRMED],
            values={MentorSession.status: SessionStatus.CONFIRMED.value},
        )


def test_count_active_for_slot_ignores_cancelled(db):
    slot = make_slot(db)
    make_session(db, slot, status=SessionStatus.CANCELLED)
    repo = SessionRepository(db)
    assert repo.count_active_for_slot(slot.id) == 0

    make_session(db, slot, mentee_id=OTHER_MENTEE_ID)
    assert repo.count_active_for_slot(slot.id) == 1


def test_between_excludes_cancelled(db):
    kept = _at(db, 1)
    _at(db, 2, SessionStatus.CANCELLED)
    repo = SessionRepository(db)

    found = repo.get_for_participant_between(MENTEE_ID, NOW, NOW + timedelta(days=7))
    assert [s.id for s in found] == [kept.id]


def test_get_by_id_loads_slot(db):
    session = _at(db, 1)
    repo = SessionRepository(db)

    found = repo.get_by_id(session.id)

    assert found is not None
    assert found.slot.id == session.slot_id
    assert repo.get_by_id("01HZZZZZZZZZZZZZZZZZZZZZZZ") is None
