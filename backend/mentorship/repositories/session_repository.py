# backend/mentorship/repositories/session_repository.py
"""
Mentor session data access.

Status and time changes go through ``compare_and_set``: an UPDATE keyed by
id, the version the caller read, and the statuses the caller's decision was
based on. A concurrent writer bumps the version first, so the stale write
matches no row and the service reports a conflict instead of overwriting.
"""

from datetime import datetime
import logging
from typing import Any, Iterable, List, cast

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ..core.enums import SessionListFilter, SessionStatus
from ..core.exceptions import RepositoryException
from ..models.session import MentorSession
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

_ACTIVE = [s.value for s in SessionStatus.active()]
_TERMINAL = [s.value for s in SessionStatus.terminal()]


class SessionRepository(BaseRepository[MentorSession]):
    """Repository for mentorship sessions."""

    def __init__(self, db: Session):
        super().__init__(db, MentorSession)
        self.logger = logging.getLogger(__name__)

    def list_for_participant(
        self,
        user_id: str,
        list_filter: SessionListFilter,
        now: datetime,
        limit: int = 100,
        offset: int = 0,
    ) -> List[MentorSession]:
        """
        Sessions where ``user_id`` is mentor or mentee.

        ``upcoming``: pending/confirmed sessions that have not ended, soonest first.
        ``past``: sessions that ended or reached a terminal status, latest first.
        """
        try:
            query = self.db.query(MentorSession).filter(
                or_(MentorSession.mentor_id == user_id, MentorSession.mentee_id == user_id)
            )
            if list_filter == SessionListFilter.UPCOMING:
                query = query.filter(
                    MentorSession.status.in_(_ACTIVE),
                    MentorSession.end_time >= now,
                ).order_by(MentorSession.start_time.asc(), MentorSession.id.asc())
            else:
                query = query.filter(
                    or_(MentorSession.end_time < now, MentorSession.status.in_(_TERMINAL))
                ).order_by(MentorSession.start_time.desc(), MentorSession.id.desc())

            return cast(List[MentorSession], query.offset(offset).limit(limit).all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing sessions for user {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to list sessions: {str(e)}")

    def get_for_participant_between(
        self, user_id: str, range_start: datetime, range_end: datetime
    ) -> List[MentorSession]:
        """Non-cancelled sessions of ``user_id`` starting in ``[range_start, range_end)``."""
        try:
            return cast(
                List[MentorSession],
                self.db.query(MentorSession)
                .filter(
                    or_(MentorSession.mentor_id == user_id, MentorSession.mentee_id == user_id),
                    MentorSession.status != SessionStatus.CANCELLED.value,
                    MentorSession.start_time >= range_start,
                    MentorSession.start_time < range_end,
                )
                .order_by(MentorSession.start_time.asc())
                .all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting sessions in range for {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to get sessions: {str(e)}")

    def count_active_for_slot(self, slot_id: str) -> int:
        """Number of non-cancelled sessions currently pointing at ``slot_id``."""
        try:
            return int(
                self.db.query(MentorSession)
                .filter(
                    MentorSession.slot_id == slot_id,
                    MentorSession.status != SessionStatus.CANCELLED.value,
                )
                .count()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting sessions for slot {slot_id}: {str(e)}")
            raise RepositoryException(f"Failed to count sessions: {str(e)}")

    def compare_and_set(
        self,
        session_id: str,
        expected_version: int,
        expected_statuses: Iterable[SessionStatus],
        values: dict[Any, Any],
    ) -> bool:
        """
        Apply ``values`` only if the row still has ``expected_version`` and one
        of ``expected_statuses``. Always bumps ``version``.

        Returns:
            True if exactly one row was updated.
        """
        try:
            statuses = [SessionStatus(s).value for s in expected_statuses]
            payload = dict(values)
            payload[MentorSession.version] = MentorSession.version + 1
            updated = (
                self.db.query(MentorSession)
                .filter(
                    MentorSession.id == session_id,
                    MentorSession.version == expected_version,
                    MentorSession.status.in_(statuses),
                )
                .update(payload, synchronize_session="fetch")
            )
            return bool(updated == 1)
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating session {session_id}: {str(e)}")
            raise RepositoryException(f"Failed to update session: {str(e)}")

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(joinedload(MentorSession.slot))
