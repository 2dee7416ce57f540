# backend/mentorship/repositories/factory.py
"""
Repository Factory for the mentorship scheduling service.

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

if TYPE_CHECKING:
    from .goal_repository import GoalRepository
    from .job_repository import JobRepository
    from .session_repository import SessionRepository
    from .time_slot_repository import TimeSlotRepository


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_time_slot_repository(db: Session) -> "TimeSlotRepository":
        from .time_slot_repository import TimeSlotRepository

        return TimeSlotRepository(db)

    @staticmethod
    def create_session_repository(db: Session) -> "SessionRepository":
        from .session_repository import SessionRepository

        return SessionRepository(db)

    @staticmethod
    def create_goal_repository(db: Session) -> "GoalRepository":
        from .goal_repository import GoalRepository

        return GoalRepository(db)

    @staticmethod
    def create_job_repository(db: Session) -> "JobRepository":
        from .job_repository import JobRepository

        return JobRepository(db)
