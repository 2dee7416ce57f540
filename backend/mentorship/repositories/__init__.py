# backend/mentorship/repositories/__init__.py
"""
Repository layer: all SQL lives here, services never query the session directly.
"""

from .base_repository import BaseRepository, IRepository
from .factory import RepositoryFactory
from .goal_repository import GoalRepository
from .job_repository import JobRepository
from .session_repository import SessionRepository
from .time_slot_repository import TimeSlotRepository

__all__ = [
    "BaseRepository",
    "GoalRepository",
    "IRepository",
    "JobRepository",
    "RepositoryFactory",
    "SessionRepository",
    "TimeSlotRepository",
]
