# backend/mentorship/models/__init__.py
"""
SQLAlchemy models for the mentorship scheduling service.

Importing this package registers every table on ``Base.metadata``.
"""

from .background_job import BackgroundJob
from .goal import GoalMilestone, MentorshipGoal
from .session import MentorSession
from .time_slot import TimeSlot

__all__ = [
    "BackgroundJob",
    "GoalMilestone",
    "MentorSession",
    "MentorshipGoal",
    "TimeSlot",
]
