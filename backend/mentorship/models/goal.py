# backend/mentorship/models/goal.py
"""
Mentorship goals and their milestones.

Status and progress are derived from milestones on read and never stored.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import GoalStatus
from ..database import Base
from .types import UTCDateTime


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class MentorshipGoal(Base):
    __tablename__ = "mentorship_goals"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    mentor_id = Column(String(64), nullable=False, index=True)
    mentee_id = Column(String(64), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    target_date = Column(Date, nullable=True)

    created_at = Column(UTCDateTime, nullable=False, default=_now_utc)
    updated_at = Column(UTCDateTime, nullable=True, onupdate=_now_utc)

    milestones = relationship(
        "GoalMilestone",
        back_populates="goal",
        order_by="GoalMilestone.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def progress(self) -> float:
        total = len(self.milestones)
        if total == 0:
            return 0.0
        done = sum(1 for m in self.milestones if m.is_completed)
        return done / total

    @property
    def status(self) -> GoalStatus:
        progress = self.progress
        if progress >= 1.0:
            return GoalStatus.COMPLETED
        if progress > 0.0:
            return GoalStatus.IN_PROGRESS
        return GoalStatus.NOT_STARTED

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.mentor_id, self.mentee_id)


class GoalMilestone(Base):
    __tablename__ = "goal_milestones"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    goal_id = Column(String(26), ForeignKey("mentorship_goals.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(UTCDateTime, nullable=True)
    position = Column(Integer, nullable=False, default=0)

    goal = relationship("MentorshipGoal", back_populates="milestones")
