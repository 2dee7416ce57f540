# backend/mentorship/schemas/goal.py
from datetime import date, datetime
from typing import List, Optional

from pydantic import Field

from ..core.enums import GoalStatus
from ..models.goal import MentorshipGoal
from ._strict_base import StrictModel, StrictRequestModel


class GoalCreate(StrictRequestModel):
    mentor_id: str = Field(..., min_length=1, max_length=64)
    mentee_id: str = Field(..., min_length=1, max_length=64)
    title: str
    description: Optional[str] = None
    target_date: Optional[date] = None
    milestones: List[str] = Field(default_factory=list)


class MilestoneCreate(StrictRequestModel):
    title: str


class MilestoneResponse(StrictModel):
    id: str
    title: str
    is_completed: bool
    completed_at: Optional[datetime] = None
    position: int


class GoalResponse(StrictModel):
    id: str
    mentor_id: str
    mentee_id: str
    title: str
    description: Optional[str] = None
    target_date: Optional[date] = None
    status: GoalStatus
    progress: float = Field(..., ge=0.0, le=1.0)
    milestones: List[MilestoneResponse]

    @classmethod
    def from_goal(cls, goal: MentorshipGoal) -> "GoalResponse":
        return cls(
            id=goal.id,
            mentor_id=goal.mentor_id,
            mentee_id=goal.mentee_id,
            title=goal.title,
            description=goal.description,
            target_date=goal.target_date,
            status=goal.status,
            progress=goal.progress,
            milestones=[MilestoneResponse.model_validate(m) for m in goal.milestones],
        )
