# backend/mentorship/services/goal_service.py
"""Goal Service: mentorship goals with milestone-derived progress."""

from datetime import date
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.constants import MAX_DESCRIPTION_LENGTH, MAX_GOAL_TITLE_LENGTH
from ..core.exceptions import ForbiddenException, GoalNotFoundException, ValidationException
from ..models.goal import GoalMilestone, MentorshipGoal
from ..repositories.factory import RepositoryFactory
from ..repositories.goal_repository import GoalRepository
from .base import BaseService

logger = logging.getLogger(__name__)


def _clean_title(title: Optional[str], what: str) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationException(f"{what} title is required", code="TITLE_REQUIRED")
    if len(cleaned) > MAX_GOAL_TITLE_LENGTH:
        raise ValidationException(
            f"{what} title must be at most {MAX_GOAL_TITLE_LENGTH} characters",
            code="TITLE_TOO_LONG",
        )
    return cleaned


class GoalService(BaseService):
    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        goal_repository: Optional[GoalRepository] = None,
    ):
        super().__init__(db, clock=clock)
        self.goal_repository = goal_repository or RepositoryFactory.create_goal_repository(db)

    def _get_goal_for(self, goal_id: str, user_id: str) -> MentorshipGoal:
        goal = self.goal_repository.get_with_milestones(goal_id)
        if goal is None:
            raise GoalNotFoundException(goal_id)
        if not goal.is_participant(user_id):
            raise ForbiddenException(
                "You do not have access to this goal",
                code="NOT_GOAL_PARTICIPANT",
                details={"goal_id": goal_id},
            )
        return goal

    def _reload(self, goal_id: str) -> MentorshipGoal:
        goal = self.goal_repository.get_with_milestones(goal_id)
        if goal is None:
            raise GoalNotFoundException(goal_id)
        return goal

    @BaseService.measure_operation("create_goal")
    def create_goal(
        self,
        creator_id: str,
        mentor_id: str,
        mentee_id: str,
        title: str,
        description: Optional[str] = None,
        target_date: Optional[date] = None,
        milestones: Optional[List[str]] = None,
    ) -> MentorshipGoal:
        """Create a goal for a mentor/mentee pair. The creator must be one of them."""
        if creator_id not in (mentor_id, mentee_id):
            raise ForbiddenException(
                "Goals can only be created by the mentor or the mentee",
                code="NOT_GOAL_PARTICIPANT",
            )
        if mentor_id == mentee_id:
            raise ValidationException(
                "Mentor and mentee must be different users", code="SAME_PARTICIPANT"
            )
        clean_title = _clean_title(title, "Goal")
        clean_description = (description or "").strip() or None
        if clean_description and len(clean_description) > MAX_DESCRIPTION_LENGTH:
            raise ValidationException(
                f"Goal description must be at most {MAX_DESCRIPTION_LENGTH} characters",
                code="DESCRIPTION_TOO_LONG",
            )
        milestone_titles = [_clean_title(m, "Milestone") for m in (milestones or [])]

        with self.transaction():
            goal = self.goal_repository.create(
                mentor_id=mentor_id,
                mentee_id=mentee_id,
                title=clean_title,
                description=clean_description,
                target_date=target_date,
                created_at=self.now(),
            )
            for milestone_title in milestone_titles:
                self.goal_repository.add_milestone(goal.id, milestone_title)

        goal = self._reload(goal.id)
        self.log_operation("create_goal", goal_id=goal.id, mentor_id=mentor_id)
        return goal

    @BaseService.measure_operation("add_milestone")
    def add_milestone(self, goal_id: str, user_id: str, title: str) -> MentorshipGoal:
        goal = self._get_goal_for(goal_id, user_id)
        clean_title = _clean_title(title, "Milestone")
        with self.transaction():
            self.goal_repository.add_milestone(goal.id, clean_title)
        return self._reload(goal.id)

    @BaseService.measure_operation("toggle_milestone")
    def toggle_milestone(self, goal_id: str, milestone_id: str, user_id: str) -> MentorshipGoal:
        goal = self._get_goal_for(goal_id, user_id)
        milestone: Optional[GoalMilestone] = self.goal_repository.get_milestone(
            goal_id, milestone_id
        )
        if milestone is None:
            raise GoalNotFoundException(goal_id, milestone_id)

        with self.transaction():
            milestone.is_completed = not milestone.is_completed
            milestone.completed_at = self.now() if milestone.is_completed else None
            self.goal_repository.flush()

        return self._reload(goal.id)

    def list_goals(self, user_id: str) -> List[MentorshipGoal]:
        return self.goal_repository.list_for_participant(user_id)

    def get_goal(self, goal_id: str, user_id: str) -> MentorshipGoal:
        return self._get_goal_for(goal_id, user_id)
