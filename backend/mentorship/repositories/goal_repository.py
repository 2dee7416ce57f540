# backend/mentorship/repositories/goal_repository.py
import logging
from typing import List, Optional, cast

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..core.exceptions import RepositoryException
from ..models.goal import GoalMilestone, MentorshipGoal
from .base_repository import BaseRepository


class GoalRepository(BaseRepository[MentorshipGoal]):
    """Repository for mentorship goals and their milestones."""

    def __init__(self, db: Session):
        super().__init__(db, MentorshipGoal)
        self.logger = logging.getLogger(__name__)

    def list_for_participant(self, user_id: str) -> List[MentorshipGoal]:
        try:
            return cast(
                List[MentorshipGoal],
                self.db.query(MentorshipGoal)
                .options(selectinload(MentorshipGoal.milestones))
                .filter(
                    or_(MentorshipGoal.mentor_id == user_id, MentorshipGoal.mentee_id == user_id)
                )
                .order_by(MentorshipGoal.created_at.desc(), MentorshipGoal.id.desc())
                .all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing goals for {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to list goals: {str(e)}")

    def get_milestone(self, goal_id: str, milestone_id: str) -> Optional[GoalMilestone]:
        try:
            return cast(
                Optional[GoalMilestone],
                self.db.query(GoalMilestone)
                .filter(GoalMilestone.id == milestone_id, GoalMilestone.goal_id == goal_id)
                .first(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting milestone {milestone_id}: {str(e)}")
            raise RepositoryException(f"Failed to get milestone: {str(e)}")

    def add_milestone(self, goal_id: str, title: str) -> GoalMilestone:
        """Append a milestone after the current last position."""
        try:
            last = (
                self.db.query(func.max(GoalMilestone.position))
                .filter(GoalMilestone.goal_id == goal_id)
                .scalar()
            )
            milestone = GoalMilestone(
                goal_id=goal_id,
                title=title,
                is_completed=False,
                position=0 if last is None else int(last) + 1,
            )
            self.db.add(milestone)
            self.db.flush()
            return milestone
        except SQLAlchemyError as e:
            self.logger.error(f"Error adding milestone to goal {goal_id}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to add milestone: {str(e)}")

    def get_with_milestones(self, goal_id: str) -> Optional[MentorshipGoal]:
        """Load a goal and reload its milestone collection from the database."""
        try:
            return cast(
                Optional[MentorshipGoal],
                self.db.query(MentorshipGoal)
                .options(selectinload(MentorshipGoal.milestones))
                .populate_existing()
                .filter(MentorshipGoal.id == goal_id)
                .first(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting goal {goal_id}: {str(e)}")
            raise RepositoryException(f"Failed to get goal: {str(e)}")
