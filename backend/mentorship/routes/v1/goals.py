# backend/mentorship/routes/v1/goals.py
"""
Mentorship goal routes - API v1

Endpoints:
    GET / - Goals where the caller is mentor or mentee
    POST / - Create a goal
    GET /{goal_id} - Goal details
    POST /{goal_id}/milestones - Append a milestone
    POST /{goal_id}/milestones/{milestone_id}/toggle - Flip a milestone's completion
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Body, Depends, Path, status

from ...api.dependencies import get_current_user_id, get_goal_service
from ...core.exceptions import DomainException
from ...schemas.goal import GoalCreate, GoalResponse, MilestoneCreate
from ...services.goal_service import GoalService
from .common import ULID_PATH_PATTERN, handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["goals-v1"])


@router.get("", response_model=List[GoalResponse])
async def list_goals(
    current_user_id: str = Depends(get_current_user_id),
    goal_service: GoalService = Depends(get_goal_service),
) -> List[GoalResponse]:
    try:
        goals = await asyncio.to_thread(goal_service.list_goals, current_user_id)
        return [GoalResponse.from_goal(goal) for goal in goals]
    except DomainException as e:
        handle_domain_exception(e)


@router.post("", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
async def create_goal(
    payload: GoalCreate = Body(...),
    current_user_id: str = Depends(get_current_user_id),
    goal_service: GoalService = Depends(get_goal_service),
) -> GoalResponse:
    try:
        goal = await asyncio.to_thread(
            goal_service.create_goal,
            current_user_id,
            mentor_id=payload.mentor_id,
            mentee_id=payload.mentee_id,
            title=payload.title,
            description=payload.description,
            target_date=payload.target_date,
            milestones=payload.milestones,
        )
        return GoalResponse.from_goal(goal)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{goal_id}", response_model=GoalResponse)
async def get_goal(
    goal_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user_id: str = Depends(get_current_user_id),
    goal_service: GoalService = Depends(get_goal_service),
) -> GoalResponse:
    try:
        goal = await asyncio.to_thread(goal_service.get_goal, goal_id, current_user_id)
        return GoalResponse.from_goal(goal)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{goal_id}/milestones", response_model=GoalResponse, status_code=status.HTTP_201_CREATED
)
async def add_milestone(
    goal_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    payload: MilestoneCreate = Body(...),
    current_user_id: str = Depends(get_current_user_id),
    goal_service: GoalService = Depends(get_goal_service),
) -> GoalResponse:
    try:
        goal = await asyncio.to_thread(
            goal_service.add_milestone, goal_id, current_user_id, payload.title
        )
        return GoalResponse.from_goal(goal)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{goal_id}/milestones/{milestone_id}/toggle", response_model=GoalResponse)
async def toggle_milestone(
    goal_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    milestone_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user_id: str = Depends(get_current_user_id),
    goal_service: GoalService = Depends(get_goal_service),
) -> GoalResponse:
    try:
        goal = await asyncio.to_thread(
            goal_service.toggle_milestone, goal_id, milestone_id, current_user_id
        )
        return GoalResponse.from_goal(goal)
    except DomainException as e:
        handle_domain_exception(e)
