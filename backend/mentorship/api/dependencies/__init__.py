# backend/mentorship/api/dependencies/__init__.py
"""
Central export point for all dependencies.
"""

from .auth import get_current_user_id, get_current_user_id_optional
from .database import get_db
from .services import (
    get_availability_service,
    get_booking_service,
    get_calendar_service,
    get_cancellation_service,
    get_clock,
    get_goal_service,
    get_meeting_link_provisioner,
    get_notifier,
    get_reschedule_service,
    get_scheduling_policy,
    get_session_lifecycle_service,
)

__all__ = [
    # Auth
    "get_current_user_id",
    "get_current_user_id_optional",
    # Database
    "get_db",
    # Collaborators
    "get_clock",
    "get_meeting_link_provisioner",
    "get_notifier",
    "get_scheduling_policy",
    # Services
    "get_availability_service",
    "get_booking_service",
    "get_calendar_service",
    "get_cancellation_service",
    "get_goal_service",
    "get_reschedule_service",
    "get_session_lifecycle_service",
]
