# backend/mentorship/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected. Tests override
``get_clock`` and ``get_notifier`` to freeze time and capture events.
"""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...core.clock import Clock, utc_now
from ...events.publisher import EventPublisher, NotificationDispatcher
from ...repositories.factory import RepositoryFactory
from ...services.availability_service import AvailabilityService
from ...services.booking_service import BookingService
from ...services.calendar_service import CalendarService
from ...services.cancellation_service import CancellationService
from ...services.goal_service import GoalService
from ...services.meeting_links import MeetingLinkProvisioner, TemplateMeetingLinkProvisioner
from ...services.reschedule_service import RescheduleService
from ...services.scheduling_policy import SchedulingPolicy
from ...services.session_lifecycle import SessionLifecycleService
from .database import get_db

logger = logging.getLogger(__name__)


def get_clock() -> Clock:
    return utc_now


def get_notifier(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> NotificationDispatcher:
    """Default dispatcher: outbox rows in background_jobs."""
    return EventPublisher(RepositoryFactory.create_job_repository(db), clock=clock)


def get_scheduling_policy() -> SchedulingPolicy:
    return SchedulingPolicy.from_settings()


def get_meeting_link_provisioner() -> MeetingLinkProvisioner:
    return TemplateMeetingLinkProvisioner.from_settings()


def get_availability_service(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> AvailabilityService:
    return AvailabilityService(db, clock=clock)


def get_calendar_service(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> CalendarService:
    return CalendarService(db, clock=clock)


def get_booking_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    notifier: NotificationDispatcher = Depends(get_notifier),
    meeting_links: MeetingLinkProvisioner = Depends(get_meeting_link_provisioner),
    policy: SchedulingPolicy = Depends(get_scheduling_policy),
) -> BookingService:
    """
    Get booking service instance.

    Args:
        db: Database session
        clock: Time source
        notifier: Post-commit event sink
        meeting_links: Provisioner for session meeting URLs
        policy: Mentor scheduling preferences

    Returns:
        BookingService instance
    """
    return BookingService(
        db, clock=clock, notifier=notifier, meeting_links=meeting_links, policy=policy
    )


def get_reschedule_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    notifier: NotificationDispatcher = Depends(get_notifier),
    policy: SchedulingPolicy = Depends(get_scheduling_policy),
) -> RescheduleService:
    return RescheduleService(db, clock=clock, notifier=notifier, policy=policy)


def get_cancellation_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> CancellationService:
    return CancellationService(db, clock=clock, notifier=notifier)


def get_session_lifecycle_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> SessionLifecycleService:
    return SessionLifecycleService(db, clock=clock, notifier=notifier)


def get_goal_service(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> GoalService:
    return GoalService(db, clock=clock)
