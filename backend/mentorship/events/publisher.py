"""Event publisher - queues events for background processing."""
from datetime import datetime
from typing import Any, Dict, Optional, Protocol

from mentorship.core.clock import Clock, ensure_utc, utc_now
from mentorship.repositories.job_repository import JobRepository


class Event(Protocol):
    """Protocol for event types."""

    def to_dict(self) -> Dict[str, Any]:
        ...


class NotificationDispatcher(Protocol):
    """Anything that can take a committed domain event and deliver it."""

    def publish(self, event: Event) -> None:
        ...


class EventPublisher:
    """Publishes domain events to the job queue for async processing."""

    def __init__(self, job_repository: JobRepository, clock: Optional[Clock] = None):
        self.job_repo = job_repository
        self.clock: Clock = clock or utc_now

    def publish(self, event: Event) -> None:
        """
        Queue an event for background processing.

        The row lands in ``background_jobs`` with type ``event:<ClassName>``,
        available immediately; a worker outside this service fans it out to
        email/push channels.
        """
        event_type = type(event).__name__
        payload = event.to_dict()

        # Convert datetime objects to ISO strings for JSON serialization
        for key, value in payload.items():
            if isinstance(value, datetime):
                payload[key] = value.isoformat()

        self.job_repo.enqueue(
            type=f"event:{event_type}",
            payload=payload,
            available_at=ensure_utc(self.clock()),
        )
