"""Domain events emitted after scheduling transactions commit."""

from mentorship.events.publisher import Event, EventPublisher, NotificationDispatcher
from mentorship.events.session_events import (
    SessionBooked,
    SessionCancelled,
    SessionCompleted,
    SessionConfirmed,
    SessionRescheduled,
)

__all__ = [
    "Event",
    "EventPublisher",
    "NotificationDispatcher",
    "SessionBooked",
    "SessionCancelled",
    "SessionCompleted",
    "SessionConfirmed",
    "SessionRescheduled",
]
