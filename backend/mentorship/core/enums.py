"""
Enumerations shared by models, services and schemas.

All enums subclass ``str`` so they serialize as their wire value and compare
equal to the raw strings stored in the database.
"""

from enum import Enum


class SessionStatus(str, Enum):
    """Persisted lifecycle status of a mentorship session."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def active(cls) -> frozenset["SessionStatus"]:
        """Statuses that still hold a slot and can be moved or cancelled."""
        return frozenset({cls.PENDING, cls.CONFIRMED})

    @classmethod
    def terminal(cls) -> frozenset["SessionStatus"]:
        return frozenset({cls.COMPLETED, cls.CANCELLED})


class SessionType(str, Enum):
    ONE_ON_ONE = "one-on-one"
    GROUP = "group"
    WORKSHOP = "workshop"


class DisplayState(str, Enum):
    """Derived, never persisted: how a session should be presented right now."""

    UPCOMING = "upcoming"
    JOINABLE_NOW = "joinable-now"
    PAST = "past"


class SessionAction(str, Enum):
    JOIN = "join"
    RESCHEDULE = "reschedule"
    CANCEL = "cancel"


class SessionListFilter(str, Enum):
    UPCOMING = "upcoming"
    PAST = "past"


class GoalStatus(str, Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class JobStatus(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
