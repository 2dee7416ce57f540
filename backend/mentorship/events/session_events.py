"""Session domain events."""
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class SessionBooked:
    """Fired after a session is booked on a slot."""

    session_id: str
    mentor_id: str
    mentee_id: str
    slot_id: str
    status: str
    start_time: datetime
    end_time: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SessionRescheduled:
    """Fired after a session moved to another slot of the same mentor."""

    session_id: str
    mentor_id: str
    mentee_id: str
    old_slot_id: str
    new_slot_id: str
    old_start_time: datetime
    new_start_time: datetime
    status: str
    rescheduled_by: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SessionCancelled:
    """Fired after a session is cancelled and its slot released."""

    session_id: str
    mentor_id: str
    mentee_id: str
    slot_id: str
    cancelled_at: datetime
    cancelled_by: Optional[str] = None
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SessionConfirmed:
    session_id: str
    mentor_id: str
    mentee_id: str
    confirmed_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SessionCompleted:
    session_id: str
    mentor_id: str
    mentee_id: str
    completed_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
