# backend/mentorship/services/scheduling_policy.py
"""Policy hooks the engines consult for mentor preferences."""

from typing import Optional

from ..core.config import Settings, settings as default_settings
from ..models.session import MentorSession


class SchedulingPolicy:
    """
    Default policy driven by settings.

    Subclass and override the hooks to make them per-mentor (for example from
    a mentor preferences table owned by another service).
    """

    def __init__(self, auto_confirm: bool = False, reconfirm_on_reschedule: bool = False):
        self.auto_confirm = auto_confirm
        self.reconfirm_on_reschedule = reconfirm_on_reschedule

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "SchedulingPolicy":
        config = config or default_settings
        return cls(
            auto_confirm=config.auto_confirm_sessions,
            reconfirm_on_reschedule=config.reconfirm_on_reschedule,
        )

    def should_auto_confirm(self, mentor_id: str, session_type: str) -> bool:
        """New bookings start confirmed instead of pending."""
        return self.auto_confirm

    def should_reconfirm(self, session: MentorSession) -> bool:
        """A confirmed session goes back to pending after it is moved."""
        return self.reconfirm_on_reschedule
