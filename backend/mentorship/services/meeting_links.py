# backend/mentorship/services/meeting_links.py
"""
Meeting link provisioning.

The URL is opaque to scheduling; the provisioner only has to return a string
or None. Video infrastructure lives elsewhere.
"""

import logging
from typing import Optional, Protocol

from ..core.config import Settings, settings as default_settings
from ..models.session import MentorSession

logger = logging.getLogger(__name__)


class MeetingLinkProvisioner(Protocol):
    def provision(self, session: MentorSession) -> Optional[str]:
        ...


class TemplateMeetingLinkProvisioner:
    """
    Format ``meeting_url_template`` with the session fields.

    Placeholders: ``{session_id}``, ``{mentor_id}``, ``{mentee_id}``. An empty
    template disables provisioning.
    """

    def __init__(self, template: str = ""):
        self.template = template

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "TemplateMeetingLinkProvisioner":
        config = config or default_settings
        return cls(config.meeting_url_template)

    def provision(self, session: MentorSession) -> Optional[str]:
        if not self.template:
            return None
        return self.template.format(
            session_id=session.id,
            mentor_id=session.mentor_id,
            mentee_id=session.mentee_id,
        )
