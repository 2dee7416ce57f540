"""Application-wide constants for the mentorship scheduling service."""

from __future__ import annotations

BRAND_NAME = "MentorHub"

API_TITLE = f"{BRAND_NAME} Scheduling API"
API_VERSION = "1.0.0"
API_DESCRIPTION = (
    "Mentor availability, session booking, rescheduling, cancellation and "
    "session lifecycle tracking."
)

# Text constraints
MAX_TOPIC_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 2000
MAX_NOTES_LENGTH = 5000
MAX_REASON_LENGTH = 255
MAX_GOAL_TITLE_LENGTH = 200

# Query limits
DEFAULT_QUERY_LIMIT = 100
MAX_QUERY_LIMIT = 500

# Slot publishing constraints
MIN_SLOT_MINUTES = 15
MAX_SLOT_MINUTES = 240
MAX_SLOTS_PER_REQUEST = 50

# Wall-clock offsets accepted from callers (UTC-14:00 .. UTC+14:00)
MAX_UTC_OFFSET_MINUTES = 14 * 60

# Calendar years accepted anywhere a date or instant comes from a caller
MIN_YEAR = 1900
MAX_YEAR = 2200
