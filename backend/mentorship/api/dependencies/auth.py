# backend/mentorship/api/dependencies/auth.py
"""
Identity dependencies.

Authentication happens upstream (gateway or identity provider); by the time a
request reaches this service the caller's user id travels in a trusted
header, ``X-User-Id`` by default. This module is the single seam to replace
when real token verification moves in-process.
"""

import logging
from typing import Optional

from fastapi import Request

from ...core.config import settings
from ...core.exceptions import UnauthorizedException

logger = logging.getLogger(__name__)

MAX_USER_ID_LENGTH = 64


def get_current_user_id_optional(request: Request) -> Optional[str]:
    """Caller's user id, or None for anonymous requests."""
    raw = request.headers.get(settings.identity_header)
    if raw is None:
        return None
    user_id = raw.strip()
    if not user_id or len(user_id) > MAX_USER_ID_LENGTH:
        return None
    return user_id


def get_current_user_id(request: Request) -> str:
    """
    Caller's user id.

    Raises:
        UnauthorizedException: Header missing, blank or malformed
    """
    user_id = get_current_user_id_optional(request)
    if user_id is None:
        logger.debug(f"Rejected request to {request.url.path}: missing identity header")
        raise UnauthorizedException("Not authenticated", code="NOT_AUTHENTICATED")
    return user_id
