# backend/mentorship/routes/v1/sessions.py
"""
Session routes - API v1

Versioned session endpoints under /api/v1/sessions.
All business logic delegated to the scheduling services.

Endpoints:
    GET / - List the caller's sessions (upcoming or past)
    POST / - Book a session on a mentor slot
    GET /{session_id} - Session details
    POST /{session_id}/cancel - Cancel a session
    POST /{session_id}/reschedule - Move a session to another slot
    POST /{session_id}/confirm - Mentor confirms a pending session
    POST /{session_id}/complete - Mentor marks a session as held
    PATCH /{session_id}/notes - Update shared session notes
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Path, Query, status

from ...api.dependencies import (
    get_booking_service,
    get_cancellation_service,
    get_current_user_id,
    get_reschedule_service,
    get_session_lifecycle_service,
)
from ...core.constants import DEFAULT_QUERY_LIMIT, MAX_QUERY_LIMIT
from ...core.enums import SessionListFilter
from ...core.exceptions import DomainException
from ...schemas.session import (
    SessionBookRequest,
    SessionCancelRequest,
    SessionListResponse,
    SessionNotesUpdate,
    SessionRescheduleRequest,
    SessionResponse,
)
from ...services.booking_service import BookingService
from ...services.cancellation_service import CancellationService
from ...services.reschedule_service import RescheduleService
from ...services.session_lifecycle import SessionLifecycleService
from .common import ULID_PATH_PATTERN, handle_domain_exception

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["sessions-v1"])


# ============================================================================
# SECTION 1: Static routes (no path parameters)
# ============================================================================


@router.get("", response_model=SessionListResponse)
async def list_sessions(
    filter: SessionListFilter = Query(SessionListFilter.UPCOMING),
    limit: int = Query(DEFAULT_QUERY_LIMIT, ge=1, le=MAX_QUERY_LIMIT),
    offset: int = Query(0, ge=0),
    current_user_id: str = Depends(get_current_user_id),
    lifecycle_service: SessionLifecycleService = Depends(get_session_lifecycle_service),
) -> SessionListResponse:
    """List sessions where the caller is mentor or mentee."""
    try:
        sessions = await asyncio.to_thread(
            lifecycle_service.list_sessions,
            current_user_id,
            filter,
            limit=limit,
            offset=offset,
        )
        now = lifecycle_service.now()
        return SessionListResponse(
            filter=filter,
            items=[SessionResponse.from_session(s, now) for s in sessions],
            limit=limit,
            offset=offset,
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def book_session(
    payload: SessionBookRequest = Body(...),
    current_user_id: str = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service),
) -> SessionResponse:
    """Book a slot. Exactly one of several concurrent requests for a slot succeeds."""
    try:
        session = await asyncio.to_thread(
            booking_service.book,
            mentor_id=payload.mentor_id,
            slot_id=payload.slot_id,
            requester_id=current_user_id,
            session_type=payload.type,
            topic=payload.topic,
            description=payload.description,
        )
        return SessionResponse.from_session(session, booking_service.now())
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# SECTION 2: Routes with a session id
# ============================================================================


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user_id: str = Depends(get_current_user_id),
    lifecycle_service: SessionLifecycleService = Depends(get_session_lifecycle_service),
) -> SessionResponse:
    try:
        session = await asyncio.to_thread(
            lifecycle_service.get_session, session_id, current_user_id
        )
        return SessionResponse.from_session(session, lifecycle_service.now())
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{session_id}/cancel", response_model=SessionResponse)
async def cancel_session(
    session_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    payload: Optional[SessionCancelRequest] = Body(None),
    current_user_id: str = Depends(get_current_user_id),
    cancellation_service: CancellationService = Depends(get_cancellation_service),
) -> SessionResponse:
    """Cancel a session; repeating the call on a cancelled session is a no-op."""
    try:
        session = await asyncio.to_thread(
            cancellation_service.cancel,
            session_id,
            reason=payload.reason if payload else None,
            actor_id=current_user_id,
        )
        return SessionResponse.from_session(session, cancellation_service.now())
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{session_id}/reschedule", response_model=SessionResponse)
async def reschedule_session(
    session_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    payload: SessionRescheduleRequest = Body(...),
    current_user_id: str = Depends(get_current_user_id),
    reschedule_service: RescheduleService = Depends(get_reschedule_service),
) -> SessionResponse:
    try:
        session = await asyncio.to_thread(
            reschedule_service.reschedule,
            session_id,
            payload.new_slot_id,
            actor_id=current_user_id,
        )
        return SessionResponse.from_session(session, reschedule_service.now())
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{session_id}/confirm", response_model=SessionResponse)
async def confirm_session(
    session_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user_id: str = Depends(get_current_user_id),
    lifecycle_service: SessionLifecycleService = Depends(get_session_lifecycle_service),
) -> SessionResponse:
    try:
        session = await asyncio.to_thread(lifecycle_service.confirm, session_id, current_user_id)
        return SessionResponse.from_session(session, lifecycle_service.now())
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{session_id}/complete", response_model=SessionResponse)
async def complete_session(
    session_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user_id: str = Depends(get_current_user_id),
    lifecycle_service: SessionLifecycleService = Depends(get_session_lifecycle_service),
) -> SessionResponse:
    try:
        session = await asyncio.to_thread(lifecycle_service.complete, session_id, current_user_id)
        return SessionResponse.from_session(session, lifecycle_service.now())
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{session_id}/notes", response_model=SessionResponse)
async def update_session_notes(
    session_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    payload: SessionNotesUpdate = Body(...),
    current_user_id: str = Depends(get_current_user_id),
    lifecycle_service: SessionLifecycleService = Depends(get_session_lifecycle_service),
) -> SessionResponse:
    try:
        session = await asyncio.to_thread(
            lifecycle_service.update_notes, session_id, current_user_id, payload.notes
        )
        return SessionResponse.from_session(session, lifecycle_service.now())
    except DomainException as e:
        handle_domain_exception(e)
