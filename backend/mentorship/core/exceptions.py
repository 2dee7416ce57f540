# backend/mentorship/core/exceptions.py
"""
Domain-specific exceptions for the mentorship scheduling service.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.

The taxonomy mirrors how callers are expected to react:
- ValidationException: malformed input, rejected before touching shared state
- NotFoundException: unknown id ("stale cache" vs "genuinely invalid" is
  distinguishable by code)
- ConflictException: lost a check-and-set or wrong lifecycle state; refresh
  and retry
- TemporalException: the slot or session is in the past; never coerced
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Convert to an HTTPException using the class status code."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class TemporalException(DomainException):
    """Raised when an operation targets a point in time that has already passed."""

    status_code = HTTP_422_UNPROCESSABLE


class UnauthorizedException(DomainException):
    """Raised when user is not authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific scheduling exceptions


class SlotNotFoundException(NotFoundException):
    """Raised when a slot id is unknown or belongs to a different mentor."""

    def __init__(self, slot_id: str, mentor_id: Optional[str] = None):
        details: Dict[str, Any] = {"slot_id": slot_id}
        if mentor_id:
            details["mentor_id"] = mentor_id
        super().__init__(message="Time slot not found", code="SLOT_NOT_FOUND", details=details)


class SessionNotFoundException(NotFoundException):
    """Raised when a session id is unknown."""

    def __init__(self, session_id: str):
        super().__init__(
            message="Session not found",
            code="SESSION_NOT_FOUND",
            details={"session_id": session_id},
        )


class GoalNotFoundException(NotFoundException):
    """Raised when a goal or milestone id is unknown."""

    def __init__(self, goal_id: str, milestone_id: Optional[str] = None):
        details: Dict[str, Any] = {"goal_id": goal_id}
        if milestone_id:
            details["milestone_id"] = milestone_id
        super().__init__(message="Goal not found", code="GOAL_NOT_FOUND", details=details)


class SlotAlreadyBookedException(ConflictException):
    """Raised when the slot is already occupied by another session."""

    def __init__(self, slot_id: str):
        super().__init__(
            message="This time slot is no longer available",
            code="SLOT_ALREADY_BOOKED",
            details={"slot_id": slot_id},
        )


class SlotUnavailableException(ConflictException):
    """Raised when the mentor has not opened (or has withdrawn) the slot."""

    def __init__(self, slot_id: str):
        super().__init__(
            message="This time slot is not open for booking",
            code="SLOT_UNAVAILABLE",
            details={"slot_id": slot_id},
        )


class SlotOverlapException(ConflictException):
    """Raised when a published slot overlaps another slot of the same mentor."""

    def __init__(self, mentor_id: str, new_range: str, conflicting_range: str):
        super().__init__(
            message=f"Slot {new_range} overlaps existing slot {conflicting_range}",
            code="SLOT_OVERLAP",
            details={
                "mentor_id": mentor_id,
                "new_slot": new_range,
                "conflicting_slot": conflicting_range,
            },
        )


class SessionNotReschedulableException(ConflictException):
    """Raised when a session is terminal or already started."""

    def __init__(self, session_id: str, reason: str):
        super().__init__(
            message=f"Session cannot be rescheduled: {reason}",
            code="SESSION_NOT_RESCHEDULABLE",
            details={"session_id": session_id, "reason": reason},
        )


class SessionNotCancellableException(ConflictException):
    """Raised when a session is completed or already started."""

    def __init__(self, session_id: str, reason: str):
        super().__init__(
            message=f"Session cannot be cancelled: {reason}",
            code="SESSION_NOT_CANCELLABLE",
            details={"session_id": session_id, "reason": reason},
        )


class CrossMentorRescheduleException(ConflictException):
    """Raised when the new slot belongs to a different mentor than the session."""

    def __init__(self, session_id: str, session_mentor_id: str, slot_mentor_id: str):
        super().__init__(
            message="Sessions can only be moved to another slot of the same mentor",
            code="CROSS_MENTOR_RESCHEDULE",
            details={
                "session_id": session_id,
                "session_mentor_id": session_mentor_id,
                "slot_mentor_id": slot_mentor_id,
            },
        )


class InvalidSessionTransitionException(ConflictException):
    """Raised when a status change is not an edge of the session state machine."""

    def __init__(self, session_id: str, current: str, target: str):
        super().__init__(
            message=f"Session cannot move from {current} to {target}",
            code="INVALID_SESSION_TRANSITION",
            details={"session_id": session_id, "current": current, "target": target},
        )


class ConcurrentModificationException(ConflictException):
    """Raised when a conditional write loses to a concurrent writer."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"The {resource} was modified by another request; refresh and retry",
            code="CONCURRENT_MODIFICATION",
            details={"resource": resource, "id": resource_id},
        )


class SlotInPastException(TemporalException):
    """Raised when the slot start is not in the future."""

    def __init__(self, slot_id: str, start_time: str):
        super().__init__(
            message="This time slot has already started",
            code="SLOT_IN_PAST",
            details={"slot_id": slot_id, "start_time": start_time},
        )


class SessionInPastException(TemporalException):
    """Raised when a lifecycle transition requires a session that has not started yet."""

    def __init__(self, session_id: str, start_time: str):
        super().__init__(
            message="This session has already started",
            code="SESSION_IN_PAST",
            details={"session_id": session_id, "start_time": start_time},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
