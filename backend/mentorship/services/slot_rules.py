# backend/mentorship/services/slot_rules.py
"""
Bookability checks shared by the booking and reschedule engines.

The checks run twice per claim: once up front so callers get a precise error
without a write, and again after a check-and-set loses, against a fresh read
of the row, to explain why the write matched nothing.
"""

from datetime import datetime
from typing import Optional

from ..core.exceptions import (
    ConcurrentModificationException,
    DomainException,
    SlotAlreadyBookedException,
    SlotInPastException,
    SlotNotFoundException,
    SlotUnavailableException,
)
from ..models.time_slot import TimeSlot
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.time_slot_repository import TimeSlotRepository


def ensure_slot_bookable(slot: Optional[TimeSlot], slot_id: str, now: datetime) -> TimeSlot:
    """
    Raise the typed error explaining why ``slot`` cannot be booked at ``now``.

    A started slot is rejected as temporal before its flags are looked at.
    """
    if slot is None:
        raise SlotNotFoundException(slot_id)
    if slot.start_time <= now:
        raise SlotInPastException(slot.id, slot.start_time.isoformat())
    if not slot.is_available:
        raise SlotUnavailableException(slot.id)
    if slot.is_booked:
        raise SlotAlreadyBookedException(slot.id)
    return slot


def claim_slot_or_raise(
    repository: TimeSlotRepository,
    slot_id: str,
    mentor_id: str,
    now: datetime,
    operation: str,
) -> None:
    """Claim the slot with a conditional write or raise why it could not be claimed."""
    if repository.claim(slot_id, mentor_id, now):
        return

    fresh = repository.get_fresh(slot_id)
    if fresh is not None and fresh.mentor_id != mentor_id:
        fresh = None
    error: DomainException
    try:
        ensure_slot_bookable(fresh, slot_id, now)
    except DomainException as exc:
        error = exc
    else:
        # Row looked bookable again by the time we re-read it; report the lost race
        error = ConcurrentModificationException("slot", slot_id)
    prometheus_metrics.inc_slot_claim_conflict(operation, error.code)
    raise error
