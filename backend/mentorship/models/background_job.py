# backend/mentorship/models/background_job.py
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
import ulid

from ..core.enums import JobStatus
from ..database import Base
from .types import UTCDateTime


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class BackgroundJob(Base):
    """Outbox row for work that runs after the request commits (notifications)."""

    __tablename__ = "background_jobs"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    type = Column(String(100), nullable=False)
    payload = Column(
        JSONB(astext_type=Text()).with_variant(JSON(), "sqlite"),
        nullable=False,
    )
    status = Column(String(20), nullable=False, default=JobStatus.QUEUED.value)
    attempts = Column(Integer, nullable=False, default=0)
    available_at = Column(UTCDateTime, nullable=False, default=_now_utc)
    last_error = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=_now_utc)

    __table_args__ = (Index("ix_background_jobs_status_available", "status", "available_at"),)
