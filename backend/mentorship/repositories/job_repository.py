"""Repository for the background_jobs outbox."""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Any, List, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import JobStatus
from ..core.exceptions import RepositoryException
from ..models.background_job import BackgroundJob
from .base_repository import BaseRepository


class JobRepository(BaseRepository[BackgroundJob]):
    """Data access helpers for background_jobs table."""

    def __init__(self, db: Session):
        super().__init__(db, BackgroundJob)
        self.logger = logging.getLogger(__name__)

    def enqueue(
        self,
        *,
        type: str,
        payload: dict[str, Any],
        available_at: datetime,
    ) -> str:
        """Persist a new job that becomes due at ``available_at``."""
        try:
            job = BackgroundJob(
                type=type,
                payload=payload,
                status=JobStatus.QUEUED.value,
                attempts=0,
                available_at=available_at,
                created_at=available_at,
            )
            self.db.add(job)
            self.db.flush()
            return cast(str, job.id)
        except SQLAlchemyError as exc:
            self.logger.error("Failed to enqueue job %s: %s", type, str(exc))
            self.db.rollback()
            raise RepositoryException("Failed to enqueue background job") from exc

    def list_by_type(self, type: str) -> List[BackgroundJob]:
        try:
            return cast(
                List[BackgroundJob],
                self.db.query(BackgroundJob)
                .filter(BackgroundJob.type == type)
                .order_by(BackgroundJob.created_at.asc(), BackgroundJob.id.asc())
                .all(),
            )
        except SQLAlchemyError as exc:
            self.logger.error("Failed to list jobs of type %s: %s", type, str(exc))
            raise RepositoryException("Failed to list background jobs") from exc
