# backend/mentorship/services/base.py
"""
Base Service Pattern for the mentorship scheduling service.

Provides common functionality for all service classes including:
- Transaction management
- Logging
- Time source injection
- Post-commit notification dispatch
- Performance monitoring
"""

from contextlib import contextmanager
from datetime import datetime
from functools import wraps
import logging
import time
from typing import TYPE_CHECKING, Any, Callable, Optional, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.clock import Clock, ensure_utc, utc_now
from ..core.exceptions import ServiceException
from ..monitoring.prometheus_metrics import prometheus_metrics

if TYPE_CHECKING:
    from ..events.publisher import Event, NotificationDispatcher

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

SLOW_OPERATION_SECONDS = 1.0


class BaseService:
    """
    Base class for all service layer components.

    Provides common patterns for:
    - Database session management
    - Clock access (never ``datetime.now()`` directly)
    - Logging
    - Transaction handling
    - Performance monitoring
    """

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        notifier: Optional["NotificationDispatcher"] = None,
    ):
        """
        Initialize base service.

        Args:
            db: Database session
            clock: Source of the current instant; defaults to the system UTC clock
            notifier: Receives domain events after a transaction commits
        """
        self.db = db
        self.clock: Clock = clock or utc_now
        self.notifier = notifier
        self.logger = logging.getLogger(self.__class__.__name__)

    def now(self) -> datetime:
        """Current instant from the injected clock, always aware UTC."""
        return ensure_utc(self.clock())

    @contextmanager
    def transaction(self):
        """
        Context manager for database transactions.

        Usage:
            with self.transaction():
                # Do multiple operations
                self.db.add(entity)
                # Note: commit is handled automatically

        Any exception, domain or database, rolls back every write made inside
        the block.
        """
        try:
            yield self.db
            self.db.commit()
            self.logger.debug("Transaction committed successfully")
        except SQLAlchemyError as e:
            self.logger.error(f"Transaction failed: {str(e)}")
            self.db.rollback()
            raise ServiceException(f"Database operation failed: {str(e)}")
        except Exception as e:
            self.logger.debug(f"Rolling back transaction: {type(e).__name__}: {str(e)}")
            self.db.rollback()
            raise

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Time a service method and report it to Prometheus.

        Every call lands in the ``mentorship_service_operation_*`` series
        labelled by service class and ``operation_name``; failures also count
        in ``mentorship_errors_total`` by exception type. Calls slower than
        one second are logged as warnings.
        """

        def decorator(func: F) -> F:
            @wraps(func)
            def wrapper(self, *args, **kwargs):
                start_time = time.time()
                success = False
                error_type = None

                try:
                    result = func(self, *args, **kwargs)
                    success = True
                    return result
                except Exception as e:
                    error_type = type(e).__name__
                    raise
                finally:
                    elapsed = time.time() - start_time

                    if elapsed > SLOW_OPERATION_SECONDS and hasattr(self, "logger"):
                        self.logger.warning(
                            f"Slow operation detected: {operation_name} took {elapsed:.2f}s"
                        )

                    prometheus_metrics.record_service_operation(
                        service=self.__class__.__name__,
                        operation=operation_name,
                        duration=elapsed,
                        status="success" if success else "error",
                        error_type=error_type,
                    )

            wrapper._operation_name = operation_name  # type: ignore[attr-defined]
            wrapper._is_measured = True  # type: ignore[attr-defined]
            return cast(F, wrapper)

        return decorator

    def log_operation(self, operation: str, **context):
        """
        Log an operation with context.

        Args:
            operation: Operation name
            **context: Additional context to log
        """
        self.logger.info(f"Operation: {operation}", extra={"operation": operation, **context})

    def publish_after_commit(self, event: "Event") -> None:
        """
        Hand a committed event to the notifier.

        Delivery is fire-and-forget: the scheduling change is already durable,
        so a failing notifier is logged and counted but never propagated.
        """
        if self.notifier is None:
            return
        event_type = type(event).__name__
        try:
            with self.transaction():
                self.notifier.publish(event)
        except Exception as e:
            self.logger.error(f"Failed to dispatch {event_type}: {str(e)}")
            prometheus_metrics.inc_notification_failure(event_type)
