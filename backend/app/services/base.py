# backend/app/services/base.py
"""
Shared plumbing for the instructor, lesson and student services.

- ``transaction()`` commits a unit of scheduling work or rolls it back
- ``measure_operation`` times every public operation, keeps per-service
  stats in process and mirrors them to Prometheus
- Rule rejections (any DomainException) are counted apart from crashes, so a
  burst of refused bookings does not read as an outage
"""

from contextlib import contextmanager
from dataclasses import dataclass
from functools import wraps
import logging
import time
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import DomainException, RepositoryException, ServiceException
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

SLOW_OPERATION_SECONDS = 1.0


@dataclass
class OperationStats:
    count: int = 0
    failures: int = 0
    rejections: int = 0
    total_time: float = 0.0
    min_time: float = float("inf")
    max_time: float = 0.0

    def add(self, elapsed: float, outcome: str) -> None:
        self.count += 1
        self.total_time += elapsed
        self.min_time = min(self.min_time, elapsed)
        self.max_time = max(self.max_time, elapsed)
        if outcome != "success":
            self.failures += 1
        if outcome == "rejected":
            self.rejections += 1

    def summary(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "avg_time": self.total_time / self.count,
            "min_time": self.min_time,
            "max_time": self.max_time,
            "success_rate": (self.count - self.failures) / self.count,
            "failure_count": self.failures,
            "rejected_count": self.rejections,
        }


class BaseService:
    """Base class for services working on one SQLAlchemy session."""

    # service class name -> operation name -> stats
    _stats: Dict[str, Dict[str, OperationStats]] = {}

    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Commit the enclosed repository calls as one unit.

        Database failures roll back and surface as ServiceException; domain
        exceptions raised inside the block roll back and propagate unchanged.
        """
        try:
            yield self.db
            self.db.commit()
        except (SQLAlchemyError, RepositoryException) as e:
            self.logger.error(f"Transaction failed: {e}")
            self.db.rollback()
            raise ServiceException(f"Database operation failed: {e}")
        except Exception:
            self.db.rollback()
            raise

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Time a service method and record its outcome.

            @BaseService.measure_operation("join_lesson")
            def join_lesson(self, student_id, lesson_id): ...
        """

        def decorator(func: F) -> F:
            @wraps(func)
            def wrapper(self: "BaseService", *args: Any, **kwargs: Any) -> Any:
                started = time.perf_counter()
                outcome = "success"
                error_type: Optional[str] = None
                try:
                    return func(self, *args, **kwargs)
                except DomainException as e:
                    outcome, error_type = "rejected", type(e).__name__
                    raise
                except Exception as e:
                    outcome, error_type = "error", type(e).__name__
                    raise
                finally:
                    elapsed = time.perf_counter() - started
                    self._record(operation_name, elapsed, outcome, error_type)

            return cast(F, wrapper)

        return decorator

    def _record(
        self, operation: str, elapsed: float, outcome: str, error_type: Optional[str]
    ) -> None:
        service = self.__class__.__name__
        BaseService._stats.setdefault(service, {}).setdefault(operation, OperationStats()).add(
            elapsed, outcome
        )
        if elapsed > SLOW_OPERATION_SECONDS:
            self.logger.warning(f"Slow operation detected: {operation} took {elapsed:.2f}s")
        prometheus_metrics.record_service_operation(
            service=service,
            operation=operation,
            duration=elapsed,
            status=outcome,
            error_type=error_type,
        )

    def log_operation(self, operation: str, **context: Any) -> None:
        # context keys must not clash with LogRecord attributes such as "name"
        self.logger.info(f"Operation: {operation}", extra={"operation": operation, **context})

    def get_metrics(self) -> Dict[str, Dict[str, Any]]:
        """Per-operation timing and outcome summary for this service class."""
        stats = BaseService._stats.get(self.__class__.__name__, {})
        return {operation: entry.summary() for operation, entry in stats.items() if entry.count}
