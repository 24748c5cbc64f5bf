# backend/mentorship/services/base.py
"""
Shared plumbing for the scheduling services.

Each service owns its transaction boundary: repositories only flush, and a
service either commits the whole unit of work or rolls all of it back.
Driver failures leave this layer as StoreUnavailableException (transient,
retryable by the caller) or ServiceException (anything else, including
RepositoryException raised below this layer, which gets code
REPOSITORY_ERROR).
"""

from contextlib import contextmanager
from functools import wraps
import logging
import time
from typing import Any, Callable, Iterator, Optional, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    RepositoryException,
    ServiceException,
    StoreUnavailableException,
    is_transient_store_error,
)
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class BaseService:
    """
    Base class for the Resolver, Commit Service, Editor and Requester.

    Subclasses get a session, a per-class logger, write and read scopes and
    the ``measure_operation`` timing decorator.
    """

    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    def _translate_store_error(self, exc: SQLAlchemyError, phase: str) -> ServiceException:
        if is_transient_store_error(exc):
            self.logger.warning(
                "store_unavailable", extra={"phase": phase, "error": str(exc)}
            )
            return StoreUnavailableException(operation=phase)
        self.logger.error(f"Store {phase} failed: {str(exc)}")
        return ServiceException(f"Database {phase} failed: {str(exc)}")

    def _wrap_repository_error(self, exc: RepositoryException, phase: str) -> ServiceException:
        self.logger.error(f"Repository {phase} failed: {str(exc)}")
        return ServiceException(str(exc), code="REPOSITORY_ERROR", details={"phase": phase})

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Write scope: commit when the block finishes, roll back on any error.

        Example:
            with self.transaction():
                self.availability_repository.insert_slot(...)
        """
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise self._translate_store_error(exc, "commit") from exc
        except RepositoryException as exc:
            self.db.rollback()
            raise self._wrap_repository_error(exc, "commit") from exc
        except Exception:
            self.db.rollback()
            raise
        self.logger.debug("unit_of_work_committed")

    @contextmanager
    def read_scope(self) -> Iterator[Session]:
        """
        Read scope: end the transaction this block opened.

        A transaction the caller already had open is left for the caller to
        finish.
        """
        opened_here = not self.db.in_transaction()
        try:
            yield self.db
        except SQLAlchemyError as exc:
            if opened_here:
                self.db.rollback()
            raise self._translate_store_error(exc, "read") from exc
        except RepositoryException as exc:
            if opened_here:
                self.db.rollback()
            raise self._wrap_repository_error(exc, "read") from exc
        except Exception:
            if opened_here:
                self.db.rollback()
            raise
        if opened_here and self.db.in_transaction():
            self.db.commit()

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Time a service method and export the result to Prometheus.

        Calls slower than ``settings.slow_operation_threshold_seconds`` are
        logged at WARNING.
        """

        def decorator(func: F) -> F:
            @wraps(func)
            def timed(self: Any, *args: Any, **kwargs: Any) -> Any:
                started = time.perf_counter()
                failure: Optional[str] = None
                try:
                    return func(self, *args, **kwargs)
                except Exception as exc:
                    failure = type(exc).__name__
                    raise
                finally:
                    elapsed = time.perf_counter() - started
                    if elapsed > settings.slow_operation_threshold_seconds:
                        self.logger.warning(
                            f"Slow operation detected: {operation_name} took {elapsed:.2f}s"
                        )
                    prometheus_metrics.record_service_operation(
                        service=self.__class__.__name__,
                        operation=operation_name,
                        duration=elapsed,
                        status="error" if failure else "success",
                        error_type=failure,
                    )

            return cast(F, timed)

        return decorator

    def log_operation(self, operation: str, **context: Any) -> None:
        """Emit one INFO record naming the operation, with ``context`` as extras."""
        self.logger.info(f"Operation: {operation}", extra={"operation": operation, **context})
