# backend/mentorship/repositories/base_repository.py
"""
Base Repository Pattern for the mentorship scheduling store.

Provides the foundation for the repository classes with:
- Common lookup/create operations
- Generic typing over the mapped class
- Savepoint-scoped inserts so a constraint violation never poisons the
  caller's transaction
- Translation of driver failures into StoreUnavailable / RepositoryException

Repositories never commit. Transaction boundaries belong to the services.
"""

from contextlib import contextmanager
import logging
from typing import Generic, Iterator, List, NoReturn, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import (
    RepositoryException,
    StoreUnavailableException,
    is_transient_store_error,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)


def constraint_name_of(exc: IntegrityError) -> str:
    """
    Best-effort name of the constraint behind an IntegrityError.

    psycopg2 exposes it on ``orig.diag``; SQLite only reports the columns, so
    callers fall back to inspecting the message.
    """
    orig = getattr(exc, "orig", None)
    diag = getattr(orig, "diag", None)
    if diag is not None:
        name = getattr(diag, "constraint_name", "") or ""
        if name:
            return str(name)
    return ""


class BaseRepository(Generic[T]):
    """
    Data access shared by the slot and booking repositories.

    Attributes:
        db: Session whose transaction is owned by the calling service
        model: Mapped class this repository reads and writes
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @contextmanager
    def savepoint(self) -> Iterator[Session]:
        """Run a unit of writes inside a SAVEPOINT that rolls back on its own."""
        with self.db.begin_nested():
            yield self.db

    def _raise_store_error(self, exc: SQLAlchemyError, action: str) -> NoReturn:
        """Classify a driver failure and raise the matching domain error."""
        if is_transient_store_error(exc):
            self.logger.warning(
                "store_unavailable",
                extra={"model": self.model.__name__, "action": action, "error": str(exc)},
            )
            raise StoreUnavailableException(operation=action) from exc
        self.logger.error(f"Error during {action} on {self.model.__name__}: {str(exc)}")
        raise RepositoryException(f"Failed to {action} {self.model.__name__}: {str(exc)}") from exc

    def get_by_id(self, id: str) -> Optional[T]:
        """Load an entity by primary key, always re-reading the stored row."""
        try:
            return self.db.get(self.model, id, populate_existing=True)
        except SQLAlchemyError as e:
            self._raise_store_error(e, "retrieve")

    def add(self, entity: T) -> T:
        """
        Insert an entity inside a savepoint and flush to obtain its id.

        IntegrityError is re-raised untouched so subclasses can map the
        violated constraint to a domain conflict.
        """
        try:
            with self.savepoint():
                self.db.add(entity)
                self.db.flush()
            return entity
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            self._raise_store_error(e, "create")

    def flush(self) -> None:
        """Flush pending ORM changes."""
        try:
            self.db.flush()
        except SQLAlchemyError as e:
            self._raise_store_error(e, "flush")

    def _build_query(self) -> Query:
        """
        Unfiltered query over the mapped class.

        Rows already in the identity map are overwritten with what the store
        holds now; another session may have changed them since they loaded.
        """
        return self.db.query(self.model).execution_options(populate_existing=True)

    def _execute_query(self, query: Query, action: str = "query") -> List[T]:
        """Run ``query`` and classify any driver failure."""
        try:
            return query.all()
        except SQLAlchemyError as e:
            self._raise_store_error(e, action)
