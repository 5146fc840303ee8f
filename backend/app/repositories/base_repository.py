# backend/app/repositories/base_repository.py
"""
Shared data access for instructors, students and lessons.

Repositories never commit. They flush so generated ids and cascades are
visible inside the open transaction, and leave commit/rollback to the
service layer. Every SQLAlchemy failure surfaces as RepositoryException.
"""

import logging
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException

T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """
    Lookups and writes common to every swim school model.

    Subclasses narrow the eager loading and ordering used by their queries.
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    def _fail(
        self, action: str, error: SQLAlchemyError, rollback: bool = True
    ) -> RepositoryException:
        self.logger.error(f"Error {action} {self.model.__name__}: {error}")
        if rollback:
            self.db.rollback()
        return RepositoryException(f"Failed {action} {self.model.__name__}: {error}")

    def get_by_id(self, id: str, load_relationships: bool = True) -> Optional[T]:
        query = self._build_query().filter(self.model.id == id)
        if load_relationships:
            query = self._apply_eager_loading(query)
        try:
            return query.first()
        except SQLAlchemyError as e:
            raise self._fail("loading", e, rollback=False)

    def get_all(self) -> List[T]:
        query = self._apply_eager_loading(self._build_query())
        return self._execute_query(self._apply_default_ordering(query))

    def exists(self, **criteria: Any) -> bool:
        try:
            return self._build_query().filter_by(**criteria).first() is not None
        except SQLAlchemyError as e:
            raise self._fail("checking", e, rollback=False)

    def create(self, **fields: Any) -> T:
        """Add a new row and flush it so its id is assigned."""
        entity = self.model(**fields)
        try:
            self.db.add(entity)
            self.db.flush()
        except IntegrityError as e:
            self.logger.error(f"Integrity error creating {self.model.__name__}: {e}", exc_info=True)
            self.db.rollback()
            raise RepositoryException(f"Integrity constraint violated: {e}") from e
        except SQLAlchemyError as e:
            raise self._fail("creating", e)
        return entity

    def update(self, id: str, **fields: Any) -> Optional[T]:
        """Set the given columns on an existing row; None when it does not exist."""
        entity = self.get_by_id(id, load_relationships=False)
        if entity is None:
            return None
        for key, value in fields.items():
            if hasattr(entity, key):
                setattr(entity, key, value)
        self.flush()
        return entity

    def flush(self) -> None:
        try:
            self.db.flush()
        except SQLAlchemyError as e:
            raise self._fail("saving", e)

    def delete_entity(self, entity: T) -> None:
        """Delete an already loaded entity (ORM cascades apply)."""
        try:
            self.db.delete(entity)
            self.db.flush()
        except SQLAlchemyError as e:
            raise self._fail("deleting", e)

    def delete_all(self) -> int:
        """Delete every row through the ORM so cascades run; returns the count."""
        entities = self._execute_query(self._build_query())
        try:
            for entity in entities:
                self.db.delete(entity)
            self.db.flush()
        except SQLAlchemyError as e:
            raise self._fail("deleting all", e)
        return len(entities)

    # Query hooks for subclasses

    def _apply_eager_loading(self, query: Query) -> Query:
        return query

    def _apply_default_ordering(self, query: Query) -> Query:
        return query.order_by(self.model.id)

    def _build_query(self) -> Query:
        return self.db.query(self.model)

    def _execute_query(self, query: Query) -> List[T]:
        try:
            return query.all()
        except SQLAlchemyError as e:
            self.logger.error(f"Query execution error: {e}")
            raise RepositoryException(f"Query failed: {e}")
