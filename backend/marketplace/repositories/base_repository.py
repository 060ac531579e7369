# backend/marketplace/repositories/base_repository.py
"""
Base Repository Pattern for the marketplace backend.

Repositories own every query against the storage engine. They never commit:
transaction boundaries belong to the service layer (see
``BaseService.transaction``). Failures surface as ``RepositoryException``.
"""

from abc import ABC, abstractmethod
import logging
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException

ModelT = TypeVar("ModelT")

logger = logging.getLogger(__name__)


class IRepository(ABC, Generic[ModelT]):
    """Minimal data access contract shared by every repository."""

    @abstractmethod
    def get_by_id(self, id: str, load_relationships: bool = True) -> Optional[ModelT]:
        """Row with primary key ``id`` or None; optionally with relationships eager loaded."""

    @abstractmethod
    def create(self, **kwargs: Any) -> ModelT:
        """Add and flush a new row inside the caller's transaction."""


class BaseRepository(IRepository[ModelT]):
    """
    SQLAlchemy-backed repository for a single model.

    Attributes:
        db: session owned by the service layer
        model: mapped class this repository reads and writes
    """

    def __init__(self, db: Session, model: Type[ModelT]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    def _fail(self, action: str, error: Exception) -> RepositoryException:
        self.logger.error("%s %s failed: %s", action, self.model.__name__, error)
        return RepositoryException(f"Failed to {action} {self.model.__name__}: {error}")

    def get_by_id(self, id: str, load_relationships: bool = True) -> Optional[ModelT]:
        try:
            query = self._build_query().filter(self.model.id == id)
            if load_relationships:
                query = self._apply_eager_loading(query)
            return query.first()
        except SQLAlchemyError as e:
            raise self._fail("retrieve", e) from e

    def create(self, **kwargs: Any) -> ModelT:
        """Add a new row and flush so its id and defaults are populated."""
        entity = self.model(**kwargs)
        self.db.add(entity)
        try:
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            raise self._fail("create (constraint violated)", e) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise self._fail("create", e) from e
        return entity

    def flush(self) -> None:
        """Push pending changes to the database without committing."""
        try:
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise self._fail("persist", e) from e

    def find_one_by(self, **criteria: Any) -> Optional[ModelT]:
        """First row whose columns equal ``criteria``."""
        try:
            return self._build_query().filter_by(**criteria).first()
        except SQLAlchemyError as e:
            raise self._fail("find", e) from e

    # Hooks and helpers for subclasses

    def _apply_eager_loading(self, query: Query) -> Query:
        return query

    def _build_query(self) -> Query:
        return self.db.query(self.model)

    def _execute_query(self, query: Query) -> List[ModelT]:
        try:
            return query.all()
        except SQLAlchemyError as e:
            raise self._fail("query", e) from e

    def _execute_count(self, query: Query) -> int:
        try:
            return query.count()
        except SQLAlchemyError as e:
            raise self._fail("count", e) from e
