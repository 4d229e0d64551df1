"""
Base repository class for data access.

Each repository wraps one SQLAlchemy model and the session it was created
with. Repositories never commit: the caller owns the transaction, so a
storage operation that touches several tables stays atomic.

Example:
    class TournamentRepository(BaseRepository[Tournament]):
        def find_featured(self) -> Optional[Tournament]:
            return self.where_first(Tournament.featured.is_(True))
"""
from typing import TypeVar, Generic, Type, Optional, List, Any, Dict

from sqlalchemy import desc, func
from sqlalchemy.orm import Query, Session

T = TypeVar("T")


def matches_value(column, value):
    """Equality criterion that also matches NULL when ``value`` is None."""
    return column.is_(None) if value is None else column == value


class BaseRepository(Generic[T]):
    """
    Common data access methods for a single model.

    Attributes:
        model_type: The SQLAlchemy model class this repository manages
        db: The database session
    """

    def __init__(self, model_type: Type[T], db: Session):
        self.model_type = model_type
        self.db = db

    # ========================================================================
    # CRUD Operations
    # ========================================================================

    def find_by_id(self, id: int) -> Optional[T]:
        """Find a single record by ID."""
        return self.db.get(self.model_type, id)

    def find_all(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order_by: Optional[str] = "id"
    ) -> List[T]:
        """
        Find all records with optional pagination.

        Args:
            limit: Maximum number of records to return
            offset: Number of records to skip
            order_by: Column name to order by (prefix with '-' for descending)
        """
        query = self.query()

        if order_by:
            if order_by.startswith('-'):
                query = query.order_by(desc(getattr(self.model_type, order_by[1:])))
            else:
                query = query.order_by(getattr(self.model_type, order_by))

        if offset:
            query = query.offset(offset)

        if limit is not None:
            query = query.limit(limit)

        return query.all()

    def create(self, **kwargs) -> T:
        """
        Add a new record and flush it so generated columns (id, defaults)
        are populated. Not committed.
        """
        instance = self.model_type(**kwargs)
        self.db.add(instance)
        self.db.flush()
        return instance

    def update(self, instance: T, **kwargs) -> T:
        """Set attributes on a loaded record."""
        for key, value in kwargs.items():
            if hasattr(instance, key):
                setattr(instance, key, value)
        return instance

    def increment(self, id: int, column: str, amount: int, floor: Optional[int] = None) -> int:
        """
        Add ``amount`` to a numeric column in a single UPDATE statement.

        With ``floor`` set, rows already at or below the floor are left
        untouched. Returns the number of rows changed.
        """
        attribute = getattr(self.model_type, column)
        query = self.query().filter(self.model_type.id == id)
        if floor is not None:
            query = query.filter(attribute > floor)
        return query.update({attribute: attribute + amount}, synchronize_session="fetch")

    def delete(self, id: int) -> bool:
        """
        Delete a record by ID.

        Returns:
            True if deleted, False if not found
        """
        instance = self.find_by_id(id)
        if instance is None:
            return False
        self.db.delete(instance)
        self.db.flush()
        return True

    def delete_where(self, *criterion) -> int:
        """Bulk delete matching records. Returns the number of rows removed."""
        return self.query().filter(*criterion).delete(synchronize_session="fetch")

    def update_where(self, values: Dict[str, Any], *criterion) -> int:
        """Bulk update matching records. Returns the number of rows changed."""
        return self.query().filter(*criterion).update(values, synchronize_session="fetch")

    # ========================================================================
    # Query Builders
    # ========================================================================

    def query(self) -> Query:
        """Get a new query object for this model."""
        return self.db.query(self.model_type)

    def where(self, *criterion) -> List[T]:
        """Filter records using SQLAlchemy expressions, ordered by id."""
        return self.query().filter(*criterion).order_by(self.model_type.id).all()

    def where_first(self, *criterion) -> Optional[T]:
        """Filter records using SQLAlchemy expressions and return first match."""
        return self.query().filter(*criterion).order_by(self.model_type.id).first()

    def count(self, *criterion) -> int:
        """Count records matching optional criterion."""
        query = self.db.query(func.count(self.model_type.id))
        if criterion:
            query = query.filter(*criterion)
        return query.scalar() or 0
