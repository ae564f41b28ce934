import logging
from typing import TypeVar, Generic, Type, Optional, Any, Sequence

from sqlalchemy import select, delete, func, and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Executable

from learnhub.model.base import Base
from learnhub.utils.exceptions import PersistenceException

logger = logging.getLogger(__name__)

# Generic type for SQLAlchemy models
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository class with common CRUD operations.

    Every write commits by default. Pass ``commit=False`` to stage several
    writes and finish them with a single :meth:`commit`, which is how
    multi-step operations stay in one transaction.

    Store failures are rolled back and re-raised as PersistenceException.

    Usage:
        class ModuleRepository(BaseRepository[Module]):
            def __init__(self, session: AsyncSession):
                super().__init__(Module, session)
    """
    model: Type[ModelType]

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """
        Initialize repository with model class and database session.

        Args:
            model: SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    # ==================== TRANSACTION ====================

    async def execute(self, statement: Executable):
        """Execute a statement, translating store errors."""
        try:
            return await self.session.execute(statement)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"{self.model.__name__} query failed: {e}")
            raise PersistenceException(f"Failed to query {self.model.__tablename__}") from e

    async def flush(self) -> None:
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"{self.model.__name__} flush failed: {e}")
            raise PersistenceException(f"Failed to write {self.model.__tablename__}") from e

    async def commit(self) -> None:
        """Commit the current transaction."""
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"{self.model.__name__} commit failed: {e}")
            raise PersistenceException(f"Failed to write {self.model.__tablename__}") from e

    async def rollback(self) -> None:
        await self.session.rollback()

    async def _finish(self, commit: bool) -> None:
        if commit:
            await self.commit()
        else:
            await self.flush()

    # ==================== CREATE ====================

    async def create(self, obj_in: dict | ModelType, commit: bool = True) -> ModelType:
        """
        Create a new record.

        Args:
            obj_in: Dictionary or model instance with data to create
            commit: Commit immediately, or only flush into the open transaction

        Returns:
            Created model instance (with its generated id)
        """
        db_obj = self.model(**obj_in) if isinstance(obj_in, dict) else obj_in

        self.session.add(db_obj)
        await self._finish(commit)
        await self.refresh(db_obj)
        return db_obj

    # ==================== READ ====================

    async def get_by_id(self, id: str) -> Optional[ModelType]:
        """
        Get a single record by ID.

        Args:
            id: Primary key ID

        Returns:
            Model instance or None if not found
        """
        query = select(self.model).where(self.model.id == id)
        result = await self.execute(query)
        return result.scalar_one_or_none()

    async def get_by_field(self, field: str, value: Any) -> Optional[ModelType]:
        """
        Get a single record by a specific field value.

        Args:
            field: Field name to filter by
            value: Value to match

        Returns:
            Model instance or None if not found
        """
        query = select(self.model).where(getattr(self.model, field) == value)
        result = await self.execute(query)
        return result.scalars().first()

    async def get_by_filters(
        self,
        filters: dict[str, Any],
        order_by: Optional[str] = None,
        order_desc: bool = False,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> Sequence[ModelType]:
        """
        Get records matching multiple filter conditions.

        Args:
            filters: Dictionary of field-value pairs to filter by
            order_by: Field name to order by
            order_desc: Whether to order descending
            skip: Number of records to skip
            limit: Maximum number of records to return (None for all)

        Returns:
            List of model instances
        """
        conditions = [getattr(self.model, field) == value for field, value in filters.items()]
        query = select(self.model).where(and_(*conditions))

        if order_by:
            order_column = getattr(self.model, order_by)
            query = query.order_by(order_column.desc() if order_desc else order_column)

        query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)

        result = await self.execute(query)
        return result.scalars().all()

    # ==================== UPDATE ====================

    async def update(self, id: str, obj_in: dict, commit: bool = True) -> Optional[ModelType]:
        """
        Partially update a record by ID.

        Args:
            id: Primary key ID
            obj_in: Dictionary with fields to update
            commit: Commit immediately, or only flush

        Returns:
            Updated model instance or None if not found
        """
        db_obj = await self.get_by_id(id)
        if not db_obj:
            return None

        for field, value in obj_in.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        await self._finish(commit)
        await self.refresh(db_obj)
        return db_obj

    # ==================== DELETE ====================

    async def delete(self, id: str, commit: bool = True) -> bool:
        """
        Permanently delete a record by ID.

        Returns:
            True if deleted, False if not found
        """
        result = await self.execute(delete(self.model).where(self.model.id == id))
        await self._finish(commit)
        return result.rowcount > 0

    async def bulk_delete(self, filters: dict[str, Any], commit: bool = True) -> int:
        """
        Delete every record matching the filter conditions.

        Returns:
            Number of records deleted
        """
        conditions = [getattr(self.model, field) == value for field, value in filters.items()]
        result = await self.execute(delete(self.model).where(and_(*conditions)))
        await self._finish(commit)
        return result.rowcount

    # ==================== EXISTS ====================

    async def exists(self, id: str) -> bool:
        query = select(func.count(self.model.id)).where(self.model.id == id)
        result = await self.execute(query)
        return (result.scalar() or 0) > 0

    # ==================== UTILITY ====================

    async def refresh(self, db_obj: ModelType) -> ModelType:
        """
        Reload a model instance, including server-generated defaults.
        """
        try:
            await self.session.refresh(db_obj)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceException(f"Failed to read {self.model.__tablename__}") from e
        return db_obj
