"""
Base repository classes with common CRUD operations.

Two flavours:

- ``BaseRepository`` for global tables (users, profiles).
- ``OwnedRepository`` for user data. It requires the authenticated user id
  and applies the ownership filter to every statement it builds, so callers
  cannot forget it. Rows owned by someone else behave exactly like missing
  rows.
"""
from typing import Any, Generic, Optional, Sequence, Type, TypeVar

from sqlalchemy import ColumnElement, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from raugupatis.infra.db.base import Base

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository providing common CRUD operations.

    Inherit from this class and specify the model type:
        class ProfileRepository(BaseRepository[FermentationProfile]):
            def __init__(self, session: AsyncSession):
                super().__init__(FermentationProfile, session)
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    def _scope(self, stmt):
        """Hook for subclasses that restrict visible rows."""
        return stmt

    def _select(self):
        return self._scope(select(self.model))

    async def create(self, **kwargs) -> ModelType:
        """Create a new record."""
        obj = self.model(**kwargs)
        self.session.add(obj)
        await self.session.commit()
        await self.session.refresh(obj)
        return obj

    async def get_by_id(self, id: Any) -> Optional[ModelType]:
        """Get a record by ID."""
        stmt = self._select().where(self.model.id == id).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_all(self, limit: int = 100, offset: int = 0) -> Sequence[ModelType]:
        """Get all records with pagination."""
        stmt = self._select().order_by(self.model.id).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def update(self, id: Any, **kwargs) -> Optional[ModelType]:
        """Update a record by ID. Returns None if it is not visible."""
        obj = await self.get_by_id(id)
        if obj is None:
            return None
        for key, value in kwargs.items():
            setattr(obj, key, value)
        await self.session.commit()
        return await self.get_by_id(id)

    async def delete(self, id: Any) -> bool:
        """Delete a record by ID. Returns True if deleted."""
        stmt = self._scope(delete(self.model).where(self.model.id == id))
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0

    async def exists(self, id: Any) -> bool:
        stmt = self._scope(select(self.model.id).where(self.model.id == id))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def count(self) -> int:
        stmt = self._scope(select(func.count()).select_from(self.model))
        result = await self.session.execute(stmt)
        return result.scalar_one()


class OwnedRepository(BaseRepository[ModelType]):
    """
    Repository scoped to one user's rows.

    Subclasses implement ``_owner_clause`` returning the WHERE criterion
    that ties a row to ``self.user_id``.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession, user_id: int):
        if user_id is None:
            raise ValueError(f"{type(self).__name__} requires a user_id")
        super().__init__(model, session)
        self.user_id = user_id

    def _owner_clause(self) -> ColumnElement[bool]:
        raise NotImplementedError

    def _scope(self, stmt):
        return stmt.where(self._owner_clause())
