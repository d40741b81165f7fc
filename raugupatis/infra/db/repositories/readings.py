"""
Repositories for a fermentation's child rows.

Ownership of a log, taste profile or photo is inherited from its parent
fermentation, so the scope is ``fermentation_id IN (this user's fermentations)``.
"""
from typing import Optional, Sequence, Type

from sqlalchemy import ColumnElement, select
from sqlalchemy.ext.asyncio import AsyncSession

from raugupatis.exceptions import NotFound
from raugupatis.infra.db.models import Fermentation, FermentationPhoto, TasteProfile, TemperatureLog
from raugupatis.infra.db.repositories.base import ModelType, OwnedRepository


class FermentationChildRepository(OwnedRepository[ModelType]):
    """Shared behaviour for rows hanging off a fermentation."""

    # Column used for newest-first ordering
    timestamp_field: str = "created_at"

    def __init__(self, model: Type[ModelType], session: AsyncSession, user_id: int):
        super().__init__(model, session, user_id)

    def _owned_fermentation_ids(self):
        return select(Fermentation.id).where(Fermentation.user_id == self.user_id)

    def _owner_clause(self) -> ColumnElement[bool]:
        return self.model.fermentation_id.in_(self._owned_fermentation_ids())

    async def _require_parent(self, fermentation_id: int) -> None:
        stmt = self._owned_fermentation_ids().where(Fermentation.id == fermentation_id)
        result = await self.session.execute(stmt)
        if result.scalar_one_or_none() is None:
            raise NotFound("Fermentation")

    async def create(self, **kwargs) -> ModelType:
        """Insert a row after verifying the parent belongs to this user."""
        await self._require_parent(kwargs["fermentation_id"])
        return await super().create(**kwargs)

    async def list_for_fermentation(
        self,
        fermentation_id: int,
        limit: Optional[int] = None,
    ) -> Sequence[ModelType]:
        """Rows for one fermentation, newest first. Raises NotFound for foreign parents."""
        await self._require_parent(fermentation_id)
        order_column = getattr(self.model, self.timestamp_field)
        stmt = (
            self._select()
            .where(self.model.fermentation_id == fermentation_id)
            .order_by(order_column.desc(), self.model.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()


class TemperatureLogRepository(FermentationChildRepository[TemperatureLog]):
    timestamp_field = "recorded_at"

    def __init__(self, session: AsyncSession, user_id: int):
        super().__init__(TemperatureLog, session, user_id)


class TasteProfileRepository(FermentationChildRepository[TasteProfile]):
    timestamp_field = "tasted_at"

    def __init__(self, session: AsyncSession, user_id: int):
        super().__init__(TasteProfile, session, user_id)


class PhotoRepository(FermentationChildRepository[FermentationPhoto]):
    timestamp_field = "taken_at"

    def __init__(self, session: AsyncSession, user_id: int):
        super().__init__(FermentationPhoto, session, user_id)
