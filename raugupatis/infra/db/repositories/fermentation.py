"""
Fermentation repository - always scoped to the owning user.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import ColumnElement, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from raugupatis.exceptions import NotFound
from raugupatis.infra.db.models import Fermentation, FermentationProfile
from raugupatis.infra.db.repositories.base import OwnedRepository

SORT_COLUMNS = {
    "created_at": Fermentation.created_at,
    "name": Fermentation.name,
    "start_date": Fermentation.start_date,
    "status": Fermentation.status,
}


def contains_pattern(term: str) -> str:
    """LIKE pattern matching ``term`` literally anywhere; use with ``escape="\\"``."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


@dataclass
class FermentationFilters:
    """Query options for listing fermentations."""
    search: Optional[str] = None
    status: Optional[str] = None
    profile_id: Optional[int] = None
    profile_type: Optional[str] = None
    started_after: Optional[datetime] = None
    started_before: Optional[datetime] = None
    sort_by: str = "created_at"
    sort_order: str = "desc"
    limit: int = 100
    offset: int = 0


class FermentationRepository(OwnedRepository[Fermentation]):
    """Repository for one user's fermentations."""

    def __init__(self, session: AsyncSession, user_id: int):
        super().__init__(Fermentation, session, user_id)

    def _owner_clause(self) -> ColumnElement[bool]:
        return Fermentation.user_id == self.user_id

    async def _require_active_profile(self, profile_id: int) -> FermentationProfile:
        profile = await self.session.get(FermentationProfile, profile_id)
        if profile is None or not profile.is_active:
            raise NotFound("Fermentation profile")
        return profile

    async def create(self, **kwargs) -> Fermentation:
        """Create a fermentation for this user. The profile must exist and be active."""
        await self._require_active_profile(kwargs["profile_id"])
        ingredients = kwargs.pop("ingredients", None)
        kwargs["user_id"] = self.user_id

        fermentation = Fermentation(**kwargs)
        fermentation.ingredients = ingredients
        self.session.add(fermentation)
        await self.session.commit()
        return await self.get_by_id(fermentation.id)

    async def update(self, id: int, **kwargs) -> Optional[Fermentation]:
        # user_id is never reassignable through this path
        kwargs.pop("user_id", None)
        fermentation = await self.get_by_id(id)
        if fermentation is None:
            return None
        if "profile_id" in kwargs and kwargs["profile_id"] != fermentation.profile_id:
            await self._require_active_profile(kwargs["profile_id"])
        if "ingredients" in kwargs:
            fermentation.ingredients = kwargs.pop("ingredients")
        for key, value in kwargs.items():
            setattr(fermentation, key, value)
        await self.session.commit()
        return await self.get_by_id(id)

    async def list(self, filters: Optional[FermentationFilters] = None) -> Sequence[Fermentation]:
        """List this user's fermentations with optional filtering and sorting."""
        filters = filters or FermentationFilters()
        stmt = self._select()

        if filters.search:
            pattern = contains_pattern(filters.search.strip())
            stmt = stmt.where(
                or_(
                    Fermentation.name.ilike(pattern, escape="\\"),
                    Fermentation.notes.ilike(pattern, escape="\\"),
                    Fermentation.ingredients_json.ilike(pattern, escape="\\"),
                )
            )
        if filters.status:
            stmt = stmt.where(Fermentation.status == filters.status)
        if filters.profile_id is not None:
            stmt = stmt.where(Fermentation.profile_id == filters.profile_id)
        if filters.profile_type:
            stmt = stmt.where(
                Fermentation.profile_id.in_(
                    select(FermentationProfile.id).where(FermentationProfile.type == filters.profile_type)
                )
            )
        if filters.started_after is not None:
            stmt = stmt.where(Fermentation.start_date >= filters.started_after)
        if filters.started_before is not None:
            stmt = stmt.where(Fermentation.start_date <= filters.started_before)

        column = SORT_COLUMNS.get(filters.sort_by, Fermentation.created_at)
        ordering = column.asc() if filters.sort_order == "asc" else column.desc()
        stmt = stmt.order_by(ordering, Fermentation.id.desc()).offset(filters.offset).limit(filters.limit)

        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_by_status(self) -> dict[str, int]:
        """Per-status totals for the dashboard."""
        stmt = self._scope(
            select(Fermentation.status, func.count()).select_from(Fermentation).group_by(Fermentation.status)
        )
        result = await self.session.execute(stmt)
        return {status: total for status, total in result.all()}
