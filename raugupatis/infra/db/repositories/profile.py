"""
Fermentation profile repository.
"""
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from raugupatis.exceptions import Conflict, NotFound
from raugupatis.infra.db.models import FermentationProfile
from raugupatis.infra.db.repositories.base import BaseRepository


class ProfileRepository(BaseRepository[FermentationProfile]):
    """Profiles are shared by all users; only admins mutate them."""

    def __init__(self, session: AsyncSession):
        super().__init__(FermentationProfile, session)

    async def list_active(self) -> Sequence[FermentationProfile]:
        stmt = (
            select(FermentationProfile)
            .where(FermentationProfile.is_active.is_(True))
            .order_by(FermentationProfile.name)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_all(self) -> Sequence[FermentationProfile]:
        """Active and inactive profiles, active first."""
        stmt = select(FermentationProfile).order_by(
            FermentationProfile.is_active.desc(), FermentationProfile.name
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def name_exists(self, name: str) -> bool:
        result = await self.session.execute(
            select(FermentationProfile.id).where(func.lower(FermentationProfile.name) == name.strip().lower())
        )
        return result.first() is not None

    async def create(self, **kwargs) -> FermentationProfile:
        if await self.name_exists(kwargs["name"]):
            raise Conflict(
                "A profile with this name already exists",
                fields={"name": "Profile name must be unique"},
            )
        try:
            return await super().create(**kwargs)
        except IntegrityError as e:
            await self.session.rollback()
            raise Conflict("A profile with this name already exists", fields={"name": "Profile name must be unique"}) from e

    async def copy(self, profile_id: int, new_name: str) -> FermentationProfile:
        """Duplicate a profile under a new name; the copy starts active."""
        source = await self.get_by_id(profile_id)
        if source is None:
            raise NotFound("Fermentation profile")
        return await self.create(
            name=new_name.strip(),
            type=source.type,
            min_days=source.min_days,
            max_days=source.max_days,
            temp_min=source.temp_min,
            temp_max=source.temp_max,
            description=source.description,
            is_active=True,
        )

    async def set_active(self, profile_id: int, is_active: bool) -> Optional[FermentationProfile]:
        return await self.update(profile_id, is_active=is_active)
