"""
User repository.

Users are a global table: the admin screens list everyone, and the auth
layer looks users up by email before any session exists.
"""
import logging
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from raugupatis.exceptions import DuplicateEmail
from raugupatis.infra.db.models import User
from raugupatis.infra.db.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def create(self, **kwargs) -> User:
        """Insert a user; the UNIQUE constraint on email is the source of truth."""
        user = User(**kwargs)
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if "users.email" in str(e.orig) or "UNIQUE" in str(e.orig).upper():
                raise DuplicateEmail(kwargs.get("email", "")) from e
            raise
        await self.session.refresh(user)
        return user

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def list_users(self, limit: int = 500, offset: int = 0) -> Sequence[User]:
        """All users, newest first."""
        stmt = select(User).order_by(User.created_at.desc(), User.id.desc()).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()
