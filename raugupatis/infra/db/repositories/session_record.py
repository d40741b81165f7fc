"""
Session store repository.
"""
import json
from typing import Any, Optional

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from raugupatis.infra.db.models import SessionRecord
from raugupatis.infra.db.repositories.base import BaseRepository


class SessionRepository(BaseRepository[SessionRecord]):

    def __init__(self, session: AsyncSession):
        super().__init__(SessionRecord, session)

    async def save(self, session_id: str, data: dict[str, Any], expiry_date: int) -> SessionRecord:
        return await self.create(id=session_id, data=json.dumps(data), expiry_date=expiry_date)

    async def touch(self, session_id: str, expiry_date: int) -> Optional[SessionRecord]:
        return await self.update(session_id, expiry_date=expiry_date)

    async def delete_for_user(self, user_id: int) -> int:
        """Remove every session belonging to a user (used when locking accounts)."""
        stmt = delete(SessionRecord).where(func.json_extract(SessionRecord.data, "$.user_id") == user_id)
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount

    async def delete_expired(self, now: int) -> int:
        result = await self.session.execute(delete(SessionRecord).where(SessionRecord.expiry_date <= now))
        await self.session.commit()
        return result.rowcount

