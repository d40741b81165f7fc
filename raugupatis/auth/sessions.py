"""
Server-side sessions.

The browser holds an opaque random token in an HTTP-only cookie. The
database row is keyed by HMAC-SHA256(session_secret, token), carries a JSON
payload and an absolute expiry in unix seconds. Expiry is an inactivity
timeout: every successful validation pushes it forward by the session's TTL.
Expired rows are removed when they are next looked up.
"""
import hashlib
import hmac
import json
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from raugupatis.config import Settings
from raugupatis.exceptions import SessionExpired, SessionNotFound
from raugupatis.infra.db.models import User
from raugupatis.infra.db.repositories import SessionRepository

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


def _now() -> int:
    return int(time.time())


@dataclass
class SessionData:
    """Payload stored with every session row."""
    user_id: int
    email: str
    role: str
    ttl_seconds: int
    expires_at: int = 0

    def to_payload(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "role": self.role,
            "ttl_seconds": self.ttl_seconds,
        }

    @classmethod
    def from_record(cls, payload: dict[str, Any], expires_at: int) -> "SessionData":
        return cls(
            user_id=int(payload["user_id"]),
            email=payload.get("email", ""),
            role=payload.get("role", "user"),
            ttl_seconds=int(payload.get("ttl_seconds", 0)),
            expires_at=expires_at,
        )


def session_key(token: str, secret: str) -> str:
    """Database id for a cookie token."""
    return hmac.new(secret.encode("utf-8"), token.encode("utf-8"), hashlib.sha256).hexdigest()


def session_ttl_seconds(settings: Settings, remember_me: bool) -> int:
    hours = settings.remember_me_ttl_hours if remember_me else settings.session_ttl_hours
    return hours * 3600


async def create_session(
    db: AsyncSession,
    user: User,
    settings: Settings,
    remember_me: bool = False,
) -> str:
    """Persist a new session for ``user`` and return the cookie token."""
    token = secrets.token_urlsafe(TOKEN_BYTES)
    ttl = session_ttl_seconds(settings, remember_me)
    data = SessionData(user_id=user.id, email=user.email, role=user.role, ttl_seconds=ttl)
    await SessionRepository(db).save(
        session_key(token, settings.session_secret),
        data.to_payload(),
        _now() + ttl,
    )
    logger.info(f"[SESSION] Created session for user {user.id} (ttl={ttl}s, remember_me={remember_me})")
    return token


async def validate_session(db: AsyncSession, token: Optional[str], settings: Settings) -> SessionData:
    """
    Resolve a cookie token to its session payload and refresh the expiry.

    Raises:
        SessionNotFound: no token, or no row for it
        SessionExpired: the row exists but is past its expiry (it is deleted)
    """
    if not token:
        raise SessionNotFound()

    repo = SessionRepository(db)
    key = session_key(token, settings.session_secret)
    record = await repo.get_by_id(key)
    if record is None:
        raise SessionNotFound()

    now = _now()
    if record.expiry_date <= now:
        await repo.delete(key)
        logger.info("[SESSION] Expired session removed on access")
        raise SessionExpired()

    try:
        payload = json.loads(record.data)
        data = SessionData.from_record(payload, record.expiry_date)
    except (ValueError, KeyError, TypeError) as e:
        logger.warning(f"[SESSION] Discarding unreadable session payload: {e}")
        await repo.delete(key)
        raise SessionNotFound()

    ttl = data.ttl_seconds or settings.session_ttl_hours * 3600
    data.expires_at = now + ttl
    await repo.touch(key, data.expires_at)
    return data


async def destroy_session(db: AsyncSession, token: Optional[str], settings: Settings) -> bool:
    """Delete the session for ``token``. Idempotent; returns whether a row was removed."""
    if not token:
        return False
    removed = await SessionRepository(db).delete(session_key(token, settings.session_secret))
    if removed:
        logger.info("[SESSION] Session destroyed")
    return removed


async def purge_expired_sessions(db: AsyncSession) -> int:
    removed = await SessionRepository(db).delete_expired(_now())
    logger.info(f"[SESSION] Purged {removed} expired session(s)")
    return removed
