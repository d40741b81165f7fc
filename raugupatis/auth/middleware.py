"""
Authentication dependencies.

FastAPI dependencies that turn the session cookie into a User:

    @router.get("/api/fermentations")
    async def list_fermentations(user: User = Depends(get_current_user)):
        ...

``get_current_user`` raises Unauthorized (401) and ``require_admin`` raises
Forbidden (403). Page routes use ``get_optional_user`` and redirect instead.
"""
import logging
from typing import Optional

from fastapi import Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from raugupatis.auth.sessions import destroy_session, session_ttl_seconds, validate_session
from raugupatis.config import Settings
from raugupatis.exceptions import Forbidden, SessionNotFound, Unauthorized
from raugupatis.infra.db.models import User
from raugupatis.infra.db.repositories import UserRepository
from raugupatis.infra.db.session import get_db

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_token(request: Request) -> Optional[str]:
    return request.cookies.get(get_app_settings(request).session_cookie_name)


def set_session_cookie(
    response: Response,
    token: str,
    settings: Settings,
    remember_me: bool = False,
    max_age: Optional[int] = None,
) -> None:
    """Send the session cookie; ``max_age`` overrides the TTL derived from ``remember_me``."""
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=max_age if max_age is not None else session_ttl_seconds(settings, remember_me),
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )


async def get_current_user(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    FastAPI dependency returning the authenticated user.

    Every successful check slides the session expiry forward, so the cookie
    is sent again with the full TTL. Routes that build their own response
    (templates, redirects) pick it up from ``request.state.session_cookie``.

    Raises:
        SessionNotFound / SessionExpired: missing, unknown or expired session
        Unauthorized: the session's user no longer exists or is locked
    """
    settings = get_app_settings(request)
    token = get_session_token(request)
    session = await validate_session(db, token, settings)

    user = await UserRepository(db).get_by_id(session.user_id)
    if user is None:
        await destroy_session(db, token, settings)
        logger.warning(f"[AUTH] Session references missing user {session.user_id}")
        raise SessionNotFound()
    if user.is_locked:
        await destroy_session(db, token, settings)
        logger.warning(f"[AUTH] Rejected session for locked user {user.id}")
        raise Unauthorized("Account is locked")

    max_age = session.ttl_seconds or session_ttl_seconds(settings, remember_me=False)
    set_session_cookie(response, token, settings, max_age=max_age)
    request.state.session_cookie = (token, max_age)
    request.state.user = user
    return user


async def get_optional_user(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Like get_current_user but returns None for anonymous visitors."""
    try:
        return await get_current_user(request, response, db)
    except Unauthorized:
        return None


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        logger.warning(f"[AUTH] User {user.id} denied admin access")
        raise Forbidden()
    return user
