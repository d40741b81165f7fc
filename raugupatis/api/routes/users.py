"""
User Account Endpoints

Registration, login/logout and self-service profile management.
"""
import logging

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from raugupatis.auth import accounts
from raugupatis.auth.middleware import (
    clear_session_cookie,
    get_app_settings,
    get_current_user,
    get_session_token,
    set_session_cookie,
)
from raugupatis.auth.sessions import create_session, destroy_session
from raugupatis.exceptions import InvalidCredentials, ValidationError
from raugupatis.infra.db.models import User
from raugupatis.infra.db.repositories import UserRepository
from raugupatis.infra.db.session import get_db

from ..schemas import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ProfileUpdateRequest,
    RegisterRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["Users"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)) -> UserResponse:
    """Create an account. Does not log the new user in."""
    user = await accounts.register(
        db,
        email=body.email,
        password=body.password,
        experience_level=body.experience_level,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return UserResponse.model_validate(user)


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """
    Check credentials and start a session.

    The session token is returned only as an HTTP-only cookie. Failed logins
    answer 401 with ``success: false`` and a message suitable for display.
    """
    settings = get_app_settings(request)
    try:
        user = await accounts.authenticate(db, body.email, body.password)
    except InvalidCredentials as e:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=LoginResponse(success=False, user=None, message=e.message).model_dump(),
        )

    token = await create_session(db, user, settings, remember_me=body.remember_me)
    set_session_cookie(response, token, settings, remember_me=body.remember_me)
    return LoginResponse(success=True, user=UserResponse.model_validate(user), message="Login successful")


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request, response: Response, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    """End the current session. Succeeds with or without one."""
    settings = get_app_settings(request)
    await destroy_session(db, get_session_token(request), settings)
    clear_session_cookie(response, settings)
    return MessageResponse(success=True, message="Logout successful")


@router.get("/profile", response_model=UserResponse)
async def get_profile(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(user)


@router.api_route("/profile", methods=["POST", "PUT"], response_model=UserResponse)
async def update_profile(
    body: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Update experience level, temperature unit and display names."""
    changes = body.model_dump(exclude_unset=True)
    for key in ("experience_level", "preferred_temp_unit"):
        if key in changes:
            if changes[key] is None:
                changes.pop(key)
            else:
                changes[key] = changes[key].value
    for key in ("first_name", "last_name"):
        if key in changes:
            changes[key] = (changes[key] or "").strip() or None

    if not changes:
        return UserResponse.model_validate(user)
    updated = await UserRepository(db).update(user.id, **changes)
    logger.info(f"[USERS] User {user.id} updated profile fields: {sorted(changes)}")
    return UserResponse.model_validate(updated)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    if body.confirm_password is not None and body.confirm_password != body.new_password:
        raise ValidationError.for_field("confirm_password", "Passwords do not match")
    await accounts.change_password(db, user, body.current_password, body.new_password)
    return MessageResponse(success=True, message="Password changed successfully")
