"""
Admin API Routes.

User management (create, edit, lock) and fermentation profile management
(create, copy, activate/deactivate). Every route requires an admin session.
"""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from raugupatis.auth import accounts
from raugupatis.auth.middleware import require_admin
from raugupatis.auth.passwords import email_problem, normalize_email
from raugupatis.exceptions import DuplicateEmail, NotFound, ValidationError
from raugupatis.infra.db.models import User
from raugupatis.infra.db.repositories import ProfileRepository, UserRepository
from raugupatis.infra.db.session import get_db

from ..schemas import (
    AdminUserCreate,
    AdminUserResponse,
    AdminUserUpdate,
    LockRequest,
    ProfileCopyRequest,
    ProfileCreate,
    ProfileResponse,
    ProfileStatusRequest,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin", tags=["Admin"])


# =============================================================================
# Users
# =============================================================================

@router.get("/users", response_model=list[AdminUserResponse])
async def list_users(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[AdminUserResponse]:
    users = await UserRepository(db).list_users()
    return [AdminUserResponse.model_validate(u) for u in users]


@router.post("/users", response_model=AdminUserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    body: AdminUserCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> AdminUserResponse:
    user = await accounts.register(
        db,
        email=body.email,
        password=body.password,
        experience_level=body.experience_level,
        first_name=body.first_name,
        last_name=body.last_name,
        role=body.role.value,
    )
    logger.info(f"[ADMIN] Admin {admin.id} created user {user.id} with role {user.role}")
    return AdminUserResponse.model_validate(user)


@router.put("/users/{user_id}", response_model=AdminUserResponse)
async def update_user(
    user_id: int,
    body: AdminUserUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> AdminUserResponse:
    users = UserRepository(db)
    target = await users.get_by_id(user_id)
    if target is None:
        raise NotFound("User")

    changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    for key in ("role", "experience_level", "preferred_temp_unit"):
        if key in changes:
            changes[key] = changes[key].value
    for key in ("first_name", "last_name"):
        if key in body.model_fields_set:
            changes[key] = (getattr(body, key) or "").strip() or None

    if "email" in changes:
        email = normalize_email(changes["email"])
        if problem := email_problem(email):
            raise ValidationError.for_field("email", problem)
        existing = await users.get_by_email(email)
        if existing is not None and existing.id != user_id:
            raise DuplicateEmail(email)
        changes["email"] = email

    if user_id == admin.id and changes.get("role") == "user":
        raise ValidationError.for_field("role", "You cannot remove your own admin role")

    updated = await users.update(user_id, **changes) if changes else target
    logger.info(f"[ADMIN] Admin {admin.id} updated user {user_id}: {sorted(changes)}")
    return AdminUserResponse.model_validate(updated)


@router.post("/users/{user_id}/lock", response_model=AdminUserResponse)
async def lock_user(
    user_id: int,
    body: LockRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> AdminUserResponse:
    """Lock or unlock an account. Admins cannot lock themselves."""
    if user_id == admin.id and body.locked:
        raise ValidationError.for_field("locked", "You cannot lock your own account")
    user = await accounts.set_locked(db, user_id, body.locked)
    return AdminUserResponse.model_validate(user)


# =============================================================================
# Profiles
# =============================================================================

@router.get("/profiles", response_model=list[ProfileResponse])
async def list_profiles(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[ProfileResponse]:
    """All profiles, inactive ones included."""
    profiles = await ProfileRepository(db).list_all()
    return [ProfileResponse.model_validate(p) for p in profiles]


@router.post("/profiles", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_profile(
    body: ProfileCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    if problems := body.range_problems():
        raise ValidationError("Invalid profile", fields=problems)
    profile = await ProfileRepository(db).create(
        name=body.name,
        type=body.type,
        min_days=body.min_days,
        max_days=body.max_days,
        temp_min=body.temp_min,
        temp_max=body.temp_max,
        description=(body.description or "").strip() or None,
        is_active=True,
    )
    logger.info(f"[ADMIN] Admin {admin.id} created profile {profile.id} ({profile.name})")
    return ProfileResponse.model_validate(profile)


@router.post("/profiles/{profile_id}/copy", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def copy_profile(
    profile_id: int,
    body: ProfileCopyRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    profile = await ProfileRepository(db).copy(profile_id, body.new_name)
    logger.info(f"[ADMIN] Admin {admin.id} copied profile {profile_id} to {profile.id} ({profile.name})")
    return ProfileResponse.model_validate(profile)


@router.post("/profiles/{profile_id}/status", response_model=ProfileResponse)
async def set_profile_status(
    profile_id: int,
    body: ProfileStatusRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    """Activate or deactivate a profile. Profiles are never deleted."""
    profile = await ProfileRepository(db).set_active(profile_id, body.is_active)
    if profile is None:
        raise NotFound("Fermentation profile")
    state = "activated" if body.is_active else "deactivated"
    logger.info(f"[ADMIN] Admin {admin.id} {state} profile {profile_id}")
    return ProfileResponse.model_validate(profile)
