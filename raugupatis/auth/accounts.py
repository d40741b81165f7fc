"""
Account operations: registration, authentication, locking, password changes.
"""
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from raugupatis.auth.passwords import (
    email_problem,
    hash_password,
    normalize_email,
    password_problem,
    verify_password,
)
from raugupatis.exceptions import InvalidCredentials, NotFound, ValidationError
from raugupatis.infra.db.models import ExperienceLevel, User, UserRole
from raugupatis.infra.db.repositories import SessionRepository, UserRepository
from raugupatis.utils.logging_utils import mask_email

logger = logging.getLogger(__name__)

LOCKED_MESSAGE = "Account is locked. Please contact an administrator."

# Work factor is paid even for unknown emails so timing does not reveal them
_DUMMY_HASH = hash_password("timing-equaliser-password")


def _clean_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _check_experience_level(value: Optional[str]) -> str:
    if value is None or value == "":
        return ExperienceLevel.BEGINNER.value
    try:
        return ExperienceLevel(value).value
    except ValueError:
        raise ValidationError.for_field(
            "experience_level", "Experience level must be beginner, intermediate or advanced"
        )


async def register(
    db: AsyncSession,
    email: str,
    password: str,
    experience_level: Optional[str] = None,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    role: str = UserRole.USER.value,
) -> User:
    """
    Create a new account.

    Raises:
        ValidationError: malformed email, weak password or unknown experience level
        DuplicateEmail: the email already has an account
    """
    email = normalize_email(email)
    fields: dict[str, str] = {}
    if problem := email_problem(email):
        fields["email"] = problem
    if problem := password_problem(password):
        fields["password"] = problem
    if fields:
        raise ValidationError("Registration is invalid", fields=fields)
    level = _check_experience_level(experience_level)
    if role not in {r.value for r in UserRole}:
        raise ValidationError.for_field("role", "Role must be user or admin")

    user = await UserRepository(db).create(
        email=email,
        password_hash=hash_password(password),
        role=role,
        experience_level=level,
        first_name=_clean_name(first_name),
        last_name=_clean_name(last_name),
    )
    logger.info(f"[AUTH] Registered user {user.id} ({mask_email(email)}) role={role}")
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    """
    Return the user for a valid email/password pair.

    Raises:
        InvalidCredentials: unknown email, wrong password, or locked account
    """
    user = await UserRepository(db).get_by_email(normalize_email(email))
    if user is None:
        verify_password(password, _DUMMY_HASH)
        logger.warning(f"[AUTH] Login failed for unknown email {mask_email(email)}")
        raise InvalidCredentials()

    if not verify_password(password, user.password_hash):
        logger.warning(f"[AUTH] Login failed for user {user.id}: wrong password")
        raise InvalidCredentials()

    if user.is_locked:
        logger.warning(f"[AUTH] Login refused for locked user {user.id}")
        raise InvalidCredentials(LOCKED_MESSAGE)

    logger.info(f"[AUTH] User {user.id} authenticated")
    return user


async def set_locked(db: AsyncSession, user_id: int, locked: bool) -> User:
    """Lock or unlock an account. Locking also ends the user's sessions."""
    users = UserRepository(db)
    user = await users.update(user_id, is_locked=locked)
    if user is None:
        raise NotFound("User")
    if locked:
        removed = await SessionRepository(db).delete_for_user(user_id)
        logger.info(f"[AUTH] Locked user {user_id}, ended {removed} session(s)")
    else:
        logger.info(f"[AUTH] Unlocked user {user_id}")
    return user


async def change_password(db: AsyncSession, user: User, current_password: str, new_password: str) -> User:
    if not verify_password(current_password, user.password_hash):
        raise ValidationError.for_field("current_password", "Current password is incorrect")
    if problem := password_problem(new_password):
        raise ValidationError.for_field("new_password", problem)
    if current_password == new_password:
        raise ValidationError.for_field("new_password", "New password must differ from the current password")

    updated = await UserRepository(db).update(user.id, password_hash=hash_password(new_password))
    logger.info(f"[AUTH] Password changed for user {user.id}")
    return updated
