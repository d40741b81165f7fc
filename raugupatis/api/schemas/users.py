"""
API Schemas for user accounts.

Responses never include the password hash.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from raugupatis.infra.db.models import ExperienceLevel, TemperatureUnit, UserRole


# ============================================================================
# Request Models
# ============================================================================

class RegisterRequest(BaseModel):
    """Email and password rules are enforced by the account layer so errors are per-field."""
    email: str
    password: str
    experience_level: Optional[str] = None
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


class LoginRequest(BaseModel):
    email: str
    password: str
    remember_me: bool = False


class ProfileUpdateRequest(BaseModel):
    """Fields a user may change about themselves. Omitted fields are left alone."""
    experience_level: Optional[ExperienceLevel] = None
    preferred_temp_unit: Optional[TemperatureUnit] = None
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str
    confirm_password: Optional[str] = None


class AdminUserCreate(BaseModel):
    email: str
    password: str
    role: UserRole = UserRole.USER
    experience_level: Optional[str] = None
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


class AdminUserUpdate(BaseModel):
    email: Optional[str] = None
    role: Optional[UserRole] = None
    experience_level: Optional[ExperienceLevel] = None
    preferred_temp_unit: Optional[TemperatureUnit] = None
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


class LockRequest(BaseModel):
    locked: bool


# ============================================================================
# Response Models
# ============================================================================

class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    role: str
    experience_level: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    preferred_temp_unit: str
    created_at: datetime


class AdminUserResponse(UserResponse):
    is_locked: bool
    updated_at: Optional[datetime] = None


class LoginResponse(BaseModel):
    success: bool
    user: Optional[UserResponse] = None
    message: str
