"""
API Schemas - Pydantic models for request/response validation.
"""
from .common import MessageResponse
from .users import (
    RegisterRequest,
    LoginRequest,
    LoginResponse,
    ProfileUpdateRequest,
    ChangePasswordRequest,
    AdminUserCreate,
    AdminUserUpdate,
    AdminUserResponse,
    LockRequest,
    UserResponse,
)
from .fermentations import (
    FermentationCreate,
    FermentationUpdate,
    FermentationResponse,
    TemperatureLogCreate,
    TemperatureLogResponse,
    TasteProfileCreate,
    TasteProfileResponse,
    PhotoResponse,
)
from .profiles import (
    ProfileCreate,
    ProfileCopyRequest,
    ProfileStatusRequest,
    ProfileResponse,
)

__all__ = [
    "MessageResponse",
    "RegisterRequest",
    "LoginRequest",
    "LoginResponse",
    "ProfileUpdateRequest",
    "ChangePasswordRequest",
    "AdminUserCreate",
    "AdminUserUpdate",
    "AdminUserResponse",
    "LockRequest",
    "UserResponse",
    "FermentationCreate",
    "FermentationUpdate",
    "FermentationResponse",
    "TemperatureLogCreate",
    "TemperatureLogResponse",
    "TasteProfileCreate",
    "TasteProfileResponse",
    "PhotoResponse",
    "ProfileCreate",
    "ProfileCopyRequest",
    "ProfileStatusRequest",
    "ProfileResponse",
]
