"""
API Schemas for fermentation profiles.

Profile temperatures are always expressed in Fahrenheit.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProfileCreate(BaseModel):
    name: str = Field(..., max_length=100)
    type: str = Field(..., max_length=50)
    min_days: int
    max_days: int
    temp_min: float
    temp_max: float
    description: Optional[str] = Field(None, max_length=2000)

    @field_validator("name", "type")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field cannot be empty")
        return v

    def range_problems(self) -> dict[str, str]:
        """Cross-field checks, reported per field."""
        problems: dict[str, str] = {}
        if self.min_days <= 0:
            problems["min_days"] = "Minimum days must be positive"
        if self.max_days <= 0:
            problems["max_days"] = "Maximum days must be positive"
        elif self.min_days > self.max_days:
            problems["max_days"] = "Maximum days must be greater than or equal to minimum days"
        if self.temp_min >= self.temp_max:
            problems["temp_max"] = "Maximum temperature must be greater than minimum temperature"
        return problems


class ProfileCopyRequest(BaseModel):
    new_name: str = Field(..., max_length=100)

    @field_validator("new_name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("New name cannot be empty")
        return v


class ProfileStatusRequest(BaseModel):
    is_active: bool


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: str
    min_days: int
    max_days: int
    temp_min: float
    temp_max: float
    description: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
