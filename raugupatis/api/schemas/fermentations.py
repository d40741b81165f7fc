"""
API Schemas for fermentations and their readings.
"""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from raugupatis.infra.db.models import FermentationStatus, PhotoStage, TemperatureUnit

from .common import strip_or_none, to_naive_utc


def _parse_ingredients(value: Any) -> Optional[list[str]]:
    """Accept a list or a comma-separated string; drop blank entries."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, list):
        raise ValueError("Ingredients must be a list or a comma-separated string")
    return [str(item).strip() for item in value if str(item).strip()]


# ============================================================================
# Fermentations
# ============================================================================

class FermentationCreate(BaseModel):
    profile_id: int
    name: str = Field(..., max_length=200)
    start_date: Optional[datetime] = Field(None, description="Defaults to now")
    target_end_date: Optional[datetime] = None
    notes: Optional[str] = None
    ingredients: Optional[list[str]] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty")
        return v

    @field_validator("notes")
    @classmethod
    def clean_notes(cls, v: Optional[str]) -> Optional[str]:
        return strip_or_none(v)

    @field_validator("ingredients", mode="before")
    @classmethod
    def split_ingredients(cls, v: Any) -> Optional[list[str]]:
        return _parse_ingredients(v)

    @field_validator("start_date", "target_end_date")
    @classmethod
    def normalise_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class FermentationUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""
    profile_id: Optional[int] = None
    name: Optional[str] = Field(None, max_length=200)
    start_date: Optional[datetime] = None
    target_end_date: Optional[datetime] = None
    actual_end_date: Optional[datetime] = None
    status: Optional[FermentationStatus] = None
    success_rating: Optional[int] = Field(None, ge=1, le=5)
    notes: Optional[str] = None
    lessons_learned: Optional[str] = None
    ingredients: Optional[list[str]] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty")
        return v

    @field_validator("ingredients", mode="before")
    @classmethod
    def split_ingredients(cls, v: Any) -> Optional[list[str]]:
        return _parse_ingredients(v)

    @field_validator("start_date", "target_end_date", "actual_end_date")
    @classmethod
    def normalise_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class FermentationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    profile_id: int
    profile_name: Optional[str] = None
    profile_type: Optional[str] = None
    name: str
    start_date: datetime
    target_end_date: Optional[datetime] = None
    actual_end_date: Optional[datetime] = None
    status: str
    success_rating: Optional[int] = None
    notes: Optional[str] = None
    lessons_learned: Optional[str] = None
    ingredients: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None


# ============================================================================
# Temperature logs
# ============================================================================

class TemperatureLogCreate(BaseModel):
    temperature: float = Field(..., ge=-100, le=250)
    recorded_at: Optional[datetime] = Field(None, description="Defaults to now")
    unit: Optional[TemperatureUnit] = Field(None, description="Defaults to the user's preferred unit")
    notes: Optional[str] = None

    @field_validator("recorded_at")
    @classmethod
    def normalise_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)

    @field_validator("notes")
    @classmethod
    def clean_notes(cls, v: Optional[str]) -> Optional[str]:
        return strip_or_none(v)


class TemperatureLogResponse(BaseModel):
    id: int
    fermentation_id: int
    recorded_at: datetime
    temperature: float
    unit: str
    notes: Optional[str] = None
    created_at: datetime


# ============================================================================
# Taste profiles
# ============================================================================

class TasteProfileCreate(BaseModel):
    profile_text: str = Field(..., max_length=5000)
    tasted_at: Optional[datetime] = Field(None, description="Defaults to now")

    @field_validator("profile_text")
    @classmethod
    def text_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Taste profile cannot be empty")
        return v

    @field_validator("tasted_at")
    @classmethod
    def normalise_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class TasteProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    fermentation_id: int
    profile_text: str
    tasted_at: datetime
    created_at: datetime


# ============================================================================
# Photos
# ============================================================================

class PhotoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    fermentation_id: int
    file_path: str
    caption: Optional[str] = None
    taken_at: datetime
    stage: PhotoStage
    created_at: datetime
    url: Optional[str] = None
