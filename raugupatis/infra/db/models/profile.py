"""
FermentationProfile SQLAlchemy model.

A profile is a reusable template (Kimchi, Kombucha, ...) with the expected
duration and temperature range. Profiles are soft-deactivated, never deleted.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, Float, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from raugupatis.infra.db.base import Base, utcnow


class FermentationProfile(Base):
    __tablename__ = "fermentation_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    type: Mapped[str] = mapped_column(Text, nullable=False)
    min_days: Mapped[int] = mapped_column(Integer, nullable=False)
    max_days: Mapped[int] = mapped_column(Integer, nullable=False)
    temp_min: Mapped[float] = mapped_column(Float, nullable=False)  # Fahrenheit
    temp_max: Mapped[float] = mapped_column(Float, nullable=False)  # Fahrenheit
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)

    def __repr__(self) -> str:
        return f"<FermentationProfile(id={self.id}, name={self.name!r}, active={self.is_active})>"
