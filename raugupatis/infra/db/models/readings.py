"""
Per-fermentation time series: temperature logs, taste profiles, photos.

All three are append-only children of a Fermentation and are deleted with it.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from raugupatis.infra.db.base import Base, utcnow


class PhotoStage(str, Enum):
    START = "start"
    PROGRESS = "progress"
    END = "end"


class TemperatureLog(Base):
    __tablename__ = "temperature_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    fermentation_id: Mapped[int] = mapped_column(
        ForeignKey("fermentations.id", ondelete="CASCADE"), nullable=False
    )
    recorded_at: Mapped[datetime] = mapped_column(nullable=False)
    temperature: Mapped[float] = mapped_column(Float, nullable=False)  # Fahrenheit
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)


class TasteProfile(Base):
    __tablename__ = "taste_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    fermentation_id: Mapped[int] = mapped_column(
        ForeignKey("fermentations.id", ondelete="CASCADE"), nullable=False
    )
    profile_text: Mapped[str] = mapped_column(Text, nullable=False)
    tasted_at: Mapped[datetime] = mapped_column(nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)


class FermentationPhoto(Base):
    __tablename__ = "fermentation_photos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    fermentation_id: Mapped[int] = mapped_column(
        ForeignKey("fermentations.id", ondelete="CASCADE"), nullable=False
    )
    file_path: Mapped[str] = mapped_column(Text, nullable=False)  # relative to uploads_dir
    caption: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    taken_at: Mapped[datetime] = mapped_column(nullable=False)
    stage: Mapped[str] = mapped_column(String(16), default=PhotoStage.PROGRESS.value)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
