"""
Fermentation SQLAlchemy model.

A Fermentation is one tracked batch created from a profile. Its temperature
logs, taste profiles and photos are removed with it (ON DELETE CASCADE).
"""
import json
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from raugupatis.infra.db.base import Base, utcnow
from raugupatis.infra.db.models.profile import FermentationProfile


class FermentationStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    FAILED = "failed"


# Allowed status changes; completed and failed are terminal.
STATUS_TRANSITIONS: dict[FermentationStatus, set[FermentationStatus]] = {
    FermentationStatus.ACTIVE: {FermentationStatus.PAUSED, FermentationStatus.COMPLETED, FermentationStatus.FAILED},
    FermentationStatus.PAUSED: {FermentationStatus.ACTIVE, FermentationStatus.COMPLETED, FermentationStatus.FAILED},
    FermentationStatus.COMPLETED: set(),
    FermentationStatus.FAILED: set(),
}


class Fermentation(Base):
    __tablename__ = "fermentations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    profile_id: Mapped[int] = mapped_column(ForeignKey("fermentation_profiles.id"), nullable=False)

    name: Mapped[str] = mapped_column(Text, nullable=False)
    start_date: Mapped[datetime] = mapped_column(nullable=False)
    target_end_date: Mapped[Optional[datetime]] = mapped_column(nullable=True)
    actual_end_date: Mapped[Optional[datetime]] = mapped_column(nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=FermentationStatus.ACTIVE.value)
    success_rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    lessons_learned: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ingredients_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)

    profile: Mapped[FermentationProfile] = relationship(lazy="joined")

    @property
    def ingredients(self) -> list[str]:
        """Ingredients decoded from their JSON column."""
        if not self.ingredients_json:
            return []
        try:
            value = json.loads(self.ingredients_json)
        except json.JSONDecodeError:
            return []
        return [str(item) for item in value] if isinstance(value, list) else []

    @ingredients.setter
    def ingredients(self, value: Optional[list[str]]) -> None:
        self.ingredients_json = json.dumps(value) if value else None

    @property
    def profile_name(self) -> Optional[str]:
        return self.profile.name if self.profile is not None else None

    @property
    def profile_type(self) -> Optional[str]:
        return self.profile.type if self.profile is not None else None

    def can_transition_to(self, new_status: FermentationStatus) -> bool:
        current = FermentationStatus(self.status)
        return new_status == current or new_status in STATUS_TRANSITIONS[current]

    def __repr__(self) -> str:
        return f"<Fermentation(id={self.id}, name={self.name!r}, status={self.status})>"
