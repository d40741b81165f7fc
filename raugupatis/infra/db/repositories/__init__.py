"""
Repository layer.
"""
from raugupatis.infra.db.repositories.base import BaseRepository, OwnedRepository
from raugupatis.infra.db.repositories.user import UserRepository
from raugupatis.infra.db.repositories.profile import ProfileRepository
from raugupatis.infra.db.repositories.fermentation import FermentationRepository, FermentationFilters
from raugupatis.infra.db.repositories.readings import (
    FermentationChildRepository,
    TemperatureLogRepository,
    TasteProfileRepository,
    PhotoRepository,
)
from raugupatis.infra.db.repositories.session_record import SessionRepository

__all__ = [
    "BaseRepository",
    "OwnedRepository",
    "UserRepository",
    "ProfileRepository",
    "FermentationRepository",
    "FermentationFilters",
    "FermentationChildRepository",
    "TemperatureLogRepository",
    "TasteProfileRepository",
    "PhotoRepository",
    "SessionRepository",
]
