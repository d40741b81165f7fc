"""
Database models.
"""
from raugupatis.infra.db.base import Base
from raugupatis.infra.db.models.user import User, UserRole, ExperienceLevel, TemperatureUnit
from raugupatis.infra.db.models.profile import FermentationProfile
from raugupatis.infra.db.models.fermentation import Fermentation, FermentationStatus, STATUS_TRANSITIONS
from raugupatis.infra.db.models.readings import TemperatureLog, TasteProfile, FermentationPhoto, PhotoStage
from raugupatis.infra.db.models.session_record import SessionRecord

__all__ = [
    "Base",
    "User",
    "UserRole",
    "ExperienceLevel",
    "TemperatureUnit",
    "FermentationProfile",
    "Fermentation",
    "FermentationStatus",
    "STATUS_TRANSITIONS",
    "TemperatureLog",
    "TasteProfile",
    "FermentationPhoto",
    "PhotoStage",
    "SessionRecord",
]
