"""
Shared schema helpers.
"""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timezone-aware input is converted to UTC; naive input is taken as UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def strip_or_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class MessageResponse(BaseModel):
    success: bool = True
    message: str
