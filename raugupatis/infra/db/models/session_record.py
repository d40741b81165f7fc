"""
Server-side session row.

``id`` is a keyed digest of the cookie token, so a leaked table does not
yield usable cookies. ``expiry_date`` is unix seconds.
"""
from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from raugupatis.infra.db.base import Base


class SessionRecord(Base):
    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    data: Mapped[str] = mapped_column(Text, nullable=False)
    expiry_date: Mapped[int] = mapped_column(Integer, nullable=False)
