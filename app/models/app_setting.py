"""Key/value application settings (kill switch, poll watermark)."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String, Text

from app.db import Base
from app.utils.dates import utcnow


class AppSetting(Base):
    """One row per setting key. Values are stored as text."""

    __tablename__ = "app_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String(128), unique=True, nullable=False, index=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
