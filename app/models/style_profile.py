"""Named reply style profiles that chat configs can point at."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, Float, Integer, String, Text

from app.db import Base
from app.models.mixins import TimestampMixin


class StyleProfile(Base, TimestampMixin):
    __tablename__ = "style_profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(128), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    system_prompt = Column(Text, nullable=False)
    temperature = Column(Float, nullable=False, default=0.7)
    max_tokens = Column(Integer, nullable=False, default=500)
    is_default = Column(Boolean, nullable=False, default=False)
