"""Per-chat auto-response policy."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.db import Base
from app.models.mixins import TimestampMixin


class AutoResponseConfig(Base, TimestampMixin):
    """One row per chat, created lazily on first configuration.

    ``daily_response_count`` only moves on a confirmed autonomous send and is
    reset lazily when ``daily_count_reset_at`` predates the current local day.
    """

    __tablename__ = "auto_response_config"

    id = Column(Integer, primary_key=True, autoincrement=True)
    chat_jid = Column(String(256), unique=True, nullable=False, index=True)
    enabled = Column(Boolean, nullable=False, default=False)
    style_profile_id = Column(
        Integer, ForeignKey("style_profiles.id", ondelete="SET NULL"), nullable=True
    )
    require_approval = Column(Boolean, nullable=False, default=True)
    max_daily_responses = Column(Integer, nullable=True)  # None = unlimited
    daily_response_count = Column(Integer, nullable=False, default=0)
    daily_count_reset_at = Column(DateTime, nullable=True)
    context_window_messages = Column(Integer, nullable=False, default=10)

    style_profile = relationship("StyleProfile")
