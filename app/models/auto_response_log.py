"""Audit log of replies that were actually sent. Insert only."""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
)

from app.db import Base
from app.utils.dates import utcnow


class AutoResponseLogEntry(Base):
    """``approved`` is True when an operator approved the send, False when autonomous."""

    __tablename__ = "auto_response_log"

    __table_args__ = (
        Index("ix_auto_response_log_chat_approved", "chat_jid", "approved"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    chat_jid = Column(String(256), nullable=False)
    trigger_message_id = Column(String(256), nullable=False)
    response_message_id = Column(String(256), nullable=True)
    style_profile_id = Column(
        Integer, ForeignKey("style_profiles.id", ondelete="SET NULL"), nullable=True
    )
    prompt_tokens = Column(Integer, nullable=False, default=0)
    completion_tokens = Column(Integer, nullable=False, default=0)
    cost_usd = Column(Float, nullable=False, default=0.0)
    approved = Column(Boolean, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
