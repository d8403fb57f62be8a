"""Proposed replies waiting for an operator decision."""

from __future__ import annotations

import enum

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text

from app.db import Base
from app.utils.dates import utcnow


class ApprovalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"


class ApprovalQueueItem(Base):
    """
    One proposal per triggering message.

    Status only ever leaves ``pending``; once resolved the row is immutable
    apart from ``resolved_at`` (and the effective text written on approval).
    """

    __tablename__ = "approval_queue"

    __table_args__ = (
        Index("ix_approval_queue_chat_status", "chat_jid", "status"),
        Index("ix_approval_queue_status_created", "status", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    chat_jid = Column(String(256), nullable=False)
    trigger_message_id = Column(String(256), nullable=False)
    proposed_response = Column(Text, nullable=False)
    style_profile_id = Column(
        Integer, ForeignKey("style_profiles.id", ondelete="SET NULL"), nullable=True
    )
    status = Column(String(16), nullable=False, default=ApprovalStatus.PENDING.value)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    expires_at = Column(DateTime, nullable=False)
    resolved_at = Column(DateTime, nullable=True)
