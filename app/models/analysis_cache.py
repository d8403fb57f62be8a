"""Keyed cache for LLM analysis results (style profiles)."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String, Text, UniqueConstraint

from app.db import Base
from app.utils.dates import utcnow


class AnalysisCacheEntry(Base):
    __tablename__ = "analysis_cache"

    __table_args__ = (
        UniqueConstraint("namespace", "cache_key", name="uq_analysis_cache_key"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    namespace = Column(String(64), nullable=False)
    cache_key = Column(String(512), nullable=False)
    value = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
