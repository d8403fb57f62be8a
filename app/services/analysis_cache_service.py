"""Keyed TTL cache for analysis results, stored in the app database."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from app.models.analysis_cache import AnalysisCacheEntry
from app.utils.dates import to_storage


class AnalysisCacheService:
    """
    Freshness is decided by comparing the stored ``created_at`` with
    ``now - ttl``; writes replace the row for the same key.
    """

    def __init__(self, db: Session, namespace: str) -> None:
        self.db = db
        self.namespace = namespace

    def _entry(self, cache_key: str) -> Optional[AnalysisCacheEntry]:
        return (
            self.db.query(AnalysisCacheEntry)
            .filter(
                AnalysisCacheEntry.namespace == self.namespace,
                AnalysisCacheEntry.cache_key == cache_key,
            )
            .first()
        )

    def get_fresh(self, cache_key: str, ttl: timedelta, now: datetime) -> Optional[str]:
        entry = self._entry(cache_key)
        if entry is None:
            return None
        if entry.created_at <= to_storage(now) - ttl:
            return None
        return str(entry.value)

    def put(self, cache_key: str, value: str, now: datetime) -> None:
        entry = self._entry(cache_key)
        if entry is None:
            entry = AnalysisCacheEntry(namespace=self.namespace, cache_key=cache_key)
            self.db.add(entry)
        entry.value = value
        entry.created_at = to_storage(now)
        self.db.commit()
