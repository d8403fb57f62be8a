"""Append-only audit log of sent auto-responses."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from app.models.auto_response_log import AutoResponseLogEntry
from app.utils.dates import to_storage


class AutoResponseLogService:
    """Insert and read only; entries are never updated or deleted."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def record_send(
        self,
        chat_jid: str,
        trigger_message_id: str,
        response_message_id: Optional[str],
        approved: bool,
        now: datetime,
        style_profile_id: Optional[int] = None,
        prompt_tokens: int = 0,
        completion_tokens: int = 0,
        cost_usd: float = 0.0,
    ) -> AutoResponseLogEntry:
        entry = AutoResponseLogEntry(
            chat_jid=chat_jid,
            trigger_message_id=trigger_message_id,
            response_message_id=response_message_id,
            style_profile_id=style_profile_id,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            cost_usd=cost_usd,
            approved=approved,
            created_at=to_storage(now),
        )
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def count_approved(self, chat_jid: str) -> int:
        """Number of sends an operator approved for this chat."""
        return (
            self.db.query(func.count(AutoResponseLogEntry.id))
            .filter(
                AutoResponseLogEntry.chat_jid == chat_jid,
                AutoResponseLogEntry.approved.is_(True),
            )
            .scalar()
            or 0
        )

    def entries_query(
        self, chat_jid: Optional[str] = None
    ) -> Query[AutoResponseLogEntry]:
        """Newest-first query, for pagination."""
        q = self.db.query(AutoResponseLogEntry).order_by(
            AutoResponseLogEntry.created_at.desc(), AutoResponseLogEntry.id.desc()
        )
        if chat_jid is not None:
            q = q.filter(AutoResponseLogEntry.chat_jid == chat_jid)
        return q
