"""
Approval queue persistence.

Every status transition is a conditional UPDATE guarded on the current
status, so two concurrent resolvers cannot both win.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from app.constants.auto_response import APPROVAL_TTL
from app.models.approval_queue_item import ApprovalQueueItem, ApprovalStatus
from app.utils.dates import to_storage

PENDING = ApprovalStatus.PENDING.value


class ApprovalQueueService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_item(self, item_id: int) -> Optional[ApprovalQueueItem]:
        return (
            self.db.query(ApprovalQueueItem)
            .filter(ApprovalQueueItem.id == item_id)
            .first()
        )

    def create_item(
        self,
        chat_jid: str,
        trigger_message_id: str,
        proposed_response: str,
        now: datetime,
        style_profile_id: Optional[int] = None,
    ) -> ApprovalQueueItem:
        """Insert a pending proposal that expires ``APPROVAL_TTL`` after creation."""
        created_at = to_storage(now)
        item = ApprovalQueueItem(
            chat_jid=chat_jid,
            trigger_message_id=trigger_message_id,
            proposed_response=proposed_response,
            style_profile_id=style_profile_id,
            status=PENDING,
            created_at=created_at,
            expires_at=created_at + APPROVAL_TTL,
            resolved_at=None,
        )
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def list_items(
        self, now: datetime, status: str = PENDING, limit: int = 50
    ) -> List[ApprovalQueueItem]:
        """Items with ``status``, oldest first."""
        self.expire_stale(now)
        return (
            self.db.query(ApprovalQueueItem)
            .filter(ApprovalQueueItem.status == status)
            .order_by(ApprovalQueueItem.created_at.asc(), ApprovalQueueItem.id.asc())
            .limit(limit)
            .all()
        )

    def count_pending(self, chat_jid: str, now: datetime) -> int:
        self.expire_stale(now, chat_jid=chat_jid)
        return (
            self.db.query(func.count(ApprovalQueueItem.id))
            .filter(
                ApprovalQueueItem.chat_jid == chat_jid,
                ApprovalQueueItem.status == PENDING,
            )
            .scalar()
            or 0
        )

    def expire_stale(self, now: datetime, chat_jid: Optional[str] = None) -> int:
        """Flip pending items whose ``expires_at`` has passed to ``expired``."""
        stmt = (
            update(ApprovalQueueItem)
            .where(
                ApprovalQueueItem.status == PENDING,
                ApprovalQueueItem.expires_at <= to_storage(now),
            )
            .values(status=ApprovalStatus.EXPIRED.value)
            .execution_options(synchronize_session=False)
        )
        if chat_jid is not None:
            stmt = stmt.where(ApprovalQueueItem.chat_jid == chat_jid)
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount or 0

    def claim(self, item_id: int, new_status: str, now: datetime) -> bool:
        """
        Move a live pending item to ``new_status`` in one statement.

        Returns False when the item is missing, already resolved or expired.
        """
        stored_now = to_storage(now)
        result = self.db.execute(
            update(ApprovalQueueItem)
            .where(
                ApprovalQueueItem.id == item_id,
                ApprovalQueueItem.status == PENDING,
                ApprovalQueueItem.expires_at > stored_now,
            )
            .values(status=new_status, resolved_at=stored_now)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount == 1

    def release_claim(self, item_id: int, claimed_status: str) -> None:
        """Undo ``claim`` after a failed send so the item can be retried."""
        self.db.execute(
            update(ApprovalQueueItem)
            .where(
                ApprovalQueueItem.id == item_id,
                ApprovalQueueItem.status == claimed_status,
            )
            .values(status=PENDING, resolved_at=None)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()

    def set_final_text(self, item_id: int, text: str) -> None:
        self.db.execute(
            update(ApprovalQueueItem)
            .where(ApprovalQueueItem.id == item_id)
            .values(proposed_response=text)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
