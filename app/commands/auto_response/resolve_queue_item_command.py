"""Operator approve/reject of a pending approval queue item."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from app.adapters.base import BaseMessageSender
from app.exceptions import CriticalResumeFailure, NotFoundError
from app.models.approval_queue_item import ApprovalQueueItem, ApprovalStatus
from app.schemas.auto_response import QueueActionResult
from app.schemas.outbound import SendResult
from app.services.approval_queue_service import ApprovalQueueService
from app.services.auto_response_log_service import AutoResponseLogService
from app.utils.dates import system_clock

APPROVED = ApprovalStatus.APPROVED.value
REJECTED = ApprovalStatus.REJECTED.value


class ResolveQueueItemCommand:
    """
    Resolve a queue item exactly once.

    The item is claimed with a conditional update before anything is sent,
    so a concurrent second resolver finds it no longer pending and gets
    NotFoundError.
    """

    def __init__(
        self,
        db: Session,
        sender: BaseMessageSender,
        clock: Callable[[], datetime] = system_clock,
    ) -> None:
        self.db = db
        self.sender = sender
        self.clock = clock
        self.queue_svc = ApprovalQueueService(db)
        self.log_svc = AutoResponseLogService(db)
        self.logger = logging.getLogger(__name__)

    def execute(
        self, item_id: int, action: str, edited_text: Optional[str] = None
    ) -> QueueActionResult:
        """
        Args:
            item_id: Approval queue item id.
            action: "approve" or "reject".
            edited_text: Replacement text to send instead of the proposal.

        Returns:
            QueueActionResult with the sent message id on approval.

        Raises:
            NotFoundError: item missing, already resolved or expired.
            SendError: sending failed; the item is pending again.
            CriticalResumeFailure: the sync process did not restart.
        """
        now = self.clock()
        if action == "approve":
            return self._approve(item_id, edited_text, now)
        if action == "reject":
            return self._reject(item_id, now)
        raise ValueError(f"Unknown queue action: {action}")

    def _claim(self, item_id: int, status: str, now: datetime) -> ApprovalQueueItem:
        if not self.queue_svc.claim(item_id, status, now):
            self.queue_svc.expire_stale(now)
            raise NotFoundError("Queue item not found or already processed")
        return self.queue_svc.get_item(item_id)

    def _approve(
        self, item_id: int, edited_text: Optional[str], now: datetime
    ) -> QueueActionResult:
        item = self._claim(item_id, APPROVED, now)
        text = edited_text or item.proposed_response
        try:
            sent = self.sender.send(item.chat_jid, text)
        except CriticalResumeFailure as e:
            if e.sent_result is None:
                self.queue_svc.release_claim(item_id, APPROVED)
            else:
                self._record_approval(item, text, e.sent_result, now)
            raise
        except Exception:
            self.queue_svc.release_claim(item_id, APPROVED)
            raise
        self._record_approval(item, text, sent, now)
        self.logger.info(
            "Approved queue item %s for %s, sent %s",
            item_id,
            item.chat_jid,
            sent.message_id,
        )
        return QueueActionResult(success=True, message_id=sent.message_id)

    def _record_approval(
        self, item: ApprovalQueueItem, text: str, sent: SendResult, now: datetime
    ) -> None:
        chat_jid = item.chat_jid
        trigger_message_id = item.trigger_message_id
        style_profile_id = item.style_profile_id
        self.queue_svc.set_final_text(item.id, text)
        self.log_svc.record_send(
            chat_jid=chat_jid,
            trigger_message_id=trigger_message_id,
            response_message_id=sent.message_id,
            approved=True,
            now=now,
            style_profile_id=style_profile_id,
        )

    def _reject(self, item_id: int, now: datetime) -> QueueActionResult:
        self._claim(item_id, REJECTED, now)
        self.logger.info("Rejected queue item %s", item_id)
        return QueueActionResult(success=True)
