"""One poll cycle: feed unseen inbound messages to the decision engine."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.adapters.message_store import WacliMessageStore
from app.commands.auto_response.process_message_command import (
    ProcessIncomingMessageCommand,
)
from app.constants.auto_response import POLL_BATCH_SIZE
from app.schemas.auto_response import PollSummary
from app.services.setting_service import SettingService


class PollNewMessagesCommand:
    """
    Process every message newer than the watermark, then advance it.

    The watermark moves to the newest timestamp in the batch whatever the
    per-message outcome, so a message that failed is not retried.
    """

    def __init__(
        self,
        db: Session,
        message_store: WacliMessageStore,
        processor: ProcessIncomingMessageCommand,
        batch_size: int = POLL_BATCH_SIZE,
    ) -> None:
        self.db = db
        self.message_store = message_store
        self.processor = processor
        self.batch_size = batch_size
        self.settings_svc = SettingService(db)
        self.logger = logging.getLogger(__name__)

    def execute(self) -> PollSummary:
        watermark = self.settings_svc.get_watermark()
        messages = self.message_store.list_unseen_inbound(
            watermark, limit=self.batch_size
        )
        if not messages:
            self.logger.debug("No new messages since %s", watermark)
            return PollSummary(watermark=watermark)
        if len(messages) >= self.batch_size:
            messages = self._complete_last_timestamp(messages)

        self.logger.info("Found %d new message(s)", len(messages))
        summary = PollSummary(found=len(messages), watermark=watermark)
        for message in messages:
            try:
                result = self.processor.execute(message)
            except Exception:
                self.db.rollback()
                summary.failed += 1
                self.logger.exception(
                    "Failed to process message %s in %s",
                    message.id,
                    message.chat_jid,
                )
                continue
            if result.action == "sent":
                summary.sent += 1
            elif result.action == "queued":
                summary.queued += 1
            else:
                summary.skipped += 1

        summary.watermark = self.settings_svc.advance_watermark(
            max(m.timestamp for m in messages)
        )
        return summary

    def _complete_last_timestamp(self, messages):
        """
        Add the rest of the newest timestamp group cut off by the batch limit.

        The watermark only holds a timestamp, so every message at the batch max
        must be handled in this cycle or it would never be seen.
        """
        last_ts = messages[-1].timestamp
        seen = {(m.chat_jid, m.id) for m in messages}
        extra = [
            m
            for m in self.message_store.list_inbound_at(last_ts)
            if (m.chat_jid, m.id) not in seen
        ]
        if extra:
            self.logger.info(
                "Batch limit split timestamp %s, adding %d message(s)",
                last_ts,
                len(extra),
            )
        return messages + extra
