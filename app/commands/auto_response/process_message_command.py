"""
Decision engine: run one inbound message through the auto-response policy.

Gates are evaluated in a fixed order and the first failing gate decides the
outcome. Generation and send failures propagate to the caller.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.adapters.base import BaseMessageSender
from app.adapters.message_store import WacliMessageStore
from app.config import get_settings
from app.constants.auto_response import (
    MAX_PENDING_APPROVALS,
    MIN_APPROVED_BEFORE_AUTONOMOUS,
    MIN_CONFIDENCE,
    STYLE_PROFILE_CACHE_NAMESPACE,
    STYLE_PROFILE_CACHE_TTL,
)
from app.exceptions import CriticalResumeFailure
from app.models.auto_response_config import AutoResponseConfig
from app.schemas.auto_response import DecisionResult
from app.schemas.message import ChatMessage, InboundMessage
from app.schemas.outbound import SendResult
from app.schemas.style import GeneratedReply, StyleProfile
from app.services.analysis_cache_service import AnalysisCacheService
from app.services.approval_queue_service import ApprovalQueueService
from app.services.auto_response_config_service import AutoResponseConfigService
from app.services.auto_response_log_service import AutoResponseLogService
from app.services.setting_service import SettingService
from app.utils.dates import system_clock
from app.utils.jid import is_group_jid
from app.utils.metrics import AUTO_RESPONSE_DECISIONS_TOTAL
from app.workers.llm import BaseReplyGenerator


def _skipped(reason: str) -> DecisionResult:
    return DecisionResult(action="skipped", reason=reason)


class ProcessIncomingMessageCommand:
    """Decide skip / queue / send for a single inbound message."""

    def __init__(
        self,
        db: Session,
        message_store: WacliMessageStore,
        generator: BaseReplyGenerator,
        sender: BaseMessageSender,
        clock: Callable[[], datetime] = system_clock,
        cost_per_million_tokens: Optional[float] = None,
    ) -> None:
        self.db = db
        self.message_store = message_store
        self.generator = generator
        self.sender = sender
        self.clock = clock
        self.cost_per_million_tokens = (
            cost_per_million_tokens
            if cost_per_million_tokens is not None
            else get_settings().llm_cost_per_million_tokens
        )
        self.settings_svc = SettingService(db)
        self.config_svc = AutoResponseConfigService(db)
        self.queue_svc = ApprovalQueueService(db)
        self.log_svc = AutoResponseLogService(db)
        self.style_cache = AnalysisCacheService(db, STYLE_PROFILE_CACHE_NAMESPACE)
        self.logger = logging.getLogger(__name__)

    def execute(self, message: InboundMessage) -> DecisionResult:
        result = self._decide(message)
        AUTO_RESPONSE_DECISIONS_TOTAL.labels(action=result.action).inc()
        self.logger.info(
            "Auto-response for %s (msg %s): %s - %s",
            message.chat_jid,
            message.id,
            result.action,
            result.reason,
        )
        return result

    def _decide(self, message: InboundMessage) -> DecisionResult:
        chat_jid = message.chat_jid
        now = self.clock()

        if not self.settings_svc.is_auto_response_enabled():
            return _skipped("Global auto-response disabled")

        if is_group_jid(chat_jid):
            return _skipped("Group chats not supported")

        config = self.config_svc.get_config(chat_jid)
        if config is None or not config.enabled:
            return _skipped("Auto-response not enabled for this chat")

        config = self.config_svc.roll_daily_counter(config, now)
        if (
            config.max_daily_responses is not None
            and config.daily_response_count >= config.max_daily_responses
        ):
            return _skipped("Daily response limit reached")

        if self.queue_svc.count_pending(chat_jid, now) >= MAX_PENDING_APPROVALS:
            return _skipped("Too many pending approvals")

        reply = self._generate_reply(message, config, now)
        if reply.confidence <= MIN_CONFIDENCE:
            return _skipped(f"AI confidence too low ({reply.confidence})")

        approved_count = self.log_svc.count_approved(chat_jid)
        if config.require_approval or approved_count < MIN_APPROVED_BEFORE_AUTONOMOUS:
            item = self.queue_svc.create_item(
                chat_jid=chat_jid,
                trigger_message_id=message.id,
                proposed_response=reply.message,
                now=now,
                style_profile_id=config.style_profile_id,
            )
            return DecisionResult(
                action="queued",
                reason=(
                    "Requires approval (approval required for this chat)"
                    if config.require_approval
                    else f"Requires approval (fewer than {MIN_APPROVED_BEFORE_AUTONOMOUS} approved replies)"
                ),
                queue_id=item.id,
            )

        try:
            sent = self.sender.send(chat_jid, reply.message)
        except CriticalResumeFailure as e:
            if e.sent_result is not None:
                self._record_send(message, config, reply, e.sent_result, now)
            raise
        self._record_send(message, config, reply, sent, now)
        return DecisionResult(
            action="sent",
            reason="Auto-response sent successfully",
            message_id=sent.message_id,
        )

    def _generate_reply(
        self, message: InboundMessage, config: AutoResponseConfig, now: datetime
    ) -> GeneratedReply:
        recent: List[ChatMessage] = self.message_store.list_recent_messages(
            message.chat_jid, config.context_window_messages
        )
        contact_name = self.message_store.get_contact_display_name(message.chat_jid)
        style_profile = self._style_profile(contact_name, recent, now)
        return self.generator.generate_reply(
            contact_name,
            style_profile,
            recent,
            f'Incoming message: "{message.text}"',
        )

    def _style_profile(
        self, contact_name: str, messages: List[ChatMessage], now: datetime
    ) -> StyleProfile:
        """Style profile per contact, reused for up to 24 hours."""
        cached = self.style_cache.get_fresh(contact_name, STYLE_PROFILE_CACHE_TTL, now)
        if cached is not None:
            try:
                return StyleProfile.model_validate_json(cached)
            except ValidationError:
                self.logger.warning(
                    "Discarding unreadable cached style profile for %s", contact_name
                )
        profile = self.generator.analyze_style(contact_name, messages)
        self.style_cache.put(contact_name, profile.model_dump_json(), now)
        return profile

    def _record_send(
        self,
        message: InboundMessage,
        config: AutoResponseConfig,
        reply: GeneratedReply,
        sent: SendResult,
        now: datetime,
    ) -> None:
        self.config_svc.increment_daily_count(message.chat_jid)
        tokens = reply.prompt_tokens + reply.completion_tokens
        self.log_svc.record_send(
            chat_jid=message.chat_jid,
            trigger_message_id=message.id,
            response_message_id=sent.message_id,
            approved=False,
            now=now,
            style_profile_id=config.style_profile_id,
            prompt_tokens=reply.prompt_tokens,
            completion_tokens=reply.completion_tokens,
            cost_usd=tokens * self.cost_per_million_tokens / 1_000_000,
        )
