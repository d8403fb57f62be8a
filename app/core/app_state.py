"""Process-wide collaborators shared by routers and the lifespan."""

from __future__ import annotations

import threading
from typing import Optional

from app.adapters.message_store import WacliMessageStore
from app.adapters.wacli_sender import WacliMessageSender, build_wacli_sender_from_env
from app.config import get_settings
from app.core.poller import AutoResponsePoller
from app.db import db_manager
from app.utils.rate_limit import SendRateLimiter
from app.workers.llm import LLMReplyGenerator, build_reply_generator_from_env


class AppState:
    """Builds each collaborator on first use from settings."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._message_store: Optional[WacliMessageStore] = None
        self._sender: Optional[WacliMessageSender] = None
        self._generator: Optional[LLMReplyGenerator] = None
        self._poller: Optional[AutoResponsePoller] = None
        self._send_rate_limiter: Optional[SendRateLimiter] = None

    @property
    def message_store(self) -> WacliMessageStore:
        with self._lock:
            if self._message_store is None:
                self._message_store = WacliMessageStore(get_settings().wacli_db_path)
            return self._message_store

    @property
    def sender(self) -> WacliMessageSender:
        with self._lock:
            if self._sender is None:
                self._sender = build_wacli_sender_from_env()
            return self._sender

    @property
    def generator(self) -> LLMReplyGenerator:
        with self._lock:
            if self._generator is None:
                self._generator = build_reply_generator_from_env()
            return self._generator

    @property
    def poller(self) -> AutoResponsePoller:
        with self._lock:
            if self._poller is None:
                self._poller = AutoResponsePoller(
                    session_factory=db_manager.session_factory,
                    message_store=self.message_store,
                    generator=self.generator,
                    sender=self.sender,
                    interval_seconds=get_settings().auto_response_poll_interval_seconds,
                )
            return self._poller

    @property
    def send_rate_limiter(self) -> SendRateLimiter:
        with self._lock:
            if self._send_rate_limiter is None:
                settings = get_settings()
                self._send_rate_limiter = SendRateLimiter(
                    settings.send_rate_limit_per_minute,
                    storage_uri=settings.send_rate_limit_storage_uri,
                )
            return self._send_rate_limiter


state = AppState()
