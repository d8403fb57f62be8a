"""
Background poller driving the auto-response pipeline.

One poller object owns the loop thread and a busy guard: at most one cycle
runs at a time, and a tick that arrives while a cycle is running is dropped
rather than queued. Single-process only; several app instances would each
poll independently.
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import sessionmaker

from app.adapters.base import BaseMessageSender
from app.adapters.message_store import WacliMessageStore
from app.commands.auto_response.poll_messages_command import PollNewMessagesCommand
from app.commands.auto_response.process_message_command import (
    ProcessIncomingMessageCommand,
)
from app.infra.logging_config import get_logger
from app.schemas.auto_response import PollSummary
from app.utils.dates import system_clock
from app.utils.metrics import AUTO_RESPONSE_POLL_CYCLES_TOTAL
from app.workers.llm import BaseReplyGenerator

logger = get_logger("auto_response_poller")


class AutoResponsePoller:
    def __init__(
        self,
        session_factory: sessionmaker,
        message_store: WacliMessageStore,
        generator: BaseReplyGenerator,
        sender: BaseMessageSender,
        interval_seconds: float = 10.0,
        clock: Callable[[], datetime] = system_clock,
    ) -> None:
        self._session_factory = session_factory
        self._message_store = message_store
        self._generator = generator
        self._sender = sender
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._busy = threading.Lock()
        self._lifecycle = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> bool:
        """Start the loop; the first cycle runs immediately. False if already running."""
        with self._lifecycle:
            if self.is_running:
                logger.info("Poller already running")
                return False
            logger.info("Starting poller (interval: %ss)", self.interval_seconds)
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run, name="auto-response-poller", daemon=True
            )
            self._thread.start()
            return True

    def stop(self, timeout: Optional[float] = None) -> bool:
        """
        Stop the loop and wait for the current cycle. False if not running.

        If ``timeout`` expires first the poller keeps reporting as running
        until the cycle ends, so it cannot be started twice.
        """
        with self._lifecycle:
            if not self.is_running:
                logger.info("Poller not running")
                return False
            logger.info("Stopping poller")
            self._stop_event.set()
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Poller still finishing a cycle after %ss", timeout)
            else:
                self._thread = None
            return True

    def poll_once(self) -> PollSummary:
        """Run one cycle now, or return status "busy" if one is in progress."""
        if not self._busy.acquire(blocking=False):
            logger.info("Already processing, skipping poll")
            AUTO_RESPONSE_POLL_CYCLES_TOTAL.labels(status="busy").inc()
            return PollSummary(status="busy")
        try:
            with self._session_factory() as db:
                processor = ProcessIncomingMessageCommand(
                    db,
                    self._message_store,
                    self._generator,
                    self._sender,
                    clock=self._clock,
                )
                summary = PollNewMessagesCommand(
                    db, self._message_store, processor
                ).execute()
            AUTO_RESPONSE_POLL_CYCLES_TOTAL.labels(status="ok").inc()
            return summary
        finally:
            self._busy.release()

    def _run(self) -> None:
        self._tick()
        while not self._stop_event.wait(self.interval_seconds):
            self._tick()

    def _tick(self) -> None:
        try:
            self.poll_once()
        except Exception:
            AUTO_RESPONSE_POLL_CYCLES_TOTAL.labels(status="error").inc()
            logger.exception("Poll failed")
