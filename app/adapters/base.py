"""
Message sender interface.

Senders deliver a text to a WhatsApp chat and report the platform message id.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Literal

from app.schemas.outbound import SendResult

SyncStatus = Literal["running", "stopped"]


class BaseMessageSender(ABC):
    """Contract for message senders."""

    @abstractmethod
    def send(self, chat_jid: str, text: str) -> SendResult:
        """
        Send ``text`` to ``chat_jid``.

        Raises InvalidInputError for a malformed JID or empty text, SendError
        when delivery fails and CriticalResumeFailure when the sync process
        could not be restarted afterwards.
        """
        ...

    def sync_status(self) -> SyncStatus:
        """State of the message sync process. Override if the sender pauses it."""
        return "running"
