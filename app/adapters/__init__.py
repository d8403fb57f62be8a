"""Adapters over the wacli message store and send CLI."""

from app.adapters.base import BaseMessageSender
from app.adapters.message_store import WacliMessageStore
from app.adapters.wacli_sender import WacliMessageSender

__all__ = ["BaseMessageSender", "WacliMessageStore", "WacliMessageSender"]
