from datetime import datetime
from typing import Callable

from app.adapters.base import BaseMessageSender
from app.adapters.message_store import WacliMessageStore
from app.core.app_state import state
from app.core.poller import AutoResponsePoller
from app.utils.dates import system_clock
from app.utils.rate_limit import SendRateLimiter


def get_message_store() -> WacliMessageStore:
    """FastAPI dependency for the read-only wacli message store."""
    return state.message_store


def get_message_sender() -> BaseMessageSender:
    """FastAPI dependency for the wacli sender."""
    return state.sender


def get_poller() -> AutoResponsePoller:
    """FastAPI dependency for the process-wide poller."""
    return state.poller


def get_send_rate_limiter() -> SendRateLimiter:
    return state.send_rate_limiter


def get_clock() -> Callable[[], datetime]:
    return system_clock
