"""Shapes read from the wacli message store."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class ChatMessage(BaseModel):
    """A message row from the synced store. ``ts`` is epoch seconds."""

    model_config = ConfigDict(frozen=True)

    msg_id: str
    chat_jid: str
    sender_jid: Optional[str] = None
    ts: int
    from_me: bool = False
    text: Optional[str] = None


class InboundMessage(BaseModel):
    """Unseen inbound message handed from the poller to the decision engine."""

    model_config = ConfigDict(frozen=True)

    id: str
    chat_jid: str
    text: str
    timestamp: int


class Contact(BaseModel):
    jid: str
    phone: Optional[str] = None
    push_name: Optional[str] = None
    full_name: Optional[str] = None
    first_name: Optional[str] = None
    business_name: Optional[str] = None
