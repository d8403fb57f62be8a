"""Prompt builders for style analysis and auto-reply generation."""

from __future__ import annotations

from datetime import datetime
from typing import List, Sequence

from app.schemas.message import ChatMessage
from app.schemas.style import StyleProfile

STYLE_WINDOW = 100
REPLY_WINDOW = 10

STYLE_INSTRUCTIONS = (
    "You analyse how a person writes in a private chat. "
    "Answer only with the requested structured fields."
)

REPLY_INSTRUCTIONS = (
    "You draft a single WhatsApp reply on behalf of the user. "
    "Match the contact's style, address their latest message and rate how safe "
    "it is to send without review as confidence between 0 and 1."
)


def _chronological(messages: Sequence[ChatMessage], window: int) -> List[ChatMessage]:
    return sorted(messages, key=lambda m: m.ts)[-window:]


def _sender(msg: ChatMessage, contact_name: str) -> str:
    return "You" if msg.from_me else contact_name


def build_style_analysis_prompt(
    contact_name: str, messages: Sequence[ChatMessage]
) -> str:
    lines = [
        f"[{datetime.fromtimestamp(m.ts):%Y-%m-%d %H:%M}] "
        f"{_sender(m, contact_name)}: {m.text or ''}"
        for m in _chronological(messages, STYLE_WINDOW)
    ]
    return (
        f"Analyze the communication style of {contact_name} based on the last "
        f"{STYLE_WINDOW} messages.\n\n"
        "Messages:\n"
        + "\n".join(lines)
        + "\n\nDescribe typical message length, formality level, emoji usage, "
        "response speed and style, common phrases, topics, emotional tone and a "
        "brief summary of the overall communication style."
    )


def build_auto_reply_prompt(
    contact_name: str,
    style_profile: StyleProfile,
    messages: Sequence[ChatMessage],
    context: str,
) -> str:
    lines = [
        f"{_sender(m, contact_name)}: {m.text or ''}"
        for m in _chronological(messages, REPLY_WINDOW)
    ]
    return (
        f"Generate an automatic response to {contact_name}.\n\n"
        f"Style Profile:\n{style_profile.model_dump_json()}\n\n"
        "Recent Conversation:\n"
        + "\n".join(lines)
        + f"\n\nContext: {context}\n\n"
        "Generate a single, natural response that:\n"
        f"1. Matches {contact_name}'s communication style\n"
        "2. Addresses their most recent message appropriately\n"
        "3. Maintains conversation flow\n"
        "4. Is contextually appropriate"
    )
