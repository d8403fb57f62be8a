"""WhatsApp JID helpers."""

from __future__ import annotations

import re

from app.constants.auto_response import GROUP_JID_SUFFIX, USER_JID_SUFFIX
from app.exceptions import InvalidInputError

JID_PATTERN = re.compile(r"^\d+@(s\.whatsapp\.net|g\.us)$")


def is_group_jid(jid: str) -> bool:
    return jid.endswith(GROUP_JID_SUFFIX)


def is_user_jid(jid: str) -> bool:
    return jid.endswith(USER_JID_SUFFIX)


def validate_jid(jid: str, field: str = "to") -> str:
    if not JID_PATTERN.match(jid or ""):
        raise InvalidInputError(
            "Invalid JID format. Expected format: 1234567890@s.whatsapp.net "
            "or 123456789@g.us",
            field=field,
        )
    return jid
