from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel


class HealthRead(BaseModel):
    """Health of the message store and the sync process."""

    status: Literal["ok", "degraded", "error"]
    wacli_sync: Literal["running", "stopped"]
    last_message_age: Optional[int] = None
    db_accessible: bool
    timestamp: int
