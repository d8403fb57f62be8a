"""Pydantic schemas for auto-response config, approval queue, decisions and polls."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.message import ChatMessage, Contact

# -----------------------------------------------------------------------------
# Config
# -----------------------------------------------------------------------------


class AutoResponseConfigUpdate(BaseModel):
    """Partial upsert; only fields present in the request are written."""

    chat_jid: str = Field(..., min_length=1)
    enabled: Optional[bool] = None
    style_profile_id: Optional[int] = None
    require_approval: Optional[bool] = None
    max_daily_responses: Optional[int] = Field(None, ge=0)
    context_window_messages: Optional[int] = Field(None, ge=1, le=200)


class AutoResponseConfigRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    chat_jid: str
    enabled: bool
    style_profile_id: Optional[int]
    require_approval: bool
    max_daily_responses: Optional[int]
    daily_response_count: int
    daily_count_reset_at: Optional[datetime]
    context_window_messages: int
    created_at: datetime
    updated_at: datetime


class AutoResponseConfigList(BaseModel):
    configs: List[AutoResponseConfigRead]


class AutoResponseConfigSaved(BaseModel):
    success: bool = True
    config: AutoResponseConfigRead


class GlobalAutoResponseSetting(BaseModel):
    enabled: bool


# -----------------------------------------------------------------------------
# Approval queue
# -----------------------------------------------------------------------------

QueueStatus = Literal["pending", "approved", "rejected", "expired"]


class ApprovalQueueItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    chat_jid: str
    trigger_message_id: str
    proposed_response: str
    style_profile_id: Optional[int]
    status: QueueStatus
    created_at: datetime
    expires_at: datetime
    resolved_at: Optional[datetime]


class ApprovalQueueItemWithContext(ApprovalQueueItemRead):
    message: Optional[ChatMessage] = None
    contact: Optional[Contact] = None


class ApprovalQueueList(BaseModel):
    items: List[ApprovalQueueItemWithContext]


class QueueActionRequest(BaseModel):
    id: int
    action: Literal["approve", "reject"]
    edited_text: Optional[str] = Field(None, min_length=1)


class QueueActionResult(BaseModel):
    success: bool = True
    message_id: Optional[str] = None


class AutoResponseLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    chat_jid: str
    trigger_message_id: str
    response_message_id: Optional[str]
    style_profile_id: Optional[int]
    prompt_tokens: int
    completion_tokens: int
    cost_usd: float
    approved: bool
    created_at: datetime


# -----------------------------------------------------------------------------
# Decisions and polling
# -----------------------------------------------------------------------------


class DecisionResult(BaseModel):
    """Outcome of running one inbound message through the decision engine."""

    action: Literal["sent", "queued", "skipped"]
    reason: str
    message_id: Optional[str] = None
    queue_id: Optional[int] = None


class PollSummary(BaseModel):
    status: Literal["ok", "busy"] = "ok"
    found: int = 0
    sent: int = 0
    queued: int = 0
    skipped: int = 0
    failed: int = 0
    watermark: int = 0


class PollerStatus(BaseModel):
    running: bool
    interval_seconds: float
