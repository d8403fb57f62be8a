"""Manual send request/response and sender result."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SendResult(BaseModel):
    message_id: str


class SendMessageRequest(BaseModel):
    to: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)


class SendMessageResponse(BaseModel):
    success: bool = True
    message_id: str
