"""
Manual send API.

Sends through the same wacli sender as the decision engine, so the sync
process is paused around every send here too.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.adapters.base import BaseMessageSender
from app.routers.utils.dependencies import get_message_sender, get_send_rate_limiter
from app.schemas.outbound import SendMessageRequest, SendMessageResponse
from app.utils.rate_limit import SendRateLimiter

logger = logging.getLogger(__name__)

messages_router = APIRouter(prefix="/messages", tags=["messages"])


@messages_router.post("/send", response_model=SendMessageResponse)
def send_message(
    body: SendMessageRequest,
    sender: BaseMessageSender = Depends(get_message_sender),
    limiter: SendRateLimiter = Depends(get_send_rate_limiter),
) -> SendMessageResponse:
    if not limiter.allow("messages.send"):
        raise HTTPException(
            status_code=429, detail="Too many requests. Please wait a moment."
        )
    result = sender.send(body.to, body.message)
    logger.info("Manual send to %s: %s", body.to, result.message_id)
    return SendMessageResponse(message_id=result.message_id)
