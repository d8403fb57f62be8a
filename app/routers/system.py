"""Health and metrics endpoints."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from app.adapters.base import BaseMessageSender
from app.adapters.message_store import WacliMessageStore
from app.routers.utils.dependencies import get_message_sender, get_message_store
from app.schemas.system import HealthRead

logger = logging.getLogger(__name__)

# Newest synced message older than this marks the service as degraded.
STALE_MESSAGE_SECONDS = 300

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthRead)
def health(
    store: WacliMessageStore = Depends(get_message_store),
    sender: BaseMessageSender = Depends(get_message_sender),
) -> HealthRead:
    now = int(time.time())
    db_accessible = True
    last_ts = None
    try:
        last_ts = store.get_last_message_ts()
    except Exception:
        logger.warning("Message store not accessible", exc_info=True)
        db_accessible = False

    sync = sender.sync_status()

    last_message_age = now - last_ts if last_ts is not None else None
    if not db_accessible:
        status = "error"
    elif (
        sync == "running"
        and last_message_age is not None
        and last_message_age < STALE_MESSAGE_SECONDS
    ):
        status = "ok"
    else:
        status = "degraded"

    return HealthRead(
        status=status,
        wacli_sync=sync,
        last_message_age=last_message_age,
        db_accessible=db_accessible,
        timestamp=now,
    )


@router.get("/metrics")
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
