"""Auto-response API: poll trigger, poller control, approval queue and audit log."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from fastapi import APIRouter, Depends, Query, Response
from fastapi_pagination import Page, Params
from fastapi_pagination.ext.sqlalchemy import paginate
from sqlalchemy.orm import Session

from app.adapters.base import BaseMessageSender
from app.adapters.message_store import WacliMessageStore
from app.commands.auto_response.resolve_queue_item_command import (
    ResolveQueueItemCommand,
)
from app.core.poller import AutoResponsePoller
from app.db import get_db
from app.routers.utils.dependencies import (
    get_clock,
    get_message_sender,
    get_message_store,
    get_poller,
)
from app.schemas.auto_response import (
    ApprovalQueueItemRead,
    ApprovalQueueItemWithContext,
    ApprovalQueueList,
    AutoResponseLogRead,
    PollerStatus,
    PollSummary,
    QueueActionRequest,
    QueueActionResult,
    QueueStatus,
)
from app.services.approval_queue_service import ApprovalQueueService
from app.services.auto_response_log_service import AutoResponseLogService

auto_response_router = APIRouter(prefix="/auto-response", tags=["auto-response"])


def _poller_status(poller: AutoResponsePoller) -> PollerStatus:
    return PollerStatus(
        running=poller.is_running, interval_seconds=poller.interval_seconds
    )


@auto_response_router.post("/poll", response_model=PollSummary)
def trigger_poll(
    response: Response,
    poller: AutoResponsePoller = Depends(get_poller),
) -> PollSummary:
    """Run one poll cycle now; returns status "busy" if one is already running."""
    response.headers["Cache-Control"] = "no-store"
    return poller.poll_once()


@auto_response_router.get("/poller", response_model=PollerStatus)
def get_poller_status(
    poller: AutoResponsePoller = Depends(get_poller),
) -> PollerStatus:
    return _poller_status(poller)


@auto_response_router.post("/poller/start", response_model=PollerStatus)
def start_poller(
    poller: AutoResponsePoller = Depends(get_poller),
) -> PollerStatus:
    poller.start()
    return _poller_status(poller)


@auto_response_router.post("/poller/stop", response_model=PollerStatus)
def stop_poller(
    poller: AutoResponsePoller = Depends(get_poller),
) -> PollerStatus:
    poller.stop()
    return _poller_status(poller)


@auto_response_router.get("/queue", response_model=ApprovalQueueList)
def list_queue(
    status: QueueStatus = Query("pending"),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    store: WacliMessageStore = Depends(get_message_store),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> ApprovalQueueList:
    """List queue items with the triggering message and contact attached."""
    items = ApprovalQueueService(db).list_items(clock(), status=status, limit=limit)
    rows = []
    for item in items:
        row = ApprovalQueueItemWithContext(
            **ApprovalQueueItemRead.model_validate(item).model_dump(),
            message=store.get_message(item.chat_jid, item.trigger_message_id),
            contact=store.get_contact(item.chat_jid),
        )
        rows.append(row)
    return ApprovalQueueList(items=rows)


@auto_response_router.post("/queue", response_model=QueueActionResult)
def resolve_queue_item(
    body: QueueActionRequest,
    db: Session = Depends(get_db),
    sender: BaseMessageSender = Depends(get_message_sender),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> QueueActionResult:
    """Approve (and send) or reject a pending queue item."""
    command = ResolveQueueItemCommand(db, sender, clock=clock)
    return command.execute(body.id, body.action, edited_text=body.edited_text)


@auto_response_router.get("/log", response_model=Page[AutoResponseLogRead])
def list_log(
    params: Params = Depends(),
    chat_jid: Optional[str] = Query(None),
    db: Session = Depends(get_db),
) -> Page[AutoResponseLogRead]:
    """Paginated audit log of sent auto-responses, newest first."""
    query = AutoResponseLogService(db).entries_query(chat_jid)
    return paginate(query, params=params)
