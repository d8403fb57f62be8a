"""Tests for approving and rejecting approval queue items."""

import threading
from datetime import timedelta

import pytest
from sqlalchemy.orm import sessionmaker

from app.commands.auto_response.resolve_queue_item_command import (
    ResolveQueueItemCommand,
)
from app.db import Base, build_engine
from app.exceptions import CriticalResumeFailure, NotFoundError, SendError
from app.models.auto_response_log import AutoResponseLogEntry
from app.schemas.outbound import SendResult
from app.services.approval_queue_service import ApprovalQueueService
from app.utils.dates import to_storage
from tests.fixtures.wacli_fixtures import CHAT_JID


@pytest.fixture
def command(db, fake_sender, clock):
    return ResolveQueueItemCommand(db, fake_sender, clock=clock)


def test_approve_sends_proposal(db, command, make_queue_item, fake_sender, now):
    """Approving sends the proposal and logs the approval."""
    item = make_queue_item(proposed_response="See you at 8", trigger_message_id="TRIGGER")

    result = command.execute(item.id, "approve")

    assert result.success is True
    assert result.message_id == "3EB00001"
    assert fake_sender.sent == [(CHAT_JID, "See you at 8")]
    reloaded = ApprovalQueueService(db).get_item(item.id)
    assert reloaded.status == "approved"
    assert reloaded.resolved_at == to_storage(now)

    entry = db.query(AutoResponseLogEntry).one()
    assert entry.approved is True
    assert entry.trigger_message_id == "TRIGGER"
    assert entry.response_message_id == "3EB00001"


def test_approve_with_edited_text(db, command, make_queue_item, fake_sender):
    """Edited text is sent and stored in place of the proposal."""
    item = make_queue_item(proposed_response="See you at 8")

    command.execute(item.id, "approve", edited_text="See you at 9 instead")

    assert fake_sender.sent == [(CHAT_JID, "See you at 9 instead")]
    assert ApprovalQueueService(db).get_item(item.id).proposed_response == "See you at 9 instead"


def test_reject(db, command, make_queue_item, fake_sender, now):
    """Rejecting resolves the item without sending."""
    item = make_queue_item()

    result = command.execute(item.id, "reject")

    assert result.success is True
    assert result.message_id is None
    reloaded = ApprovalQueueService(db).get_item(item.id)
    assert reloaded.status == "rejected"
    assert reloaded.resolved_at == to_storage(now)
    assert fake_sender.sent == []
    assert db.query(AutoResponseLogEntry).count() == 0


def test_second_resolution_is_not_found(command, make_queue_item, fake_sender):
    """A resolved item cannot be resolved again."""
    item = make_queue_item()
    command.execute(item.id, "approve")

    with pytest.raises(NotFoundError):
        command.execute(item.id, "approve")
    with pytest.raises(NotFoundError):
        command.execute(item.id, "reject")
    assert len(fake_sender.sent) == 1


def test_missing_item_is_not_found(command):
    """Unknown ids raise NotFoundError."""
    with pytest.raises(NotFoundError):
        command.execute(9999, "approve")


def test_expired_item_is_not_found_and_marked_expired(db, command, make_queue_item, fake_sender, now):
    """Resolving an expired item marks it expired and raises NotFoundError."""
    item = make_queue_item(created_at=now - timedelta(hours=25))

    with pytest.raises(NotFoundError):
        command.execute(item.id, "approve")

    assert ApprovalQueueService(db).get_item(item.id).status == "expired"
    assert fake_sender.sent == []


def test_send_failure_returns_item_to_pending(db, command, make_queue_item, fake_sender):
    """A failed send puts the item back to pending for a retry."""
    item = make_queue_item()
    fake_sender.error = SendError("wacli exited 1")

    with pytest.raises(SendError):
        command.execute(item.id, "approve")

    reloaded = ApprovalQueueService(db).get_item(item.id)
    assert reloaded.status == "pending"
    assert reloaded.resolved_at is None
    assert db.query(AutoResponseLogEntry).count() == 0

    fake_sender.error = None
    assert command.execute(item.id, "approve").success is True


def test_resume_failure_after_send_records_approval(db, command, make_queue_item, fake_sender):
    """A resume failure after sending still records the approval."""
    item = make_queue_item()
    fake_sender.error = CriticalResumeFailure(
        "sync not restarted", sent_result=SendResult(message_id="3EB0LATE")
    )

    with pytest.raises(CriticalResumeFailure):
        command.execute(item.id, "approve")

    assert ApprovalQueueService(db).get_item(item.id).status == "approved"
    entry = db.query(AutoResponseLogEntry).one()
    assert entry.response_message_id == "3EB0LATE"
    assert entry.approved is True


def test_resume_failure_without_send_returns_item_to_pending(db, command, make_queue_item, fake_sender):
    """A resume failure with nothing sent puts the item back to pending."""
    item = make_queue_item()
    fake_sender.error = CriticalResumeFailure("sync not restarted")

    with pytest.raises(CriticalResumeFailure):
        command.execute(item.id, "approve")

    assert ApprovalQueueService(db).get_item(item.id).status == "pending"
    assert db.query(AutoResponseLogEntry).count() == 0


def test_unknown_action(command, make_queue_item):
    """Unknown actions raise ValueError."""
    item = make_queue_item()
    with pytest.raises(ValueError):
        command.execute(item.id, "archive")


@pytest.fixture
def file_session_factory(tmp_path):
    """Sessions on a file-backed database so each thread has its own connection."""
    engine = build_engine(f"sqlite:///{tmp_path / 'app.db'}")
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


def test_concurrent_approvals_send_once(file_session_factory, fake_sender, clock, now):
    """Two simultaneous approvals of one item send exactly one message."""
    with file_session_factory() as setup:
        item_id = ApprovalQueueService(setup).create_item(
            chat_jid=CHAT_JID,
            trigger_message_id="TRIGGER",
            proposed_response="On my way",
            now=now,
        ).id

    barrier = threading.Barrier(2)
    outcomes = []

    def resolve():
        with file_session_factory() as session:
            command = ResolveQueueItemCommand(session, fake_sender, clock=clock)
            barrier.wait()
            try:
                command.execute(item_id, "approve")
                outcomes.append("ok")
            except NotFoundError:
                outcomes.append("not_found")

    threads = [threading.Thread(target=resolve) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert sorted(outcomes) == ["not_found", "ok"]
    assert fake_sender.sent == [(CHAT_JID, "On my way")]
    with file_session_factory() as check:
        assert ApprovalQueueService(check).get_item(item_id).status == "approved"
        assert check.query(AutoResponseLogEntry).count() == 1
