"""Tests for a single poll cycle."""

import pytest

from app.commands.auto_response.poll_messages_command import PollNewMessagesCommand
from app.commands.auto_response.process_message_command import (
    ProcessIncomingMessageCommand,
)
from app.exceptions import GenerationError
from app.models.approval_queue_item import ApprovalQueueItem
from app.services.setting_service import SettingService
from tests.fixtures.wacli_fixtures import CHAT_JID, GROUP_JID, OTHER_CHAT_JID


@pytest.fixture
def make_command(db, message_store, fake_generator, fake_sender, clock):
    def _make(**kwargs):
        processor = ProcessIncomingMessageCommand(
            db, message_store, fake_generator, fake_sender, clock=clock
        )
        return PollNewMessagesCommand(db, message_store, processor, **kwargs)

    return _make


def test_no_new_messages_is_noop(db, make_command, fake_generator):
    """An empty store leaves the watermark untouched."""
    summary = make_command().execute()
    assert summary.status == "ok"
    assert summary.found == 0
    assert summary.watermark == 0
    assert SettingService(db).get_watermark() == 0
    assert fake_generator.reply_calls == []


def test_processes_batch_and_advances_watermark(db, make_command, wacli_store, auto_response_on, make_config):
    """Every unseen message is processed and the watermark moves to the newest."""
    make_config(enabled=True)
    wacli_store.add_message(CHAT_JID, "A", 100, "first")
    wacli_store.add_message(CHAT_JID, "B", 200, "second")
    wacli_store.add_message(OTHER_CHAT_JID, "C", 150, "not configured")

    summary = make_command().execute()

    assert summary.found == 3
    assert summary.queued == 2
    assert summary.skipped == 1
    assert summary.watermark == 200
    assert SettingService(db).get_watermark() == 200
    triggers = [i.trigger_message_id for i in db.query(ApprovalQueueItem).order_by(ApprovalQueueItem.id)]
    assert triggers == ["A", "B"]


def test_only_unseen_inbound_individual_messages(db, make_command, wacli_store, fake_generator, auto_response_on, make_config):
    """Old, outgoing, group and empty messages are not processed."""
    make_config(enabled=True)
    SettingService(db).advance_watermark(150)
    wacli_store.add_message(CHAT_JID, "OLD", 100, "seen")
    wacli_store.add_message(CHAT_JID, "MINE", 200, "from me", from_me=True)
    wacli_store.add_message(GROUP_JID, "GRP", 210, "group")
    wacli_store.add_message(CHAT_JID, "EMPTY", 220, "")
    wacli_store.add_message(CHAT_JID, "NEW", 230, "new")

    summary = make_command().execute()

    assert summary.found == 1
    assert summary.watermark == 230
    assert len(fake_generator.reply_calls) == 1


def test_second_run_is_idempotent(db, make_command, wacli_store, auto_response_on, make_config):
    """A second cycle over the same store does nothing."""
    make_config(enabled=True)
    wacli_store.add_message(CHAT_JID, "A", 100, "hi")

    make_command().execute()
    summary = make_command().execute()

    assert summary.found == 0
    assert summary.watermark == 100
    assert db.query(ApprovalQueueItem).count() == 1


def test_failures_do_not_block_watermark(db, make_command, wacli_store, fake_generator, auto_response_on, make_config):
    """Failed messages still advance the watermark."""
    make_config(enabled=True)
    fake_generator.error = GenerationError("model unavailable")
    wacli_store.add_message(CHAT_JID, "A", 100, "hi")
    wacli_store.add_message(CHAT_JID, "B", 110, "hello?")

    summary = make_command().execute()

    assert summary.failed == 2
    assert summary.watermark == 110
    assert SettingService(db).get_watermark() == 110


def test_batch_size_caps_cycle(db, make_command, wacli_store):
    """A cycle stops at batch_size messages when their timestamps differ."""
    for i in range(3):
        wacli_store.add_message(CHAT_JID, f"M{i}", 100 + i, "hi")

    summary = make_command(batch_size=2).execute()

    assert summary.found == 2
    assert summary.watermark == 101


def test_batch_limit_keeps_same_timestamp_group_together(db, make_command, wacli_store, auto_response_on, make_config):
    """Messages sharing the last timestamp of a full batch are handled in the same cycle."""
    make_config(enabled=True)
    wacli_store.add_message(CHAT_JID, "A", 100, "first")
    wacli_store.add_message(CHAT_JID, "B", 100, "second, same second")
    wacli_store.add_message(CHAT_JID, "C", 200, "later")

    first = make_command(batch_size=1).execute()

    assert first.found == 2
    assert first.queued == 2
    assert first.watermark == 100
    triggers = [i.trigger_message_id for i in db.query(ApprovalQueueItem).order_by(ApprovalQueueItem.id)]
    assert triggers == ["A", "B"]

    second = make_command(batch_size=1).execute()

    assert second.found == 1
    assert second.watermark == 200
