"""Tests for ApprovalQueueService: ordering, lazy expiry and claims."""

from datetime import timedelta

from app.models.approval_queue_item import ApprovalStatus
from app.services.approval_queue_service import ApprovalQueueService
from app.utils.dates import to_storage
from tests.fixtures.wacli_fixtures import CHAT_JID, OTHER_CHAT_JID


def test_create_item_expires_after_24_hours(db, make_queue_item, now):
    """New items expire 24 hours after creation."""
    item = make_queue_item()
    assert item.status == "pending"
    assert item.created_at == to_storage(now)
    assert item.expires_at == to_storage(now) + timedelta(hours=24)
    assert item.resolved_at is None


def test_list_items_oldest_first(db, make_queue_item, now):
    """Items list oldest first."""
    newer = make_queue_item(created_at=now - timedelta(hours=1))
    older = make_queue_item(created_at=now - timedelta(hours=2))
    items = ApprovalQueueService(db).list_items(now)
    assert [i.id for i in items] == [older.id, newer.id]


def test_list_items_respects_limit_and_status(db, make_queue_item, now):
    """list_items filters by status and honours the limit."""
    for _ in range(3):
        make_queue_item()
    svc = ApprovalQueueService(db)
    assert len(svc.list_items(now, limit=2)) == 2
    assert svc.list_items(now, status="approved") == []


def test_list_items_expires_stale_pending(db, make_queue_item, now):
    """Listing flips stale pending items to expired."""
    stale = make_queue_item(created_at=now - timedelta(hours=25))
    fresh = make_queue_item()
    svc = ApprovalQueueService(db)

    pending = svc.list_items(now)
    assert [i.id for i in pending] == [fresh.id]

    expired = svc.list_items(now, status="expired")
    assert [i.id for i in expired] == [stale.id]


def test_count_pending_per_chat(db, make_queue_item, now):
    """count_pending counts live pending items per chat."""
    make_queue_item()
    make_queue_item()
    make_queue_item(chat_jid=OTHER_CHAT_JID)
    make_queue_item(created_at=now - timedelta(hours=30))
    svc = ApprovalQueueService(db)
    assert svc.count_pending(CHAT_JID, now) == 2
    assert svc.count_pending(OTHER_CHAT_JID, now) == 1


def test_claim_wins_only_once(db, make_queue_item, now):
    """A claim succeeds once."""
    item = make_queue_item()
    svc = ApprovalQueueService(db)
    assert svc.claim(item.id, ApprovalStatus.APPROVED.value, now) is True
    assert svc.claim(item.id, ApprovalStatus.REJECTED.value, now) is False
    reloaded = svc.get_item(item.id)
    assert reloaded.status == "approved"
    assert reloaded.resolved_at == to_storage(now)


def test_claim_from_second_session_loses(db, session_factory, make_queue_item, now):
    """A claim from another session loses after the first wins."""
    item = make_queue_item()
    other = session_factory()
    try:
        assert ApprovalQueueService(db).claim(item.id, "approved", now) is True
        assert ApprovalQueueService(other).claim(item.id, "approved", now) is False
    finally:
        other.close()


def test_claim_expired_item_fails(db, make_queue_item, now):
    """Expired items cannot be claimed."""
    item = make_queue_item(created_at=now - timedelta(hours=24))
    assert ApprovalQueueService(db).claim(item.id, "approved", now) is False


def test_claim_missing_item_fails(db, now):
    """Unknown ids cannot be claimed."""
    assert ApprovalQueueService(db).claim(12345, "approved", now) is False


def test_release_claim_returns_item_to_pending(db, make_queue_item, now):
    """release_claim returns the item to pending."""
    item = make_queue_item()
    svc = ApprovalQueueService(db)
    svc.claim(item.id, "approved", now)
    svc.release_claim(item.id, "approved")
    reloaded = svc.get_item(item.id)
    assert reloaded.status == "pending"
    assert reloaded.resolved_at is None
