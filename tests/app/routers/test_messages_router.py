"""Tests for the manual send endpoint."""

from app.routers.utils.dependencies import get_send_rate_limiter
from app.utils.rate_limit import SendRateLimiter
from tests.fixtures.wacli_fixtures import CHAT_JID


def test_send_message(client, fake_sender):
    """POST /messages/send sends through wacli."""
    r = client.post("/messages/send", json={"to": CHAT_JID, "message": "hello"})
    assert r.status_code == 200
    assert r.json() == {"success": True, "message_id": "3EB00001"}
    assert fake_sender.sent == [(CHAT_JID, "hello")]


def test_send_message_missing_fields(client):
    """Missing fields fail request validation."""
    r = client.post("/messages/send", json={"to": CHAT_JID})
    assert r.status_code == 422


def test_send_invalid_jid_is_400(client, fake_sender):
    """An invalid JID is a 400."""
    from app.exceptions import InvalidInputError

    fake_sender.error = InvalidInputError("Invalid JID format", field="to")
    r = client.post("/messages/send", json={"to": "bob", "message": "hello"})
    assert r.status_code == 400
    assert r.json()["detail"][0]["loc"] == ["body", "to"]


def test_send_rate_limited(client):
    """Sends beyond the per-minute limit get 429."""
    limiter = SendRateLimiter(2)
    client.app.dependency_overrides[get_send_rate_limiter] = lambda: limiter

    codes = [
        client.post("/messages/send", json={"to": CHAT_JID, "message": "hi"}).status_code
        for _ in range(3)
    ]
    assert codes == [200, 200, 429]
