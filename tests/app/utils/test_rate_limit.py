"""Tests for the send rate limiter."""

import pytest

from app.utils.rate_limit import SendRateLimiter


def test_allows_up_to_limit_then_blocks():
    """Hits beyond the per-minute limit are refused."""
    limiter = SendRateLimiter(3)
    assert [limiter.allow() for _ in range(4)] == [True, True, True, False]


def test_keys_are_independent():
    """Each key has its own window."""
    limiter = SendRateLimiter(1)
    assert limiter.allow("a") is True
    assert limiter.allow("b") is True
    assert limiter.allow("a") is False


def test_limiters_do_not_share_memory_storage():
    """Two limiters built on memory:// keep separate counts."""
    first = SendRateLimiter(1)
    second = SendRateLimiter(1)
    assert first.allow() is True
    assert second.allow() is True


@pytest.mark.parametrize("limit", [None, 0, -5])
def test_disabled_when_no_limit(limit):
    """A missing or non-positive limit allows everything."""
    limiter = SendRateLimiter(limit)
    assert all(limiter.allow() for _ in range(100))


def test_allows_when_storage_fails(monkeypatch):
    """Storage errors fail open."""
    limiter = SendRateLimiter(1)

    def broken_hit(*args, **kwargs):
        raise ConnectionError("storage unavailable")

    monkeypatch.setattr(limiter._limiter, "hit", broken_hit)
    assert limiter.allow() is True
    assert limiter.allow() is True
