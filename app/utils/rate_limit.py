"""
Rate limiting for the manual send endpoint.

Moving-window limit backed by the ``limits`` storage given by
SEND_RATE_LIMIT_STORAGE_URI (``memory://`` by default, ``redis://...`` to share
the window between processes). A limit of None or <= 0 disables it. If the
storage fails the request is allowed.
"""

from __future__ import annotations

import logging
from typing import Optional

from limits import RateLimitItemPerMinute
from limits.storage import storage_from_string
from limits.strategies import MovingWindowRateLimiter

logger = logging.getLogger(__name__)

NAMESPACE = "wa-autoreply:ratelimit"


class SendRateLimiter:
    def __init__(
        self, limit_per_minute: Optional[int], storage_uri: str = "memory://"
    ) -> None:
        self.limit_per_minute = limit_per_minute
        self._item = (
            RateLimitItemPerMinute(limit_per_minute)
            if limit_per_minute is not None and limit_per_minute > 0
            else None
        )
        self._limiter = MovingWindowRateLimiter(storage_from_string(storage_uri))

    def allow(self, key: str = "global") -> bool:
        """
        Record a hit for ``key`` and report whether it is within the limit.
        Returns True if the limit is disabled or the storage is unavailable.
        """
        if self._item is None:
            return True
        try:
            allowed = self._limiter.hit(self._item, NAMESPACE, key)
        except Exception as e:
            logger.warning("Rate limit check failed, allowing request: %s", e)
            return True
        if not allowed:
            logger.warning("Rate limit exceeded for %s", key)
        return allowed
