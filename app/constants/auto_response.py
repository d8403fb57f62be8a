"""Fixed auto-response policy constants."""

from __future__ import annotations

from datetime import timedelta

AUTO_RESPONSE_ENABLED_KEY = "auto_response_enabled"
LAST_CHECK_TS_KEY = "auto_response_last_check_ts"

GROUP_JID_SUFFIX = "@g.us"
USER_JID_SUFFIX = "@s.whatsapp.net"

MAX_PENDING_APPROVALS = 3
MIN_APPROVED_BEFORE_AUTONOMOUS = 3
MIN_CONFIDENCE = 0.7
APPROVAL_TTL = timedelta(hours=24)

DEFAULT_CONTEXT_WINDOW_MESSAGES = 10
POLL_BATCH_SIZE = 100

STYLE_PROFILE_CACHE_NAMESPACE = "style_profile"
STYLE_PROFILE_CACHE_TTL = timedelta(hours=24)
