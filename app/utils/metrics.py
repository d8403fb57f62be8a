"""Prometheus counters for the auto-response pipeline."""

from prometheus_client import Counter

AUTO_RESPONSE_DECISIONS_TOTAL = Counter(
    "auto_response_decisions_total",
    "Decision engine outcomes",
    ["action"],
)

AUTO_RESPONSE_POLL_CYCLES_TOTAL = Counter(
    "auto_response_poll_cycles_total",
    "Poll cycles by status",
    ["status"],
)

SEND_FAILURES_TOTAL = Counter(
    "auto_response_send_failures_total",
    "Message sender failures by kind (send, resume)",
    ["kind"],
)
