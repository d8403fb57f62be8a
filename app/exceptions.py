"""Error types raised by the auto-response core.

Policy skips are not errors; they are reported as ``DecisionResult`` with
``action="skipped"``.
"""

from __future__ import annotations

from typing import Any, Optional


class AutoResponseError(Exception):
    """Base class for auto-response errors."""


class InvalidInputError(AutoResponseError):
    """Malformed input to a config, queue or send operation."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

    def to_detail(self) -> list[dict[str, Any]]:
        loc = ["body", self.field] if self.field else ["body"]
        return [{"loc": loc, "msg": self.message, "type": "value_error"}]


class GenerationError(AutoResponseError):
    """The style/reply generator failed or returned unusable output."""


class SendError(AutoResponseError):
    """The message sender failed to deliver the message."""


class CriticalResumeFailure(AutoResponseError):
    """The sync process could not be restarted after a send attempt.

    ``sent_result`` is set when the message itself went out before the
    resume failed, so callers can still record the send.
    """

    def __init__(self, message: str, sent_result: Any = None) -> None:
        super().__init__(message)
        self.sent_result = sent_result


class NotFoundError(AutoResponseError):
    """A queue item is missing or no longer pending."""
