"""
Send WhatsApp messages through the ``wacli`` CLI.

``wacli sync --follow`` holds an exclusive lock on the WhatsApp store and
``wacli send`` needs the same lock, so every send stops the sync program
under supervisord, sends, and starts it again on every exit path.
"""

from __future__ import annotations

import json
import subprocess
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional

from pydantic import BaseModel, ValidationError

from app.adapters.base import BaseMessageSender, SyncStatus
from app.config import get_settings
from app.exceptions import CriticalResumeFailure, InvalidInputError, SendError
from app.infra.logging_config import get_logger
from app.schemas.outbound import SendResult
from app.utils.jid import validate_jid
from app.utils.metrics import SEND_FAILURES_TOTAL

logger = get_logger("wacli_sender")

Runner = Callable[..., subprocess.CompletedProcess]


class WacliSendResponse(BaseModel):
    """Payload of ``wacli send text --json``."""

    sent: bool
    to: str
    id: str


def _parse_send_output(stdout: str) -> WacliSendResponse:
    """Accept either a ``{success, data, error}`` envelope or the bare payload."""
    try:
        parsed: Any = json.loads(stdout)
    except json.JSONDecodeError as e:
        raise SendError(f"wacli returned invalid JSON: {stdout[:200]!r}") from e
    payload = parsed
    if isinstance(parsed, dict) and "data" in parsed:
        if parsed.get("success") is False or parsed.get("error"):
            raise SendError(f"wacli reported an error: {parsed.get('error')}")
        payload = parsed.get("data") if parsed.get("data") is not None else parsed
    try:
        return WacliSendResponse.model_validate(payload)
    except ValidationError as e:
        raise SendError("Unexpected wacli send response") from e


class WacliMessageSender(BaseMessageSender):
    def __init__(
        self,
        binary_path: str,
        store_dir: str,
        supervisor_config: str,
        sync_program: str = "wacli-sync",
        timeout_seconds: float = 30.0,
        runner: Optional[Runner] = None,
    ) -> None:
        self._binary_path = binary_path
        self._store_dir = store_dir
        self._supervisor_config = supervisor_config
        self._sync_program = sync_program
        self._timeout = timeout_seconds
        self._runner: Runner = runner or subprocess.run

    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        return self._runner(
            args, capture_output=True, text=True, timeout=self._timeout, check=check
        )

    def _supervisorctl(self, action: str, check: bool = True) -> subprocess.CompletedProcess:
        return self._run(
            [
                "supervisorctl",
                "-c",
                self._supervisor_config,
                action,
                self._sync_program,
            ],
            check=check,
        )

    @contextmanager
    def paused_sync(self) -> Iterator[None]:
        """
        Hold the store lock for the duration of the block.

        Resume runs even when pausing or the body failed; a resume failure
        replaces any in-flight error with CriticalResumeFailure.
        """
        try:
            try:
                self._supervisorctl("stop")
            except (subprocess.SubprocessError, OSError) as e:
                raise SendError(f"Failed to stop {self._sync_program}: {e}") from e
            yield
        finally:
            try:
                self._supervisorctl("start")
            except (subprocess.SubprocessError, OSError) as e:
                SEND_FAILURES_TOTAL.labels(kind="resume").inc()
                logger.critical(
                    "%s failed to restart after send; inbound sync is stopped: %s",
                    self._sync_program,
                    e,
                )
                raise CriticalResumeFailure(
                    f"Critical: {self._sync_program} failed to restart after send "
                    "operation. Manual intervention required."
                ) from e

    def _send_text(self, chat_jid: str, text: str) -> SendResult:
        try:
            completed = self._run(
                [
                    self._binary_path,
                    "send",
                    "text",
                    "--to",
                    chat_jid,
                    "--message",
                    text,
                    "--store",
                    self._store_dir,
                    "--json",
                ]
            )
        except subprocess.CalledProcessError as e:
            raise SendError(
                f"Failed to send WhatsApp message: {(e.stderr or '').strip() or e}"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise SendError(
                f"Failed to send WhatsApp message: timed out after {self._timeout}s"
            ) from e
        except OSError as e:
            raise SendError(f"Failed to send WhatsApp message: {e}") from e

        response = _parse_send_output(completed.stdout or "")
        if not response.sent:
            raise SendError(f"Failed to send message to {chat_jid}")
        return SendResult(message_id=response.id)

    def send(self, chat_jid: str, text: str) -> SendResult:
        jid = validate_jid(chat_jid)
        if not text or not text.strip():
            raise InvalidInputError("Message cannot be empty", field="message")

        result: Optional[SendResult] = None
        try:
            with self.paused_sync():
                result = self._send_text(jid, text)
        except CriticalResumeFailure as e:
            e.sent_result = result
            raise
        except SendError:
            SEND_FAILURES_TOTAL.labels(kind="send").inc()
            raise
        logger.info("Sent message %s to %s", result.message_id, jid)
        return result

    def sync_status(self) -> SyncStatus:
        try:
            completed = self._supervisorctl("status", check=False)
        except (subprocess.SubprocessError, OSError):
            return "stopped"
        return "running" if "RUNNING" in (completed.stdout or "") else "stopped"


def build_wacli_sender_from_env() -> WacliMessageSender:
    settings = get_settings()
    return WacliMessageSender(
        binary_path=settings.wacli_binary_path,
        store_dir=settings.wacli_store_dir,
        supervisor_config=settings.supervisorctl_config,
        sync_program=settings.wacli_sync_program,
        timeout_seconds=settings.send_timeout_seconds,
    )
