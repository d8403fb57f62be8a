"""
Read-only access to the wacli message store.

The SQLite file is owned and written by ``wacli sync``; this adapter only
ever opens it in read-only mode.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, RowMapping

from app.constants.auto_response import POLL_BATCH_SIZE, USER_JID_SUFFIX
from app.schemas.message import ChatMessage, Contact, InboundMessage

_MESSAGE_COLUMNS = "msg_id, chat_jid, sender_jid, ts, from_me, text"
_CONTACT_COLUMNS = "jid, phone, push_name, full_name, first_name, business_name"


def _to_message(row: RowMapping) -> ChatMessage:
    return ChatMessage(
        msg_id=str(row["msg_id"]),
        chat_jid=row["chat_jid"],
        sender_jid=row["sender_jid"],
        ts=int(row["ts"]),
        from_me=bool(row["from_me"]),
        text=row["text"],
    )


def resolve_display_name(jid: str, contact: Optional[Contact]) -> str:
    """First non-blank of push name, full name, business name, phone; else the JID user part."""
    if contact is not None:
        for candidate in (
            contact.push_name,
            contact.full_name,
            contact.business_name,
            contact.phone,
        ):
            if candidate and candidate.strip():
                return candidate.strip()
    return jid.split("@", 1)[0]


class WacliMessageStore:
    """Query surface over the synced ``messages`` and ``contacts`` tables."""

    def __init__(self, db_path: str, engine: Optional[Engine] = None) -> None:
        self._db_path = db_path
        self._engine = engine

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = create_engine(
                f"sqlite:///file:{self._db_path}?mode=ro&uri=true",
                connect_args={"check_same_thread": False},
            )
        return self._engine

    def list_recent_messages(self, chat_jid: str, limit: int) -> List[ChatMessage]:
        """Newest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                text(
                    f"SELECT {_MESSAGE_COLUMNS} FROM messages "
                    "WHERE chat_jid = :chat_jid ORDER BY ts DESC LIMIT :limit"
                ),
                {"chat_jid": chat_jid, "limit": limit},
            ).mappings()
            return [_to_message(row) for row in rows]

    def list_unseen_inbound(
        self, since_ts: int, limit: int = POLL_BATCH_SIZE
    ) -> List[InboundMessage]:
        """Inbound text messages in one-to-one chats newer than ``since_ts``, oldest first."""
        return self._query_inbound(
            "ts > :since_ts ORDER BY ts ASC, msg_id ASC LIMIT :limit",
            {"since_ts": since_ts, "limit": limit},
        )

    def list_inbound_at(self, ts: int) -> List[InboundMessage]:
        """Every inbound text message in one-to-one chats with exactly timestamp ``ts``."""
        return self._query_inbound("ts = :ts ORDER BY msg_id ASC", {"ts": ts})

    def _query_inbound(self, clause: str, params: dict) -> List[InboundMessage]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                text(
                    "SELECT msg_id, chat_jid, text, ts FROM messages "
                    "WHERE from_me = 0 AND chat_jid LIKE :jid_pattern "
                    "AND text IS NOT NULL AND text != '' "
                    f"AND {clause}"
                ),
                {"jid_pattern": f"%{USER_JID_SUFFIX}", **params},
            ).mappings()
            return [
                InboundMessage(
                    id=str(row["msg_id"]),
                    chat_jid=row["chat_jid"],
                    text=row["text"],
                    timestamp=int(row["ts"]),
                )
                for row in rows
            ]

    def get_message(self, chat_jid: str, msg_id: str) -> Optional[ChatMessage]:
        with self.engine.connect() as conn:
            row = (
                conn.execute(
                    text(
                        f"SELECT {_MESSAGE_COLUMNS} FROM messages "
                        "WHERE chat_jid = :chat_jid AND msg_id = :msg_id LIMIT 1"
                    ),
                    {"chat_jid": chat_jid, "msg_id": msg_id},
                )
                .mappings()
                .first()
            )
        return None if row is None else _to_message(row)

    def get_contact(self, jid: str) -> Optional[Contact]:
        with self.engine.connect() as conn:
            row = (
                conn.execute(
                    text(f"SELECT {_CONTACT_COLUMNS} FROM contacts WHERE jid = :jid"),
                    {"jid": jid},
                )
                .mappings()
                .first()
            )
        return None if row is None else Contact(**dict(row))

    def get_contact_display_name(self, jid: str) -> str:
        return resolve_display_name(jid, self.get_contact(jid))

    def get_last_message_ts(self) -> Optional[int]:
        with self.engine.connect() as conn:
            value = conn.execute(text("SELECT MAX(ts) FROM messages")).scalar()
        return None if value is None else int(value)
