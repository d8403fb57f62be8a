"""A temporary wacli store file with the synced messages/contacts schema."""

import sqlite3

import pytest

from app.adapters.message_store import WacliMessageStore

CHAT_JID = "15551234567@s.whatsapp.net"
OTHER_CHAT_JID = "15557654321@s.whatsapp.net"
GROUP_JID = "120363012345678901@g.us"

_SCHEMA = """
CREATE TABLE messages (
    rowid INTEGER PRIMARY KEY AUTOINCREMENT,
    chat_jid TEXT NOT NULL,
    msg_id TEXT NOT NULL,
    sender_jid TEXT,
    ts INTEGER NOT NULL,
    from_me INTEGER NOT NULL DEFAULT 0,
    text TEXT,
    UNIQUE(chat_jid, msg_id)
);
CREATE TABLE contacts (
    jid TEXT PRIMARY KEY,
    phone TEXT,
    push_name TEXT,
    full_name TEXT,
    first_name TEXT,
    business_name TEXT,
    updated_at INTEGER
);
"""


class WacliStoreWriter:
    """Writes rows the way ``wacli sync`` would."""

    def __init__(self, path):
        self.path = path

    def add_message(self, chat_jid, msg_id, ts, text, from_me=False, sender_jid=None):
        with sqlite3.connect(self.path) as conn:
            conn.execute(
                "INSERT INTO messages (chat_jid, msg_id, sender_jid, ts, from_me, text) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (chat_jid, msg_id, sender_jid or chat_jid, ts, int(from_me), text),
            )

    def add_contact(self, jid, **fields):
        columns = ["jid", *fields.keys()]
        placeholders = ", ".join("?" for _ in columns)
        with sqlite3.connect(self.path) as conn:
            conn.execute(
                f"INSERT INTO contacts ({', '.join(columns)}) VALUES ({placeholders})",
                (jid, *fields.values()),
            )


@pytest.fixture
def wacli_db_path(tmp_path):
    path = tmp_path / "wacli.db"
    with sqlite3.connect(path) as conn:
        conn.executescript(_SCHEMA)
    return path


@pytest.fixture
def wacli_store(wacli_db_path):
    return WacliStoreWriter(wacli_db_path)


@pytest.fixture
def message_store(wacli_db_path):
    store = WacliMessageStore(str(wacli_db_path))
    yield store
    store.engine.dispose()
