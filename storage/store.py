"""
storage/store.py -- SQLAlchemy Core key-value store.

The Python counterpart of a browser's localStorage: string keys, string
values, whole-value replacement on every write. Only the session store writes
the session key; other keys are free for future UI preferences.

Usage:
    storage = LocalStorage()
    storage.set_item("auth_user", '{"id": "3", ...}')
    raw = storage.get_item("auth_user")   # returns str or None
    storage.remove_item("auth_user")
    storage.close()

Security:
  All queries use bound parameters. No f-strings in SQL.

DB path: peanech_storage.db at the project root unless STORAGE_URL is set.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine

from core.config import get_settings

logger = logging.getLogger("peanech.storage")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_local_storage = Table(
    "local_storage",
    _metadata,
    Column("key", String(255), primary_key=True),
    Column("value", Text, nullable=False),
    Column("updated_at", String(32), nullable=False),
)


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so a CLI read never blocks on the API's write.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class LocalStorage:
    """Durable string-to-string store backed by a single SQL table.

    SQLAlchemyError propagates to the caller; nothing is retried here.
    """

    def __init__(self, db_url: Optional[str] = None) -> None:
        db_url = db_url or get_settings().storage_url
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite") and ":memory:" not in db_url and "mode=memory" not in db_url:
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value for key, or None if absent."""
        with self.engine.connect() as conn:
            row = conn.execute(_local_storage.select().where(_local_storage.c.key == key)).fetchone()
        return row.value if row is not None else None

    def set_item(self, key: str, value: str) -> None:
        """Replace the whole value stored under key."""
        with self.engine.begin() as conn:
            conn.execute(_local_storage.delete().where(_local_storage.c.key == key))
            conn.execute(_local_storage.insert().values(key=key, value=value, updated_at=_now_iso()))
        logger.debug("Stored key %s (%d chars)", key, len(value))

    def remove_item(self, key: str) -> bool:
        """Delete key. Returns True if a record was removed, False if it was absent."""
        with self.engine.begin() as conn:
            result = conn.execute(_local_storage.delete().where(_local_storage.c.key == key))
        return result.rowcount > 0

    def keys(self) -> list[str]:
        with self.engine.connect() as conn:
            rows = conn.execute(_local_storage.select().order_by(_local_storage.c.key)).fetchall()
        return [r.key for r in rows]

    def close(self) -> None:
        self.engine.dispose()
