"""
Lightweight SQLite DB of uploaded files, looked up by name when rendering 📎 attachments.

Creates data/attachments.db (relative to project root) by default.
Table: attachments (id, name, url, size_bytes, created_at).
"""

import logging
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path

from zanichat.core.config import ATTACHMENT_DB_NAME, DATA_DIR_NAME
from zanichat.core.ports import AttachmentRecord

logger = logging.getLogger(__name__)

# Project root
_ROOT = Path(__file__).resolve().parent.parent.parent
_TABLE = "attachments"


def default_db_path() -> Path:
    return _ROOT / DATA_DIR_NAME / ATTACHMENT_DB_NAME


class SqliteAttachmentStore:
    """AttachmentStore backed by a SQLite file. One connection per call."""

    def __init__(self, db_path: str | Path | None = None) -> None:
        self._db_path = Path(db_path) if db_path is not None else default_db_path()
        self.init_db()

    def _get_conn(self) -> sqlite3.Connection:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(str(self._db_path))

    def init_db(self) -> None:
        """Create the attachments table if it does not exist."""
        conn = self._get_conn()
        try:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    url TEXT,
                    size_bytes INTEGER,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.execute(f"CREATE INDEX IF NOT EXISTS idx_{_TABLE}_name ON {_TABLE} (name)")
            conn.commit()
        finally:
            conn.close()

    def add(self, name: str, url: str | None, size_bytes: int | None = None) -> None:
        """Register an uploaded file. Duplicate names are kept; the oldest one wins on lookup."""
        if not name or not str(name).strip():
            return
        conn = self._get_conn()
        try:
            conn.execute(
                f"INSERT INTO {_TABLE} (name, url, size_bytes, created_at) VALUES (?, ?, ?, ?)",
                (name, url, size_bytes, datetime.now(timezone.utc).isoformat()),
            )
            conn.commit()
            logger.info("[attachment_db] added name=%s size_bytes=%s", name, size_bytes)
        finally:
            conn.close()

    def lookup_by_name(self, name: str) -> AttachmentRecord | None:
        """Return the first stored record whose name equals `name` exactly, or None."""
        conn = self._get_conn()
        try:
            cur = conn.execute(
                f"SELECT name, url, size_bytes FROM {_TABLE} WHERE name = ? ORDER BY id ASC LIMIT 1",
                (name,),
            )
            row = cur.fetchone()
        finally:
            conn.close()
        if row is None:
            return None
        return AttachmentRecord(name=row[0], url=row[1], size_bytes=row[2])

    def get_all(self) -> list[AttachmentRecord]:
        """Return all stored records, oldest first."""
        conn = self._get_conn()
        try:
            cur = conn.execute(f"SELECT name, url, size_bytes FROM {_TABLE} ORDER BY id ASC")
            return [AttachmentRecord(name=r[0], url=r[1], size_bytes=r[2]) for r in cur.fetchall()]
        finally:
            conn.close()

    def clear_all(self) -> None:
        """Delete all rows."""
        conn = self._get_conn()
        try:
            conn.execute(f"DELETE FROM {_TABLE}")
            conn.commit()
            logger.info("[attachment_db] cleared all records")
        finally:
            conn.close()


class InMemoryAttachmentStore:
    """AttachmentStore kept in a list; for tests and ephemeral runs."""

    def __init__(self, records: list[AttachmentRecord] | None = None) -> None:
        self._records: list[AttachmentRecord] = list(records or [])
        self._lock = threading.Lock()

    def add(self, name: str, url: str | None, size_bytes: int | None = None) -> None:
        if not name or not str(name).strip():
            return
        with self._lock:
            self._records.append(AttachmentRecord(name=name, url=url, size_bytes=size_bytes))

    def lookup_by_name(self, name: str) -> AttachmentRecord | None:
        with self._lock:
            return next((r for r in self._records if r.name == name), None)

    def get_all(self) -> list[AttachmentRecord]:
        with self._lock:
            return list(self._records)

    def clear_all(self) -> None:
        with self._lock:
            self._records.clear()
