"""
SQLite registry of documents shared into channels.

Creates data/documents.db (relative to project root) by default.
Table: documents (id, channel_id, title, url, mime_type, size_bytes, uploaded_by, uploaded_at, is_pinned).
"""

import logging
import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path

from zanichat.core.config import DATA_DIR_NAME, DOCUMENT_DB_NAME
from zanichat.schemas.document import ChannelDocument

logger = logging.getLogger(__name__)

_ROOT = Path(__file__).resolve().parent.parent.parent
_TABLE = "documents"
_COLUMNS = "id, channel_id, title, url, mime_type, size_bytes, uploaded_by, uploaded_at, is_pinned"


def default_db_path() -> Path:
    return _ROOT / DATA_DIR_NAME / DOCUMENT_DB_NAME


def _new_document(
    channel_id: str, title: str, url: str, mime_type: str, size_bytes: int | None, uploaded_by: str
) -> ChannelDocument:
    return ChannelDocument(
        id=f"doc-{uuid.uuid4().hex}",
        channel_id=channel_id,
        title=title,
        url=url,
        mime_type=mime_type,
        size_bytes=size_bytes,
        uploaded_by=uploaded_by or "Unknown user",
        uploaded_at=datetime.now(timezone.utc),
    )


class SqliteDocumentStore:
    """Channel documents backed by a SQLite file. One connection per call."""

    def __init__(self, db_path: str | Path | None = None) -> None:
        self._db_path = Path(db_path) if db_path is not None else default_db_path()
        self.init_db()

    def _get_conn(self) -> sqlite3.Connection:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(str(self._db_path))

    def init_db(self) -> None:
        """Create the documents table if it does not exist."""
        conn = self._get_conn()
        try:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_TABLE} (
                    id TEXT PRIMARY KEY,
                    channel_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    url TEXT NOT NULL,
                    mime_type TEXT NOT NULL,
                    size_bytes INTEGER,
                    uploaded_by TEXT NOT NULL,
                    uploaded_at TEXT NOT NULL,
                    is_pinned INTEGER NOT NULL DEFAULT 0
                )
                """
            )
            conn.execute(f"CREATE INDEX IF NOT EXISTS idx_{_TABLE}_channel ON {_TABLE} (channel_id)")
            conn.commit()
        finally:
            conn.close()

    def add(
        self,
        channel_id: str,
        title: str,
        url: str,
        mime_type: str,
        size_bytes: int | None = None,
        uploaded_by: str = "",
    ) -> ChannelDocument:
        """Share a document into a channel and return the stored record."""
        doc = _new_document(channel_id, title, url, mime_type, size_bytes, uploaded_by)
        conn = self._get_conn()
        try:
            conn.execute(
                f"INSERT INTO {_TABLE} ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    doc.id, doc.channel_id, doc.title, doc.url, doc.mime_type,
                    doc.size_bytes, doc.uploaded_by, doc.uploaded_at.isoformat(), int(doc.is_pinned),
                ),
            )
            conn.commit()
            logger.info("[document_db] added channel_id=%s id=%s title=%s", channel_id, doc.id, title)
        finally:
            conn.close()
        return doc

    def list_for_channel(self, channel_id: str) -> list[ChannelDocument]:
        """Documents shared into the channel, oldest first."""
        conn = self._get_conn()
        try:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM {_TABLE} WHERE channel_id = ? ORDER BY uploaded_at ASC, rowid ASC",
                (channel_id,),
            ).fetchall()
        finally:
            conn.close()
        return [
            ChannelDocument(
                id=r[0], channel_id=r[1], title=r[2], url=r[3], mime_type=r[4],
                size_bytes=r[5], uploaded_by=r[6], uploaded_at=datetime.fromisoformat(r[7]),
                is_pinned=bool(r[8]),
            )
            for r in rows
        ]

    def clear_all(self) -> None:
        """Delete all rows."""
        conn = self._get_conn()
        try:
            conn.execute(f"DELETE FROM {_TABLE}")
            conn.commit()
            logger.info("[document_db] cleared all documents")
        finally:
            conn.close()


class InMemoryDocumentStore:
    """Channel documents kept in a dict; for tests and ephemeral runs."""

    def __init__(self) -> None:
        self._by_channel: dict[str, list[ChannelDocument]] = {}
        self._lock = threading.Lock()

    def add(
        self,
        channel_id: str,
        title: str,
        url: str,
        mime_type: str,
        size_bytes: int | None = None,
        uploaded_by: str = "",
    ) -> ChannelDocument:
        doc = _new_document(channel_id, title, url, mime_type, size_bytes, uploaded_by)
        with self._lock:
            self._by_channel.setdefault(channel_id, []).append(doc)
        return doc

    def list_for_channel(self, channel_id: str) -> list[ChannelDocument]:
        with self._lock:
            return list(self._by_channel.get(channel_id) or [])

    def clear_all(self) -> None:
        with self._lock:
            self._by_channel.clear()
