"""
Durable store for assistant responses, keyed by message id.

Creates data/responses.db (relative to project root) by default. Tables:
responses (message_id PK, text, created_at) and processed (message_id PK, created_at).
Rows are inserted with ON CONFLICT DO NOTHING, so a stored response is never replaced.
"""

import logging
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path

from zanichat.core.config import DATA_DIR_NAME, RESPONSE_DB_NAME

logger = logging.getLogger(__name__)

_ROOT = Path(__file__).resolve().parent.parent.parent


def default_db_path() -> Path:
    return _ROOT / DATA_DIR_NAME / RESPONSE_DB_NAME


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SqliteResponseStore:
    """ResponseStore backed by a SQLite file. One connection per call, safe to use from worker threads."""

    def __init__(self, db_path: str | Path | None = None) -> None:
        self._db_path = Path(db_path) if db_path is not None else default_db_path()
        self.init_db()

    def _get_conn(self) -> sqlite3.Connection:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(str(self._db_path))

    def init_db(self) -> None:
        """Create the responses and processed tables if they do not exist."""
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS responses (
                    message_id TEXT PRIMARY KEY,
                    text TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS processed (
                    message_id TEXT PRIMARY KEY,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def get(self, message_id: str) -> str | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT text FROM responses WHERE message_id = ?", (message_id,)
            ).fetchone()
        finally:
            conn.close()
        return row[0] if row else None

    def put(self, message_id: str, text: str) -> None:
        conn = self._get_conn()
        try:
            created = _now()
            cur = conn.execute(
                "INSERT INTO responses (message_id, text, created_at) VALUES (?, ?, ?) "
                "ON CONFLICT(message_id) DO NOTHING",
                (message_id, text, created),
            )
            conn.execute(
                "INSERT INTO processed (message_id, created_at) VALUES (?, ?) "
                "ON CONFLICT(message_id) DO NOTHING",
                (message_id, created),
            )
            conn.commit()
            if cur.rowcount:
                logger.info("[response_db] stored message_id=%s text_len=%d", message_id, len(text))
        finally:
            conn.close()

    def is_processed(self, message_id: str) -> bool:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT 1 FROM processed WHERE message_id = ? "
                "UNION SELECT 1 FROM responses WHERE message_id = ?",
                (message_id, message_id),
            ).fetchone()
        finally:
            conn.close()
        return row is not None

    def mark_processed(self, message_id: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT INTO processed (message_id, created_at) VALUES (?, ?) "
                "ON CONFLICT(message_id) DO NOTHING",
                (message_id, _now()),
            )
            conn.commit()
        finally:
            conn.close()


class InMemoryResponseStore:
    """ResponseStore kept in process memory; for tests and ephemeral runs."""

    def __init__(self) -> None:
        self._responses: dict[str, str] = {}
        self._processed: set[str] = set()
        self._lock = threading.Lock()

    def get(self, message_id: str) -> str | None:
        with self._lock:
            return self._responses.get(message_id)

    def put(self, message_id: str, text: str) -> None:
        with self._lock:
            self._responses.setdefault(message_id, text)
            self._processed.add(message_id)

    def is_processed(self, message_id: str) -> bool:
        with self._lock:
            return message_id in self._processed or message_id in self._responses

    def mark_processed(self, message_id: str) -> None:
        with self._lock:
            self._processed.add(message_id)
