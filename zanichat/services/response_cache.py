"""
Response cache: message id → final assistant response, write-once.

Wraps a ResponseStore and enforces that a cached response is never replaced.
"""

import logging

from zanichat.core.errors import ResponseConflictError
from zanichat.core.ports import ResponseStore

logger = logging.getLogger(__name__)


class ResponseCache:
    """Write-once response cache with an independent "processed" mark."""

    def __init__(self, store: ResponseStore) -> None:
        self._store = store

    def get(self, message_id: str) -> str | None:
        return self._store.get(message_id)

    def put(self, message_id: str, text: str) -> None:
        """
        Cache the response for a message.

        Writing the same text twice is a no-op.

        Raises:
            ResponseConflictError: If a different response is already cached.
        """
        existing = self._store.get(message_id)
        if existing is not None:
            if existing == text:
                return
            logger.warning("[response_cache:put] refused overwrite message_id=%s", message_id)
            raise ResponseConflictError(message_id)
        self._store.put(message_id, text)
        # The store keeps the first write if another writer got in between
        stored = self._store.get(message_id)
        if stored is not None and stored != text:
            raise ResponseConflictError(message_id)
        logger.info("[response_cache:put] message_id=%s text_len=%d", message_id, len(text))

    def is_processed(self, message_id: str) -> bool:
        """True once a dispatch was started for the message, whether or not it has resolved."""
        return self._store.is_processed(message_id)

    def mark_processed(self, message_id: str) -> None:
        self._store.mark_processed(message_id)
