"""
Assistant query dispatch: answer each @zani message exactly once and cache the result.

Per message id:
    no mention            → nothing happens
    cached response       → returned as is, the query service is not called
    processed, not cached → dispatched earlier and unresolved; nothing happens
    otherwise             → mark processed, call the query service, cache the
                            answer (or the fixed error response on failure)

Concurrent calls for the same message share one in-flight task. The task is
looked up and installed with no await in between, so two interleaved calls
can never both dispatch.
"""

import asyncio
import logging
from typing import Sequence

from zanichat.core.config import ASSISTANT_ERROR_RESPONSE, QUERY_TIMEOUT_SECONDS
from zanichat.core.errors import QueryServiceError, ResponseConflictError
from zanichat.core.ports import QueryService
from zanichat.schemas.message import AnswerState, Message
from zanichat.services.mention_detector import MentionDetector
from zanichat.services.response_cache import ResponseCache

logger = logging.getLogger(__name__)


class QueryDispatcher:
    """Orchestrates mention detection, the response cache and the query service."""

    def __init__(
        self,
        cache: ResponseCache,
        query_service: QueryService,
        detector: MentionDetector | None = None,
        timeout: float | None = QUERY_TIMEOUT_SECONDS,
        error_response: str = ASSISTANT_ERROR_RESPONSE,
    ) -> None:
        self._cache = cache
        self._service = query_service
        self._detector = detector or MentionDetector()
        self._timeout = timeout
        self._error_response = error_response
        # message_id -> in-flight resolution (the per-message dispatch token)
        self._in_flight: dict[str, asyncio.Task] = {}
        self._background: set[asyncio.Task] = set()

    def in_flight(self, message_id: str) -> bool:
        return message_id in self._in_flight

    def _claim(self, message: Message, channel_history: Sequence[Message]) -> asyncio.Task | None:
        """Return the message's in-flight task, starting one if there is none. Never suspends."""
        mention = self._detector.detect(message.content)
        if not mention.has_query:
            return None
        task = self._in_flight.get(message.id)
        if task is not None:
            logger.info("[dispatcher:claim] joining in-flight query message_id=%s", message.id)
            return task
        task = asyncio.create_task(self._resolve(message, mention.query or "", channel_history))
        self._in_flight[message.id] = task
        task.add_done_callback(lambda _t, mid=message.id: self._in_flight.pop(mid, None))
        return task

    async def ensure_answered(self, message: Message, channel_history: Sequence[Message]) -> str | None:
        """
        Return the assistant response for the message, dispatching the query if needed.

        Returns None when the message does not address the assistant, or when
        its query was dispatched earlier and has not resolved.
        """
        task = self._claim(message, channel_history)
        if task is None:
            return None
        # Callers may go away; the query still runs to completion
        return await asyncio.shield(task)

    def schedule(self, message: Message, channel_history: Sequence[Message]) -> asyncio.Task | None:
        """Start ensure_answered without waiting for it (e.g. from a request handler)."""
        task = self._claim(message, channel_history)
        if task is not None and task not in self._background:
            self._background.add(task)
            task.add_done_callback(self._background_done)
        return task

    def _background_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("[dispatcher:schedule] background dispatch failed: %s", task.exception())

    async def _resolve(self, message: Message, query: str, channel_history: Sequence[Message]) -> str | None:
        cached = await asyncio.to_thread(self._cache.get, message.id)
        if cached is not None:
            logger.info("[dispatcher:resolve] cache hit message_id=%s", message.id)
            return cached
        if await asyncio.to_thread(self._cache.is_processed, message.id):
            logger.info("[dispatcher:resolve] already processed, no response yet message_id=%s", message.id)
            return None

        await asyncio.to_thread(self._cache.mark_processed, message.id)
        history = [m for m in channel_history if m.channel_id == message.channel_id]
        logger.info(
            "[dispatcher:resolve] IN  message_id=%s channel_id=%s query=%r history_len=%d",
            message.id, message.channel_id, query, len(history),
        )
        try:
            text = await asyncio.wait_for(
                self._service.answer(query, history, message.channel_id, message.id, message.content),
                timeout=self._timeout,
            )
            if not text or not text.strip():
                raise QueryServiceError("Query service returned an empty answer")
        except Exception:
            logger.exception("[dispatcher:resolve] query failed message_id=%s", message.id)
            text = self._error_response

        try:
            await asyncio.to_thread(self._cache.put, message.id, text)
        except ResponseConflictError:
            text = await asyncio.to_thread(self._cache.get, message.id)
        logger.info("[dispatcher:resolve] OUT message_id=%s text_len=%d", message.id, len(text or ""))
        return text

    def answer_state(self, message_id: str) -> AnswerState:
        """Current answer for display: absent, pending, or answered with text."""
        text = self._cache.get(message_id)
        if text is not None:
            return AnswerState(message_id=message_id, status="answered", text=text)
        if self.in_flight(message_id) or self._cache.is_processed(message_id):
            return AnswerState(message_id=message_id, status="pending")
        return AnswerState(message_id=message_id, status="absent")
