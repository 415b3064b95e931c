"""Pytest configuration and shared fixtures."""

import asyncio
from typing import Sequence

import pytest

from zanichat.core import message_store
from zanichat.schemas.message import Message


class FakeQueryService:
    """QueryService double that records every call."""

    def __init__(self, reply: str = "Here is your answer.", error: Exception | None = None, delay: float = 0.0) -> None:
        self.reply = reply
        self.error = error
        self.delay = delay
        self.gate: asyncio.Event | None = None
        self.calls: list[dict] = []

    async def answer(
        self,
        query: str,
        history: Sequence[Message],
        channel_id: str,
        message_id: str,
        raw_content: str,
    ) -> str:
        self.calls.append({
            "query": query,
            "history": list(history),
            "channel_id": channel_id,
            "message_id": message_id,
            "raw_content": raw_content,
        })
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def fake_service() -> FakeQueryService:
    return FakeQueryService()


@pytest.fixture
def make_message():
    """Build Message objects with sensible defaults."""
    counter = {"n": 0}

    def _make(content: str, channel_id: str = "general", user_id: str = "u1", **kwargs) -> Message:
        counter["n"] += 1
        kwargs.setdefault("id", f"m{counter['n']}")
        return Message(channel_id=channel_id, user_id=user_id, content=content, **kwargs)

    return _make


@pytest.fixture(autouse=True)
def clean_message_store():
    """Message store is module-level; reset it around every test."""
    message_store.clear()
    yield
    message_store.clear()
