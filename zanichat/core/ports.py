"""Outbound ports: interfaces for the collaborators the core talks to."""

from dataclasses import dataclass
from typing import Protocol, Sequence, runtime_checkable

from zanichat.schemas.message import Message


@dataclass
class AttachmentRecord:
    """A previously uploaded file as known to the attachment store."""

    name: str
    url: str | None = None
    size_bytes: int | None = None


@runtime_checkable
class AttachmentStore(Protocol):
    """Key-value lookup of uploaded files by name."""

    def lookup_by_name(self, name: str) -> AttachmentRecord | None: ...


@runtime_checkable
class ResponseStore(Protocol):
    """Durable storage for assistant responses and dispatch marks."""

    def get(self, message_id: str) -> str | None: ...
    def put(self, message_id: str, text: str) -> None: ...
    def is_processed(self, message_id: str) -> bool: ...
    def mark_processed(self, message_id: str) -> None: ...


@runtime_checkable
class QueryService(Protocol):
    """Answers an assistant query in the context of its channel."""

    async def answer(
        self,
        query: str,
        history: Sequence[Message],
        channel_id: str,
        message_id: str,
        raw_content: str,
    ) -> str: ...
