"""Schemas for chat messages, their rendered content, and assistant answer state."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Message(BaseModel):
    """A chat message as owned by the message store. Read-only to the rendering core."""

    id: str = Field(..., min_length=1, description="Message id.")
    channel_id: str = Field(..., min_length=1, description="Channel the message was posted in.")
    user_id: str = Field(..., min_length=1, description="Author id.")
    username: str = Field("", description="Author display name.")
    content: str = Field("", description="Raw message text as typed.")
    timestamp: datetime = Field(default_factory=_utcnow)
    edited: bool = False
    reactions: dict[str, list[str]] = Field(default_factory=dict, description="Emoji -> user ids.")
    reply_count: int = 0
    is_pinned: bool = False


class Attachment(BaseModel):
    """A file referenced by a message. Derived on every render, never persisted."""

    model_config = ConfigDict(frozen=True)

    name: str
    mime_type: str
    url: str
    size_bytes: int | None = Field(None, description="Size in bytes; None when the file is unknown.")


class FormattedContent(BaseModel):
    """Renderable markup plus the attachments extracted from a message."""

    model_config = ConfigDict(frozen=True)

    markup: str = ""
    attachments: tuple[Attachment, ...] = ()


AnswerStatus = Literal["absent", "pending", "answered"]


class AnswerState(BaseModel):
    """Assistant answer for a message as exposed to the view layer."""

    message_id: str
    status: AnswerStatus = "absent"
    text: str | None = None


class FormatRequest(BaseModel):
    """Request body for POST /format."""

    content: str = Field("", description="Raw message text.")


class MessageCreate(BaseModel):
    """Request body for POST /channels/{channel_id}/messages."""

    user_id: str = Field(..., min_length=1)
    username: str = ""
    content: str = Field(..., description="Raw message text; mention @zani to ask the assistant.")


class RenderedMessage(BaseModel):
    """A message together with its formatted content and answer state."""

    message: Message
    formatted: FormattedContent
    answer: AnswerState
    timestamp_label: str = Field("", description="Relative age of the message: now, 5m, 3h, 2d or a date.")
