"""
API handlers: build messages, call services, shape responses.

Responsibility: Bridge HTTP types and services. Store lookups run in worker
threads so the event loop is not blocked by SQLite.
"""

import asyncio
import logging
import uuid

from fastapi import HTTPException

from zanichat.core.document_db import SqliteDocumentStore
from zanichat.core.message_store import (
    append_message,
    get_channel_messages,
    get_message,
    get_pinned_messages,
    set_pinned,
)
from zanichat.schemas.document import ChannelDocument, DocumentShare
from zanichat.schemas.message import AnswerState, Message, MessageCreate, RenderedMessage
from zanichat.services.attachment_resolver import mime_type_for
from zanichat.services.content_transformer import ContentTransformer
from zanichat.services.query_dispatcher import QueryDispatcher
from zanichat.services.timestamps import format_timestamp

logger = logging.getLogger(__name__)


async def render_message(
    message: Message, transformer: ContentTransformer, dispatcher: QueryDispatcher
) -> RenderedMessage:
    formatted = await asyncio.to_thread(transformer.transform, message.content)
    answer = await asyncio.to_thread(dispatcher.answer_state, message.id)
    return RenderedMessage(
        message=message,
        formatted=formatted,
        answer=answer,
        timestamp_label=format_timestamp(message.timestamp),
    )


async def handle_post_message(
    channel_id: str,
    body: MessageCreate,
    transformer: ContentTransformer,
    dispatcher: QueryDispatcher,
) -> RenderedMessage:
    """
    Store the message and start the assistant query if it mentions @zani.
    The answer is not awaited; clients poll GET /messages/{id}/answer.
    """
    message = Message(
        id=uuid.uuid4().hex,
        channel_id=channel_id,
        user_id=body.user_id,
        username=body.username,
        content=body.content,
    )
    append_message(message)
    dispatcher.schedule(message, get_channel_messages(channel_id))
    logger.info("[api:post_message] channel_id=%s message_id=%s", channel_id, message.id)
    return await render_message(message, transformer, dispatcher)


async def handle_list_messages(
    channel_id: str, transformer: ContentTransformer, dispatcher: QueryDispatcher
) -> list[RenderedMessage]:
    """Render every message in the channel. Rendering re-checks assistant queries (idempotent)."""
    messages = get_channel_messages(channel_id)
    for m in messages:
        dispatcher.schedule(m, messages)
    return [await render_message(m, transformer, dispatcher) for m in messages]


async def handle_get_answer(message_id: str, dispatcher: QueryDispatcher) -> AnswerState:
    if get_message(message_id) is None:
        raise HTTPException(status_code=404, detail=f"Message not found: {message_id!r}")
    return await asyncio.to_thread(dispatcher.answer_state, message_id)


async def handle_set_pinned(
    channel_id: str,
    message_id: str,
    pinned: bool,
    transformer: ContentTransformer,
    dispatcher: QueryDispatcher,
) -> RenderedMessage:
    message = set_pinned(channel_id, message_id, pinned)
    if message is None:
        raise HTTPException(
            status_code=404, detail=f"Message not found in channel {channel_id!r}: {message_id!r}"
        )
    return await render_message(message, transformer, dispatcher)


async def handle_list_pinned(
    channel_id: str, transformer: ContentTransformer, dispatcher: QueryDispatcher
) -> list[RenderedMessage]:
    return [await render_message(m, transformer, dispatcher) for m in get_pinned_messages(channel_id)]


def handle_share_document(channel_id: str, body: DocumentShare, store: SqliteDocumentStore) -> ChannelDocument:
    """Add a document to the channel. The content type falls back to the title's extension."""
    return store.add(
        channel_id=channel_id,
        title=body.title,
        url=body.url,
        mime_type=body.mime_type or mime_type_for(body.title),
        size_bytes=body.size_bytes,
        uploaded_by=body.uploaded_by,
    )
