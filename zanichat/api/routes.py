"""
API route aggregator: register endpoints; no logic, only delegate to handlers.
"""

import logging

from fastapi import APIRouter, Depends

from zanichat.api.dependencies import (
    get_attachment_store,
    get_dispatcher,
    get_document_store,
    get_transformer,
)
from zanichat.api.handlers import (
    handle_get_answer,
    handle_list_messages,
    handle_list_pinned,
    handle_post_message,
    handle_set_pinned,
    handle_share_document,
)
from zanichat.core.attachment_db import SqliteAttachmentStore
from zanichat.core.document_db import SqliteDocumentStore
from zanichat.schemas.attachment import AttachmentCreate, AttachmentRecordOut
from zanichat.schemas.document import ChannelDocument, DocumentShare
from zanichat.schemas.message import (
    AnswerState,
    FormatRequest,
    FormattedContent,
    MessageCreate,
    RenderedMessage,
)
from zanichat.services.content_transformer import ContentTransformer
from zanichat.services.query_dispatcher import QueryDispatcher

logger = logging.getLogger(__name__)
router = APIRouter()


# --- System ---

@router.get("/", tags=["system"])
def root():
    return {"status": "zanichat backend running"}


@router.get("/health", tags=["system"])
def health():
    return {"ok": True}


# --- Formatting ---

@router.post(
    "/format",
    response_model=FormattedContent,
    tags=["messages"],
    summary="Format raw message text",
    description="Returns renderable markup and the attachments referenced by 📎 lines. Never fails for any text.",
)
def format_content(body: FormatRequest, transformer: ContentTransformer = Depends(get_transformer)) -> FormattedContent:
    return transformer.transform(body.content)


# --- Messages ---

@router.post(
    "/channels/{channel_id}/messages",
    response_model=RenderedMessage,
    tags=["messages"],
    summary="Post a message",
    description="Stores the message and, when it mentions @zani, starts the assistant query in the background.",
)
async def post_message(
    channel_id: str,
    body: MessageCreate,
    transformer: ContentTransformer = Depends(get_transformer),
    dispatcher: QueryDispatcher = Depends(get_dispatcher),
) -> RenderedMessage:
    return await handle_post_message(channel_id, body, transformer, dispatcher)


@router.get(
    "/channels/{channel_id}/messages",
    response_model=list[RenderedMessage],
    tags=["messages"],
    summary="Render a channel",
)
async def list_messages(
    channel_id: str,
    transformer: ContentTransformer = Depends(get_transformer),
    dispatcher: QueryDispatcher = Depends(get_dispatcher),
) -> list[RenderedMessage]:
    return await handle_list_messages(channel_id, transformer, dispatcher)


@router.get(
    "/messages/{message_id}/answer",
    response_model=AnswerState,
    tags=["messages"],
    summary="Assistant answer state for a message",
    description="absent (no @zani query), pending (dispatched, not resolved) or answered with text. 404 for unknown ids.",
)
async def get_answer(message_id: str, dispatcher: QueryDispatcher = Depends(get_dispatcher)) -> AnswerState:
    return await handle_get_answer(message_id, dispatcher)


# --- Pins ---

@router.post(
    "/channels/{channel_id}/messages/{message_id}/pin",
    response_model=RenderedMessage,
    tags=["pins"],
    summary="Pin a message",
)
async def pin_message(
    channel_id: str,
    message_id: str,
    transformer: ContentTransformer = Depends(get_transformer),
    dispatcher: QueryDispatcher = Depends(get_dispatcher),
) -> RenderedMessage:
    return await handle_set_pinned(channel_id, message_id, True, transformer, dispatcher)


@router.delete(
    "/channels/{channel_id}/messages/{message_id}/pin",
    response_model=RenderedMessage,
    tags=["pins"],
    summary="Unpin a message",
)
async def unpin_message(
    channel_id: str,
    message_id: str,
    transformer: ContentTransformer = Depends(get_transformer),
    dispatcher: QueryDispatcher = Depends(get_dispatcher),
) -> RenderedMessage:
    return await handle_set_pinned(channel_id, message_id, False, transformer, dispatcher)


@router.get(
    "/channels/{channel_id}/pins",
    response_model=list[RenderedMessage],
    tags=["pins"],
    summary="Pinned messages of a channel",
)
async def list_pins(
    channel_id: str,
    transformer: ContentTransformer = Depends(get_transformer),
    dispatcher: QueryDispatcher = Depends(get_dispatcher),
) -> list[RenderedMessage]:
    return await handle_list_pinned(channel_id, transformer, dispatcher)


# --- Attachments ---

@router.post(
    "/attachments",
    response_model=AttachmentRecordOut,
    tags=["attachments"],
    summary="Register an uploaded file",
    description="Makes the file resolvable by name when a message references it with 📎.",
)
def register_attachment(
    body: AttachmentCreate, store: SqliteAttachmentStore = Depends(get_attachment_store)
) -> AttachmentRecordOut:
    store.add(body.name, body.url, body.size_bytes)
    return AttachmentRecordOut(name=body.name, url=body.url, size_bytes=body.size_bytes)


@router.get("/attachments", tags=["attachments"], summary="List registered files")
def list_attachments(store: SqliteAttachmentStore = Depends(get_attachment_store)) -> dict:
    try:
        records = store.get_all()
    except Exception as e:
        logger.warning("Failed to list attachments: %s", e)
        records = []
    return {"attachments": [AttachmentRecordOut(name=r.name, url=r.url, size_bytes=r.size_bytes) for r in records]}


# --- Channel documents ---

@router.post(
    "/channels/{channel_id}/documents",
    response_model=ChannelDocument,
    tags=["documents"],
    summary="Share a document into a channel",
    description="Stores the document under the channel. mime_type defaults from the title's extension.",
)
def share_document(
    channel_id: str, body: DocumentShare, store: SqliteDocumentStore = Depends(get_document_store)
) -> ChannelDocument:
    return handle_share_document(channel_id, body, store)


@router.get(
    "/channels/{channel_id}/documents",
    response_model=list[ChannelDocument],
    tags=["documents"],
    summary="Documents shared into a channel",
)
def list_documents(
    channel_id: str, store: SqliteDocumentStore = Depends(get_document_store)
) -> list[ChannelDocument]:
    return store.list_for_channel(channel_id)
