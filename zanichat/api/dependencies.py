"""
Dependency providers: build the core collaborators once per process.

Routes receive them through FastAPI `Depends`; tests swap them with
`app.dependency_overrides`.
"""

from functools import lru_cache

from zanichat.agent.graph import AssistantQueryService
from zanichat.core.attachment_db import SqliteAttachmentStore
from zanichat.core.document_db import SqliteDocumentStore
from zanichat.core.response_db import SqliteResponseStore
from zanichat.services.attachment_resolver import AttachmentResolver
from zanichat.services.content_transformer import ContentTransformer
from zanichat.services.mention_detector import MentionDetector
from zanichat.services.query_dispatcher import QueryDispatcher
from zanichat.services.response_cache import ResponseCache


@lru_cache
def get_attachment_store() -> SqliteAttachmentStore:
    return SqliteAttachmentStore()


@lru_cache
def get_resolver() -> AttachmentResolver:
    return AttachmentResolver(get_attachment_store())


@lru_cache
def get_transformer() -> ContentTransformer:
    return ContentTransformer(get_resolver())


@lru_cache
def get_dispatcher() -> QueryDispatcher:
    return QueryDispatcher(
        cache=ResponseCache(SqliteResponseStore()),
        query_service=AssistantQueryService(get_resolver()),
        detector=MentionDetector(),
    )


@lru_cache
def get_document_store() -> SqliteDocumentStore:
    return SqliteDocumentStore()
