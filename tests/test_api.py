"""
API tests: routes wired to in-memory stores and a fake query service.
"""

import time

import pytest
from fastapi.testclient import TestClient

from zanichat.api.dependencies import get_attachment_store, get_dispatcher, get_document_store, get_transformer
from zanichat.core.attachment_db import InMemoryAttachmentStore
from zanichat.core.config import ASSISTANT_ERROR_RESPONSE
from zanichat.core.document_db import InMemoryDocumentStore
from zanichat.core.response_db import InMemoryResponseStore
from zanichat.main import app
from zanichat.services.attachment_resolver import AttachmentResolver
from zanichat.services.content_transformer import ContentTransformer
from zanichat.services.mention_detector import MentionDetector
from zanichat.services.query_dispatcher import QueryDispatcher
from zanichat.services.response_cache import ResponseCache

from tests.conftest import FakeQueryService


@pytest.fixture
def client(fake_service: FakeQueryService):
    store = InMemoryAttachmentStore()
    transformer = ContentTransformer(AttachmentResolver(store))
    dispatcher = QueryDispatcher(ResponseCache(InMemoryResponseStore()), fake_service, MentionDetector("zani"))
    app.dependency_overrides[get_attachment_store] = lambda: store
    app.dependency_overrides[get_transformer] = lambda: transformer
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    documents = InMemoryDocumentStore()
    app.dependency_overrides[get_document_store] = lambda: documents
    # Context manager keeps one event loop alive so background dispatches finish between requests
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _wait_for_answer(client: TestClient, message_id: str, timeout: float = 5.0) -> dict:
    deadline = time.monotonic() + timeout
    while True:
        body = client.get(f"/messages/{message_id}/answer").json()
        if body["status"] != "pending" or time.monotonic() > deadline:
            return body
        time.sleep(0.02)


class TestSystem:
    def test_root_and_health(self, client: TestClient) -> None:
        assert client.get("/").json() == {"status": "zanichat backend running"}
        assert client.get("/health").json() == {"ok": True}


class TestFormat:
    """Tests for POST /format and the attachment registry."""

    def test_format_plain(self, client: TestClient) -> None:
        r = client.post("/format", json={"content": "*hi* @bob"})
        assert r.status_code == 200
        assert r.json() == {
            "markup": '<strong>hi</strong> <span class="mention">@bob</span>',
            "attachments": [],
        }

    def test_registered_attachment_resolves(self, client: TestClient) -> None:
        r = client.post(
            "/attachments",
            json={"name": "report.pdf", "url": "https://files.example.com/report.pdf", "size_bytes": 100},
        )
        assert r.status_code == 200
        body = client.post("/format", json={"content": "📎 report.pdf\nsee above"}).json()
        assert body["markup"] == "see above"
        assert body["attachments"] == [{
            "name": "report.pdf",
            "mime_type": "application/pdf",
            "url": "https://files.example.com/report.pdf",
            "size_bytes": 100,
        }]
        listed = client.get("/attachments").json()["attachments"]
        assert [a["name"] for a in listed] == ["report.pdf"]

    def test_register_rejects_negative_size(self, client: TestClient) -> None:
        r = client.post("/attachments", json={"name": "a.pdf", "url": "https://f/a.pdf", "size_bytes": -1})
        assert r.status_code == 422


class TestMessages:
    """Posting, listing and polling assistant answers."""

    def test_plain_message_has_no_answer(self, client: TestClient, fake_service: FakeQueryService) -> None:
        r = client.post("/channels/general/messages", json={"user_id": "u1", "content": "hello"})
        assert r.status_code == 200
        body = r.json()
        assert body["formatted"]["markup"] == "hello"
        assert body["answer"]["status"] == "absent"
        assert body["timestamp_label"] == "now"
        assert body["message"]["is_pinned"] is False
        assert client.get(f"/messages/{body['message']['id']}/answer").json()["status"] == "absent"
        assert fake_service.calls == []

    def test_mention_is_answered(self, client: TestClient, fake_service: FakeQueryService) -> None:
        client.post("/channels/general/messages", json={"user_id": "u2", "username": "Ann", "content": "context"})
        r = client.post("/channels/general/messages", json={"user_id": "u1", "content": "@zani what now?"})
        body = r.json()
        assert body["answer"]["status"] in ("pending", "answered")
        assert '<span class="assistant-mention">@zani</span>' in body["formatted"]["markup"]

        answer = _wait_for_answer(client, body["message"]["id"])
        assert answer == {"message_id": body["message"]["id"], "status": "answered", "text": "Here is your answer."}
        assert len(fake_service.calls) == 1
        assert fake_service.calls[0]["query"] == "what now?"
        assert [m.content for m in fake_service.calls[0]["history"]] == ["context", "@zani what now?"]

    def test_listing_does_not_redispatch(self, client: TestClient, fake_service: FakeQueryService) -> None:
        msg_id = client.post("/channels/general/messages", json={"user_id": "u1", "content": "@zani hi"}).json()["message"]["id"]
        _wait_for_answer(client, msg_id)
        for _ in range(3):
            listed = client.get("/channels/general/messages").json()
            assert listed[0]["answer"]["text"] == "Here is your answer."
        assert len(fake_service.calls) == 1

    def test_history_is_per_channel(self, client: TestClient, fake_service: FakeQueryService) -> None:
        client.post("/channels/random/messages", json={"user_id": "u1", "content": "off topic"})
        msg_id = client.post("/channels/dev/messages", json={"user_id": "u1", "content": "@zani recap"}).json()["message"]["id"]
        _wait_for_answer(client, msg_id)
        assert [m.channel_id for m in fake_service.calls[0]["history"]] == ["dev"]
        assert [m["message"]["content"] for m in client.get("/channels/random/messages").json()] == ["off topic"]

    def test_failure_shows_error_response(self, client: TestClient, fake_service: FakeQueryService) -> None:
        fake_service.error = RuntimeError("model down")
        msg_id = client.post("/channels/general/messages", json={"user_id": "u1", "content": "@zani hi"}).json()["message"]["id"]
        assert _wait_for_answer(client, msg_id)["text"] == ASSISTANT_ERROR_RESPONSE

    def test_unknown_message_is_404(self, client: TestClient) -> None:
        assert client.get("/messages/nope/answer").status_code == 404

    def test_empty_channel(self, client: TestClient) -> None:
        assert client.get("/channels/empty/messages").json() == []


class TestPins:
    """Pinning and unpinning messages."""

    def _post(self, client: TestClient, channel_id: str, content: str) -> str:
        return client.post(f"/channels/{channel_id}/messages", json={"user_id": "u1", "content": content}).json()["message"]["id"]

    def test_pin_and_unpin(self, client: TestClient) -> None:
        first = self._post(client, "general", "keep this")
        self._post(client, "general", "chatter")

        r = client.post(f"/channels/general/messages/{first}/pin")
        assert r.status_code == 200
        assert r.json()["message"]["is_pinned"] is True
        assert [m["message"]["id"] for m in client.get("/channels/general/pins").json()] == [first]
        listed = client.get("/channels/general/messages").json()
        assert [m["message"]["is_pinned"] for m in listed] == [True, False]

        r = client.delete(f"/channels/general/messages/{first}/pin")
        assert r.json()["message"]["is_pinned"] is False
        assert client.get("/channels/general/pins").json() == []

    def test_pin_is_idempotent(self, client: TestClient) -> None:
        msg_id = self._post(client, "general", "hi")
        client.post(f"/channels/general/messages/{msg_id}/pin")
        assert client.post(f"/channels/general/messages/{msg_id}/pin").json()["message"]["is_pinned"] is True
        assert len(client.get("/channels/general/pins").json()) == 1

    def test_pin_unknown_or_wrong_channel_is_404(self, client: TestClient) -> None:
        msg_id = self._post(client, "general", "hi")
        assert client.post("/channels/general/messages/nope/pin").status_code == 404
        assert client.post(f"/channels/random/messages/{msg_id}/pin").status_code == 404


class TestDocuments:
    """Sharing documents into a channel."""

    def test_share_and_list(self, client: TestClient) -> None:
        r = client.post(
            "/channels/general/documents",
            json={"title": "roadmap.docx", "url": "https://f/roadmap.docx", "size_bytes": 120, "uploaded_by": "Ann"},
        )
        assert r.status_code == 200
        doc = r.json()
        assert doc["channel_id"] == "general"
        assert doc["mime_type"] == "application/msword"
        assert doc["uploaded_by"] == "Ann"
        assert doc["is_pinned"] is False

        listed = client.get("/channels/general/documents").json()
        assert [d["id"] for d in listed] == [doc["id"]]
        assert client.get("/channels/random/documents").json() == []

    def test_explicit_mime_type_kept(self, client: TestClient) -> None:
        doc = client.post(
            "/channels/general/documents",
            json={"title": "notes", "url": "https://f/notes", "mime_type": "text/plain"},
        ).json()
        assert doc["mime_type"] == "text/plain"
        assert doc["uploaded_by"] == "Unknown user"

    def test_share_requires_title(self, client: TestClient) -> None:
        r = client.post("/channels/general/documents", json={"title": "", "url": "https://f/x"})
        assert r.status_code == 422
