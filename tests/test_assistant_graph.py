"""
Tests for the LangGraph assistant and the LLM wrapper. The LLM itself is patched out.
"""

import asyncio
from unittest.mock import patch

import pytest

from zanichat.agent import llm
from zanichat.agent.graph import AssistantQueryService, _format_history
from zanichat.core.attachment_db import InMemoryAttachmentStore
from zanichat.core.errors import QueryServiceError, ServiceUnavailableError
from zanichat.core.ports import AttachmentRecord
from zanichat.services.attachment_resolver import AttachmentResolver


@pytest.fixture
def service() -> AssistantQueryService:
    store = InMemoryAttachmentStore([AttachmentRecord("report.pdf", "https://f/report.pdf", 2048)])
    return AssistantQueryService(AttachmentResolver(store))


class TestAssistantQueryService:
    """Tests for AssistantQueryService.run() / answer()."""

    def test_prompt_includes_channel_history_and_files(self, service, make_message) -> None:
        earlier = make_message("deploy is at 5pm", username="Ann")
        elsewhere = make_message("secret plans", channel_id="random")
        msg = make_message("@zani when is deploy?\n📎 report.pdf")
        with patch("zanichat.agent.graph.chat", return_value="  At 5pm.  ") as chat:
            answer = service.run("when is deploy?", [earlier, elsewhere, msg], "general", msg.id, msg.content)
        assert answer == "At 5pm."
        prompt = chat.call_args.args[0][1]["content"]
        assert "Ann: deploy is at 5pm" in prompt
        assert "secret plans" not in prompt
        assert "report.pdf (application/pdf, 2048 bytes)" in prompt
        assert prompt.endswith("Question: when is deploy?")

    def test_empty_answer_raises(self, service, make_message) -> None:
        msg = make_message("@zani hi")
        with patch("zanichat.agent.graph.chat", return_value="   "):
            with pytest.raises(QueryServiceError):
                service.run("hi", [msg], "general", msg.id, msg.content)

    def test_answer_is_async(self, service, make_message) -> None:
        msg = make_message("@zani hi")
        with patch("zanichat.agent.graph.chat", return_value="hello"):
            assert asyncio.run(service.answer("hi", [msg], "general", msg.id, msg.content)) == "hello"


class TestFormatHistory:
    def test_limits_and_excludes_current(self, make_message) -> None:
        msgs = [make_message(f"n{i}") for i in range(5)]
        text = _format_history(msgs, exclude_id=msgs[-1].id, max_messages=2)
        assert "u1: n2" in text and "u1: n3" in text
        assert "n1" not in text and "n4" not in text

    def test_empty_history(self) -> None:
        assert _format_history([], exclude_id="x") == ""


class TestChat:
    """Tests for llm.chat() provider selection."""

    def test_unconfigured_raises(self) -> None:
        with patch.object(llm, "OPENAI_API_KEY", ""), patch.object(llm, "HF_API_KEY", ""):
            with pytest.raises(ServiceUnavailableError):
                llm.chat([{"role": "user", "content": "hi"}])

    def test_openai_failure_falls_back_to_hf(self) -> None:
        with patch.object(llm, "OPENAI_API_KEY", "sk-test"), patch.object(llm, "HF_API_KEY", "hf-test"), \
                patch.object(llm, "_call_openai", side_effect=RuntimeError("boom")), \
                patch.object(llm, "_call_hf", return_value="from hf") as hf:
            assert llm.chat([{"role": "user", "content": "hi"}]) == "from hf"
        hf.assert_called_once()

    def test_openai_failure_without_hf_propagates(self) -> None:
        with patch.object(llm, "OPENAI_API_KEY", "sk-test"), patch.object(llm, "HF_API_KEY", ""), \
                patch.object(llm, "_call_openai", side_effect=RuntimeError("boom")):
            with pytest.raises(RuntimeError):
                llm.chat([{"role": "user", "content": "hi"}])

    def test_hf_only(self) -> None:
        with patch.object(llm, "OPENAI_API_KEY", ""), patch.object(llm, "HF_API_KEY", "hf-test"), \
                patch.object(llm, "_call_hf", return_value="ok") as hf:
            assert llm.chat([{"role": "user", "content": "hi"}], max_tokens=64) == "ok"
        hf.assert_called_once_with([{"role": "user", "content": "hi"}], 64)
