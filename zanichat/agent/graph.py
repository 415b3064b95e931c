"""
LangGraph assistant: build channel context → generate answer.

Implements the QueryService port. Orchestration only; generation goes through
agent.llm. The graph is synchronous and runs in a worker thread.
"""

import asyncio
import logging
from typing import Sequence, TypedDict

from langgraph.graph import END, StateGraph

from zanichat.agent.llm import chat
from zanichat.core.config import ASSISTANT_HANDLE, ASSISTANT_MAX_TOKENS, HISTORY_MAX_MESSAGES
from zanichat.core.errors import QueryServiceError
from zanichat.schemas.message import Message
from zanichat.services.attachment_resolver import AttachmentResolver
from zanichat.services.content_transformer import extract_attachments

logger = logging.getLogger(__name__)


class AssistantState(TypedDict):
    query: str
    channel_id: str
    message_id: str
    raw_content: str
    history: list  # list of Message, already scoped to channel_id
    context: str
    attachments: list  # list of Attachment
    answer: str


def _format_history(history: list, exclude_id: str, max_messages: int = HISTORY_MAX_MESSAGES) -> str:
    """Format the last N channel messages for inclusion in the prompt."""
    recent = [m for m in history if m.id != exclude_id][-max_messages:]
    lines = []
    for m in recent:
        content = (m.content or "").strip()
        if not content:
            continue
        lines.append(f"{m.username or m.user_id}: {content}")
    if not lines:
        return ""
    return "Recent messages in this channel:\n" + "\n".join(lines) + "\n\n"


def _format_attachments(attachments: list) -> str:
    if not attachments:
        return ""
    lines = []
    for a in attachments:
        size = f", {a.size_bytes} bytes" if a.size_bytes else ""
        lines.append(f"- {a.name} ({a.mime_type}{size})")
    return "Files attached to the message:\n" + "\n".join(lines) + "\n\n"


class AssistantQueryService:
    """Answers @zani queries with an LLM, given the channel's recent messages."""

    def __init__(self, resolver: AttachmentResolver, max_tokens: int = ASSISTANT_MAX_TOKENS) -> None:
        self._resolver = resolver
        self._max_tokens = max_tokens
        self._graph = self.build_graph()

    def _build_context(self, state: AssistantState) -> dict:
        """Node 1: channel history and attached files → prompt context."""
        history = state.get("history") or []
        _, attachments = extract_attachments(state.get("raw_content") or "", self._resolver)
        context = _format_history(history, state.get("message_id") or "") + _format_attachments(attachments)
        logger.info(
            "[graph:build_context] message_id=%s history_len=%d attachments=%d context_len=%d",
            state.get("message_id"), len(history), len(attachments), len(context),
        )
        return {"context": context, "attachments": attachments}

    def _generate_answer(self, state: AssistantState) -> dict:
        """Node 2: LLM answers the query using the context."""
        query = state.get("query") or ""
        system = (
            f"You are @{ASSISTANT_HANDLE}, an assistant embedded in a team chat. "
            "Answer the question you were asked in a friendly, concise way. "
            "Use the recent channel messages and attached file names when they are relevant; "
            "do not invent file contents you cannot see."
        )
        user = f"{state.get('context') or ''}Question: {query}"
        answer = chat(
            [{"role": "system", "content": system}, {"role": "user", "content": user}],
            max_tokens=self._max_tokens,
        ).strip()
        logger.info("[graph:generate_answer] OUT message_id=%s answer_len=%d", state.get("message_id"), len(answer))
        return {"answer": answer}

    def build_graph(self):
        """build_context → generate_answer → END."""
        graph = StateGraph(AssistantState)
        graph.add_node("build_context", self._build_context)
        graph.add_node("generate_answer", self._generate_answer)
        graph.set_entry_point("build_context")
        graph.add_edge("build_context", "generate_answer")
        graph.add_edge("generate_answer", END)
        return graph.compile()

    def run(
        self,
        query: str,
        history: Sequence[Message],
        channel_id: str,
        message_id: str,
        raw_content: str,
    ) -> str:
        """Run the graph synchronously and return the answer."""
        initial: AssistantState = {
            "query": query,
            "channel_id": channel_id,
            "message_id": message_id,
            "raw_content": raw_content,
            "history": [m for m in history if m.channel_id == channel_id],
            "context": "",
            "attachments": [],
            "answer": "",
        }
        final = self._graph.invoke(initial)
        answer = (final.get("answer") or "").strip()
        if not answer:
            raise QueryServiceError("No answer generated.")
        return answer

    async def answer(
        self,
        query: str,
        history: Sequence[Message],
        channel_id: str,
        message_id: str,
        raw_content: str,
    ) -> str:
        return await asyncio.to_thread(self.run, query, history, channel_id, message_id, raw_content)
