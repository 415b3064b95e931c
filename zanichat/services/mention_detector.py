"""
Assistant mention detection: find `@zani` and pull out the question that follows it.
"""

import re
from dataclasses import dataclass

from zanichat.core.config import ASSISTANT_HANDLE, ATTACHMENT_MARKER


def assistant_token_pattern(handle: str = ASSISTANT_HANDLE) -> re.Pattern[str]:
    """Exact-boundary token: `@zani` matches, `@zani-bot`, `@zanix` and `me@zani` do not."""
    return re.compile(rf"(?<![\w@])@{re.escape(handle)}(?![\w-])", re.IGNORECASE)


@dataclass(frozen=True)
class MentionQuery:
    has_query: bool
    query: str | None = None


NO_QUERY = MentionQuery(has_query=False)


class MentionDetector:
    """Detect an assistant-directed mention and extract its query."""

    def __init__(self, handle: str = ASSISTANT_HANDLE) -> None:
        self.handle = handle
        self._token = assistant_token_pattern(handle)

    def contains_mention(self, content: str) -> bool:
        return bool(content) and self._token.search(content) is not None

    def detect(self, content: str) -> MentionQuery:
        """
        Query = text after the first token, up to the next 📎 line or end of content.
        A token with nothing after it is treated as no mention at all.
        """
        if not content:
            return NO_QUERY
        match = self._token.search(content)
        if match is None:
            return NO_QUERY
        rest = content[match.end():]
        rest = rest.split(ATTACHMENT_MARKER, 1)[0]
        query = rest.strip().lstrip(":,").strip()
        if not query:
            return NO_QUERY
        return MentionQuery(has_query=True, query=query)
