"""
Message content formatting: raw chat text → renderable markup plus attachments.

The pipeline is an ordered list of named stages. Order matters: later stages
look for characters that earlier stages insert or remove, so no stage rewrites
markup already emitted before it (tags, and the bodies of emitted <a>, <span>
and <code> elements). Emphasis may wrap such markup; the other stages only
match in the plain text between it.

User text is HTML-escaped before any markup is inserted, so every `<` seen by
stages after `escape_html` belongs to the pipeline.
"""

import html
import logging
import re
from dataclasses import dataclass
from typing import Callable

from zanichat.core.config import ASSISTANT_HANDLE, ATTACHMENT_MARKER
from zanichat.schemas.message import Attachment, FormattedContent
from zanichat.services.attachment_resolver import AttachmentResolver
from zanichat.services.mention_detector import assistant_token_pattern

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stage:
    """One named rewrite step of the formatting pipeline."""

    name: str
    apply: Callable[[str], str]


# Lines may end in \n or \r\n (form posts)
ATTACHMENT_PATTERN = re.compile(rf"{re.escape(ATTACHMENT_MARKER)} ([^\r\n]*?\S)[ \t]*(?:\r?\n|$)")
IMAGE_PATTERN = re.compile(r"!\[(.*?)\]\((.*?)\)")
URL_PATTERN = re.compile(r"https?://\S+")
CHANNEL_PATTERN = re.compile(r"(?<![\w&])#(\w+(?:-\w+)*)")
CODE_PATTERN = re.compile(r"`([^`]+)`")
BOLD_PATTERN = re.compile(r"\*([^*]+)\*")
ITALIC_PATTERN = re.compile(r"_([^_]+)_")

# Emitted markup that later stages must leave alone
_MARKUP = re.compile(r"<(a|span|code)\b[^>]*>.*?</\1>|<[^>]+>", re.DOTALL)
_SAFE_IMAGE_URL = re.compile(r"^(?:https?://|/)", re.IGNORECASE)
# Private-use characters; stripped from user text in escape_html
_SHIELD_OPEN = "\ue000"
_SHIELD_CLOSE = "\ue001"
_SHIELDED = re.compile(f"{_SHIELD_OPEN}(\\d+){_SHIELD_CLOSE}")


def sub_outside_markup(pattern: re.Pattern[str], repl, text: str) -> str:
    """Apply pattern.sub only to the text between already-emitted markup."""
    parts: list[str] = []
    pos = 0
    for m in _MARKUP.finditer(text):
        parts.append(pattern.sub(repl, text[pos:m.start()]))
        parts.append(m.group(0))
        pos = m.end()
    parts.append(pattern.sub(repl, text[pos:]))
    return "".join(parts)


def sub_around_markup(pattern: re.Pattern[str], repl, text: str) -> str:
    """
    Apply pattern.sub with emitted markup shielded behind placeholders.

    Unlike sub_outside_markup, a match may enclose markup (`*hi @bob*`) but
    never rewrites inside it.
    """
    chunks: list[str] = []

    def shield(m: re.Match[str]) -> str:
        chunks.append(m.group(0))
        return f"{_SHIELD_OPEN}{len(chunks) - 1}{_SHIELD_CLOSE}"

    shielded = pattern.sub(repl, _MARKUP.sub(shield, text))
    return _SHIELDED.sub(lambda m: chunks[int(m.group(1))], shielded)


def extract_attachments(content: str, resolver: AttachmentResolver) -> tuple[str, list[Attachment]]:
    """
    Pull every `📎 <filename>` line out of the content.

    Returns the remaining text (stripped when anything was removed) and the
    resolved attachments in the order they appear.
    """
    attachments: list[Attachment] = []
    for m in ATTACHMENT_PATTERN.finditer(content):
        attachments.append(resolver.resolve(m.group(1).strip()))
    if not attachments:
        return content, attachments
    return ATTACHMENT_PATTERN.sub("", content).strip(), attachments


def escape_html(text: str) -> str:
    """Escape &, <, > and double quotes. Single quotes stay: emitted attributes are double-quoted."""
    text = text.replace(_SHIELD_OPEN, "").replace(_SHIELD_CLOSE, "")
    return html.escape(text, quote=False).replace('"', "&quot;")


def _image_markup(m: re.Match[str]) -> str:
    alt, url = m.group(1), m.group(2).strip()
    if not _SAFE_IMAGE_URL.match(url):
        return m.group(0)
    return (
        f'<a href="{url}" target="_blank" rel="noopener noreferrer" class="message-image-link">'
        f'<img src="{url}" alt="{alt}" class="message-image" /></a>'
    )


def render_images(text: str) -> str:
    return IMAGE_PATTERN.sub(_image_markup, text)


def render_urls(text: str) -> str:
    return sub_outside_markup(
        URL_PATTERN,
        lambda m: f'<a href="{m.group(0)}" target="_blank" rel="noopener noreferrer" class="message-link">{m.group(0)}</a>',
        text,
    )


def render_assistant_mentions(text: str, handle: str = ASSISTANT_HANDLE) -> str:
    return sub_outside_markup(
        assistant_token_pattern(handle),
        lambda m: f'<span class="assistant-mention">{m.group(0)}</span>',
        text,
    )


def mention_pattern(handle: str = ASSISTANT_HANDLE) -> re.Pattern[str]:
    """`@name`, except the exact assistant token."""
    return re.compile(rf"(?<!\w)@(?!(?i:{re.escape(handle)})(?![\w-]))(\w+(?:-\w+)*)")


def render_mentions(text: str, handle: str = ASSISTANT_HANDLE) -> str:
    text = sub_outside_markup(
        mention_pattern(handle),
        lambda m: f'<span class="mention">@{m.group(1)}</span>',
        text,
    )
    return sub_outside_markup(
        CHANNEL_PATTERN,
        lambda m: f'<span class="channel-ref">#{m.group(1)}</span>',
        text,
    )


def render_emphasis(text: str) -> str:
    # Code first so its body is literal
    text = sub_around_markup(CODE_PATTERN, r'<code class="inline-code">\1</code>', text)
    text = sub_around_markup(BOLD_PATTERN, r"<strong>\1</strong>", text)
    return sub_around_markup(ITALIC_PATTERN, r"<em>\1</em>", text)


def build_stages(handle: str = ASSISTANT_HANDLE) -> tuple[Stage, ...]:
    """Text stages run after attachment extraction, in order."""
    return (
        Stage("escape_html", escape_html),
        Stage("markdown_images", render_images),
        Stage("bare_urls", render_urls),
        # Must precede "mentions" or the generic rule would claim the assistant token
        Stage("assistant_mentions", lambda text: render_assistant_mentions(text, handle)),
        Stage("mentions", lambda text: render_mentions(text, handle)),
        Stage("emphasis", render_emphasis),
    )


class ContentTransformer:
    """Turn raw message content into FormattedContent. Pure apart from attachment lookups."""

    def __init__(self, resolver: AttachmentResolver, handle: str = ASSISTANT_HANDLE) -> None:
        self._resolver = resolver
        self.stages = build_stages(handle)

    def transform(self, content: str) -> FormattedContent:
        text, attachments = extract_attachments(content or "", self._resolver)
        for stage in self.stages:
            text = stage.apply(text)
        logger.debug(
            "[content_transformer] OUT markup_len=%d attachments=%d", len(text), len(attachments)
        )
        return FormattedContent(markup=text, attachments=tuple(attachments))
