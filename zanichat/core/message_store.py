"""
In-memory message store. Keyed by channel_id; a channel's history never includes other channels.
"""

import logging
import threading

from zanichat.schemas.message import Message

logger = logging.getLogger(__name__)

# channel_id -> messages in posting order
_channels: dict[str, list[Message]] = {}
_lock = threading.Lock()


def get_channel_messages(channel_id: str) -> list[Message]:
    """Return the channel's messages (copy so caller cannot mutate store)."""
    if not channel_id or not isinstance(channel_id, str):
        logger.info("[message_store:get_channel_messages] IN  channel_id=%r -> empty", channel_id)
        return []
    with _lock:
        out = list(_channels.get(channel_id) or [])
    logger.info("[message_store:get_channel_messages] IN  channel_id=%s OUT messages=%d", channel_id[:16], len(out))
    return out


def get_message(message_id: str) -> Message | None:
    """Find a message by id across channels."""
    with _lock:
        for messages in _channels.values():
            for m in messages:
                if m.id == message_id:
                    return m
    return None


def append_message(message: Message) -> None:
    """Append one message to its channel's history."""
    with _lock:
        _channels.setdefault(message.channel_id, []).append(message)
    logger.info(
        "[message_store:append_message] channel_id=%s message_id=%s content_len=%d",
        message.channel_id[:16], message.id, len(message.content or ""),
    )


def clear() -> None:
    """Drop every channel."""
    with _lock:
        _channels.clear()


def set_pinned(channel_id: str, message_id: str, pinned: bool) -> Message | None:
    """Pin or unpin a message in its channel. Returns the updated message, or None if it is not there."""
    with _lock:
        messages = _channels.get(channel_id) or []
        for i, m in enumerate(messages):
            if m.id == message_id:
                updated = m.model_copy(update={"is_pinned": pinned})
                messages[i] = updated
                break
        else:
            return None
    logger.info("[message_store:set_pinned] channel_id=%s message_id=%s pinned=%s", channel_id[:16], message_id, pinned)
    return updated


def get_pinned_messages(channel_id: str) -> list[Message]:
    """Pinned messages of the channel, in posting order."""
    with _lock:
        return [m for m in _channels.get(channel_id) or [] if m.is_pinned]
