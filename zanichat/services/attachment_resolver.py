"""
Attachment resolution: file name → Attachment metadata.

Looks the name up in the attachment store; anything the store cannot supply is
filled with a deterministic fallback. Resolution never raises.
"""

import base64
import logging

from zanichat.core.config import PLACEHOLDER_IMAGE_URL
from zanichat.core.ports import AttachmentRecord, AttachmentStore
from zanichat.schemas.message import Attachment

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"

MIME_TYPES: dict[str, str] = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/msword",
    "xls": "application/excel",
    "xlsx": "application/excel",
}

# Extensions that fall back to the placeholder image (svg is not previewed)
PLACEHOLDER_IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "webp"})


def file_extension(file_name: str) -> str:
    """Text after the last dot, lowercased; `.pdf` has extension `pdf`."""
    return file_name.rsplit(".", 1)[1].lower() if "." in file_name else ""


def mime_type_for(file_name: str) -> str:
    return MIME_TYPES.get(file_extension(file_name), DEFAULT_MIME_TYPE)


def fallback_url(file_name: str) -> str:
    """Placeholder for images, otherwise an opaque data URL derived from the name."""
    if file_extension(file_name) in PLACEHOLDER_IMAGE_EXTENSIONS:
        return PLACEHOLDER_IMAGE_URL
    encoded = base64.b64encode(file_name.encode("utf-8")).decode("ascii")
    return f"data:{DEFAULT_MIME_TYPE};base64,{encoded}"


class AttachmentResolver:
    """Resolve bare file names from 📎 lines against an AttachmentStore."""

    def __init__(self, store: AttachmentStore) -> None:
        self._store = store

    def _lookup(self, file_name: str) -> AttachmentRecord | None:
        try:
            return self._store.lookup_by_name(file_name)
        except Exception as e:
            logger.warning("[attachment_resolver] lookup failed name=%r: %s", file_name, e)
            return None

    def resolve(self, file_name: str) -> Attachment:
        record = self._lookup(file_name)
        if record is None:
            logger.debug("[attachment_resolver] miss name=%r", file_name)
        url = record.url if record and record.url else fallback_url(file_name)
        size = record.size_bytes if record else None
        return Attachment(
            name=file_name,
            mime_type=mime_type_for(file_name),
            url=url,
            size_bytes=size,
        )
