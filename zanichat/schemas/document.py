"""Schemas for documents shared into a channel."""

from datetime import datetime

from pydantic import BaseModel, Field


class DocumentShare(BaseModel):
    """Request body for POST /channels/{channel_id}/documents."""

    title: str = Field(..., min_length=1, description="Display title; usually the file name.")
    url: str = Field(..., min_length=1, description="Where the document can be downloaded.")
    mime_type: str | None = Field(None, description="Content type; derived from the title when omitted.")
    size_bytes: int | None = Field(None, ge=0, description="File size in bytes, if known.")
    uploaded_by: str = Field("", description="Display name of the sharer.")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "title": "roadmap.docx",
                    "url": "https://files.example.com/roadmap.docx",
                    "size_bytes": 120554,
                    "uploaded_by": "Ann",
                }
            ]
        }
    }


class ChannelDocument(BaseModel):
    """A document shared into a channel."""

    id: str
    channel_id: str
    title: str
    url: str
    mime_type: str
    size_bytes: int | None = None
    uploaded_by: str = ""
    uploaded_at: datetime
    is_pinned: bool = False
