"""Schemas for the attachment registry endpoints."""

from pydantic import BaseModel, Field


class AttachmentCreate(BaseModel):
    """Request body for POST /attachments: a file that was uploaded elsewhere."""

    name: str = Field(..., min_length=1, description="File name as it appears after the 📎 marker.")
    url: str = Field(..., min_length=1, description="Where the file can be downloaded.")
    size_bytes: int | None = Field(None, ge=0, description="File size in bytes, if known.")

    model_config = {
        "json_schema_extra": {
            "examples": [{"name": "report.pdf", "url": "https://files.example.com/report.pdf", "size_bytes": 48213}]
        }
    }


class AttachmentRecordOut(BaseModel):
    """A stored attachment record."""

    name: str
    url: str | None = None
    size_bytes: int | None = None
