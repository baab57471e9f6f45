"""Request and response models for the export API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from ..exporters.base import ExportFormat


class ExportPayload(BaseModel):
    """Report to export, as supplied by the chat/report store."""

    format: ExportFormat
    content: str = ""
    title: str = Field(default="", max_length=300)


class FormatInfo(BaseModel):
    format: ExportFormat
    extension: str
    media_type: str
