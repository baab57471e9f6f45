"""Base exporter definitions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class ExportFormat(str, Enum):
    MARKDOWN = "markdown"
    HTML = "html"
    PDF = "pdf"
    WORD = "word"
    IMAGE = "image"

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]

    @property
    def media_type(self) -> str:
        return _MEDIA_TYPES[self]


_EXTENSIONS = {
    ExportFormat.MARKDOWN: "md",
    ExportFormat.HTML: "html",
    ExportFormat.PDF: "pdf",
    ExportFormat.WORD: "docx",
    ExportFormat.IMAGE: "png",
}

_MEDIA_TYPES = {
    ExportFormat.MARKDOWN: "text/markdown",
    ExportFormat.HTML: "text/html",
    ExportFormat.PDF: "application/pdf",
    ExportFormat.WORD: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ExportFormat.IMAGE: "image/png",
}


@dataclass(slots=True)
class ExportRequest:
    format: ExportFormat
    filename_stem: str = "research-report"
    title_hint: str = "Research Report"

    @property
    def filename(self) -> str:
        return f"{self.filename_stem}.{self.format.extension}"


@dataclass(slots=True)
class ExportResult:
    filename: str
    media_type: str
    content: bytes


class DocumentExporter(ABC):
    format: ExportFormat

    @abstractmethod
    def export(self, content: str, request: ExportRequest) -> ExportResult:
        ...

    def _result(self, request: ExportRequest, content: bytes) -> ExportResult:
        return ExportResult(filename=request.filename, media_type=self.format.media_type, content=content)
