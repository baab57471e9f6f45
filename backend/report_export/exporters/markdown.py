"""Markdown exporter."""

from __future__ import annotations

from dataclasses import dataclass

from .base import DocumentExporter, ExportFormat, ExportRequest, ExportResult


@dataclass
class MarkdownExporter(DocumentExporter):
    """Returns the report body unchanged."""

    format: ExportFormat = ExportFormat.MARKDOWN

    def export(self, content: str, request: ExportRequest) -> ExportResult:
        return self._result(request, content.encode("utf-8"))
