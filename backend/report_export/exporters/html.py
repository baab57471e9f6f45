"""HTML exporter."""

from __future__ import annotations

from dataclasses import dataclass

from ..rendering.html import render_document
from .base import DocumentExporter, ExportFormat, ExportRequest, ExportResult


@dataclass
class HtmlExporter(DocumentExporter):
    format: ExportFormat = ExportFormat.HTML

    def export(self, content: str, request: ExportRequest) -> ExportResult:
        page = render_document(content, title=request.title_hint)
        return self._result(request, page.encode("utf-8"))
