"""Exporter registry and export coordinator."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from ..core.config import settings
from ..core.errors import ExportFailure, PrerequisiteMissing
from ..services.images import HttpImageFetcher, ImageFetcher
from .base import DocumentExporter, ExportFormat, ExportRequest, ExportResult
from .docx import DocxExporter
from .html import HtmlExporter
from .image import ImageExporter
from .markdown import MarkdownExporter
from .pdf import PdfExporter

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


def filename_stem(moment: datetime, prefix: str | None = None) -> str:
    """``research-report-YYYY-MM-DD_HH-MM-SS`` for the given local time."""
    return f"{prefix or settings.filename_prefix}-{moment.strftime(TIMESTAMP_FORMAT)}"


def require_content(content: str | None) -> None:
    """Raise :class:`PrerequisiteMissing` unless there is report text to lay out."""
    if not content or not content.strip():
        raise PrerequisiteMissing("no report content to export")


class ExporterRegistry:
    """Resolves exporters by format and produces the final artifact.

    The registry holds no per-export state, so one instance can serve
    concurrent exports.
    """

    def __init__(
        self,
        fetcher: ImageFetcher | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        fetcher = fetcher or HttpImageFetcher()
        self._clock = clock
        self._registry: dict[ExportFormat, DocumentExporter] = {
            ExportFormat.MARKDOWN: MarkdownExporter(),
            ExportFormat.HTML: HtmlExporter(),
            ExportFormat.PDF: PdfExporter(fetcher=fetcher),
            ExportFormat.WORD: DocxExporter(fetcher=fetcher),
            ExportFormat.IMAGE: ImageExporter(fetcher=fetcher),
        }

    @property
    def formats(self) -> list[ExportFormat]:
        return list(self._registry)

    def get(self, format: ExportFormat | str) -> DocumentExporter:
        try:
            return self._registry[ExportFormat(format)]
        except (KeyError, ValueError):
            raise ValueError(f"Unsupported export format: {format}") from None

    def export(self, format: ExportFormat | str, content: str | None, title_hint: str = "") -> ExportResult | None:
        """Export ``content`` as ``format``.

        Returns ``None`` without doing any work when there is no report content.
        Raises :class:`ExportFailure` if the artifact cannot be produced.
        """
        exporter = self.get(format)
        try:
            require_content(content)
        except PrerequisiteMissing as exc:
            logger.info("Skipping %s export: %s", exporter.format.value, exc)
            return None
        request = ExportRequest(
            format=exporter.format,
            filename_stem=filename_stem(self._clock()),
            title_hint=title_hint or "Research Report",
        )
        try:
            result = exporter.export(content, request)
        except Exception as exc:
            logger.error("Export to %s failed: %s", exporter.format.value, exc, exc_info=True)
            raise ExportFailure(exporter.format.value, str(exc) or type(exc).__name__) from exc
        logger.info("Exported %s (%d bytes)", result.filename, len(result.content))
        return result
