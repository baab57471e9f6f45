"""Document exporters for various formats."""

from .base import DocumentExporter, ExportFormat, ExportRequest, ExportResult
from .registry import ExporterRegistry, filename_stem

__all__ = [
    "DocumentExporter",
    "ExportFormat",
    "ExportRequest",
    "ExportResult",
    "ExporterRegistry",
    "filename_stem",
]
