"""Text metrics, wrapping and table layout."""

from .metrics import FontSet, ReportLabMeasurer, TextMeasurer
from .table import TableLayout, TableStyle, layout_table, split_row
from .wrap import WrappedLine, wrap_runs, wrap_text

__all__ = [
    "FontSet",
    "ReportLabMeasurer",
    "TableLayout",
    "TableStyle",
    "TextMeasurer",
    "WrappedLine",
    "layout_table",
    "split_row",
    "wrap_runs",
    "wrap_text",
]
