"""Markdown block classification and inline span parsing."""

from .blocks import (
    BLOCK_TYPES,
    Blank,
    Block,
    Heading,
    ImageRef,
    ListItem,
    Paragraph,
    Table,
    classify,
    parse_table_rows,
)
from .inline import StyledRun, parse_inline, strip_inline

__all__ = [
    "BLOCK_TYPES",
    "Blank",
    "Block",
    "Heading",
    "ImageRef",
    "ListItem",
    "Paragraph",
    "StyledRun",
    "Table",
    "classify",
    "parse_inline",
    "parse_table_rows",
    "strip_inline",
]
