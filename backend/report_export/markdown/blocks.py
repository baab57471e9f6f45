"""Block classifier.

Partitions a markdown document into a flat sequence of blocks in a single
pass. Nothing nests: list items never contain headings, tables never contain
lists.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator, Union

Row = list[str]

_IMAGE_LINE = re.compile(r"^!\[(?P<alt>.*?)\]\((?P<url>.+?)\)$")
_ORDERED_ITEM = re.compile(r"^(?P<index>\d+)\.\s(?P<text>.*)$")
_TABLE_SEPARATOR = re.compile(r"^\|[\s\-:|]+\|$")
_HEADING_PREFIXES = (("### ", 3), ("## ", 2), ("# ", 1))
_BULLET_PREFIXES = ("- ", "* ")


@dataclass(frozen=True, slots=True)
class Heading:
    level: int
    text: str


@dataclass(frozen=True, slots=True)
class ListItem:
    text: str
    ordered: bool = False
    index: int | None = None


@dataclass(frozen=True, slots=True)
class Table:
    rows: list[Row] = field(default_factory=list)

    @property
    def column_count(self) -> int:
        return len(self.rows[0]) if self.rows else 0


@dataclass(frozen=True, slots=True)
class ImageRef:
    alt_text: str
    url: str


@dataclass(frozen=True, slots=True)
class Paragraph:
    text: str


@dataclass(frozen=True, slots=True)
class Blank:
    pass


Block = Union[Heading, ListItem, Table, ImageRef, Paragraph, Blank]
BLOCK_TYPES: tuple[type, ...] = (Heading, ListItem, Table, ImageRef, Paragraph, Blank)


def block_kind(block: Block) -> str:
    return type(block).__name__.lower()


def is_table_line(line: str) -> bool:
    return line.strip().startswith("|")


def parse_table_rows(lines: list[str]) -> list[Row]:
    """Parse pipe-delimited lines into rows, dropping the header separator."""
    rows: list[Row] = []
    for line in lines:
        stripped = line.strip()
        if not stripped.startswith("|"):
            continue
        if _TABLE_SEPARATOR.match(stripped):
            continue
        body = stripped[1:]
        if body.endswith("|"):
            body = body[:-1]
        cells = [cell.strip() for cell in body.split("|")]
        if cells:
            rows.append(cells)
    return rows


def classify_line(line: str) -> Block:
    """Classify a single non-table line."""
    image = _IMAGE_LINE.match(line.strip())
    if image:
        return ImageRef(alt_text=image.group("alt"), url=image.group("url").strip())
    for prefix, level in _HEADING_PREFIXES:
        if line.startswith(prefix):
            return Heading(level=level, text=line[len(prefix) :].strip())
    for prefix in _BULLET_PREFIXES:
        if line.startswith(prefix):
            return ListItem(text=line[len(prefix) :])
    ordered = _ORDERED_ITEM.match(line)
    if ordered:
        return ListItem(text=ordered.group("text"), ordered=True, index=int(ordered.group("index")))
    if line.strip():
        return Paragraph(text=line)
    return Blank()


def iter_blocks(document: str) -> Iterator[Block]:
    lines = document.splitlines()
    position = 0
    while position < len(lines):
        line = lines[position]
        if is_table_line(line):
            end = position
            while end < len(lines) and is_table_line(lines[end]):
                end += 1
            yield Table(rows=parse_table_rows(lines[position:end]))
            position = end
            continue
        yield classify_line(line)
        position += 1


def classify(document: str) -> list[Block]:
    """Return the blocks of ``document`` in source order."""
    return list(iter_blocks(document))
