"""Table layout engine.

Columns share the content width equally. Each cell is reduced to plain text,
wrapped to its column and the tallest cell sets the row height. The resulting
layout is used both to decide page breaks and to draw, so the two can never
disagree.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from reportlab.lib.units import mm

from ..markdown.blocks import Table
from ..markdown.inline import parse_inline
from .metrics import FontSet, TextMeasurer
from .wrap import wrap_text


@dataclass(frozen=True, slots=True)
class TableStyle:
    font_size: float = 9
    line_height: float = 5 * mm
    cell_padding: float = 2 * mm
    vertical_padding: float = 4 * mm
    baseline_offset: float = 3 * mm


@dataclass(slots=True)
class CellLayout:
    lines: list[str]
    bold: bool = False


@dataclass(slots=True)
class RowLayout:
    cells: list[CellLayout]
    height: float
    header: bool = False


@dataclass(slots=True)
class TableLayout:
    column_count: int
    column_width: float
    rows: list[RowLayout] = field(default_factory=list)

    @property
    def height(self) -> float:
        return sum(row.height for row in self.rows)

    @property
    def empty(self) -> bool:
        return not self.rows


def _cell_text(raw: str) -> tuple[str, bool]:
    runs = parse_inline(raw)
    text = "".join(run.text for run in runs)
    all_bold = bool(runs) and all(run.bold for run in runs)
    return text, all_bold


def layout_table(
    table: Table,
    content_width: float,
    measure: TextMeasurer,
    fonts: FontSet | None = None,
    style: TableStyle | None = None,
) -> TableLayout:
    """Compute wrapped cell lines and row heights for ``table``.

    The column count comes from the first row. Shorter rows are padded with
    empty cells and longer rows are cut to the column count.
    """
    fonts = fonts or FontSet()
    style = style or TableStyle()
    if not table.rows:
        return TableLayout(column_count=0, column_width=0.0)

    column_count = max(table.column_count, 1)
    column_width = content_width / column_count
    text_width = max(column_width - 2 * style.cell_padding, 1.0)
    layout = TableLayout(column_count=column_count, column_width=column_width)

    for row_index, row in enumerate(table.rows):
        header = row_index == 0
        cells: list[CellLayout] = []
        for raw in (list(row) + [""] * column_count)[:column_count]:
            text, all_bold = _cell_text(raw)
            bold = header or all_bold
            font = fonts.pick(bold=bold)
            lines = wrap_text(text, text_width, font, style.font_size, measure) if text else [""]
            cells.append(CellLayout(lines=lines, bold=bold))
        max_lines = max(len(cell.lines) for cell in cells)
        height = max_lines * style.line_height + style.vertical_padding
        layout.rows.append(RowLayout(cells=cells, height=height, header=header))
    return layout


def split_row(row: RowLayout, max_height: float, style: TableStyle | None = None) -> list[RowLayout]:
    """Cut a row taller than ``max_height`` into slices of whole lines.

    Each slice keeps the row's columns and fits within ``max_height``; a row
    that already fits is returned as is.
    """
    style = style or TableStyle()
    if row.height <= max_height:
        return [row]
    per_slice = max(int((max_height - style.vertical_padding) // style.line_height), 1)
    line_count = max(len(cell.lines) for cell in row.cells)
    slices: list[RowLayout] = []
    for start in range(0, line_count, per_slice):
        cells = [CellLayout(lines=cell.lines[start : start + per_slice], bold=cell.bold) for cell in row.cells]
        height = max(len(cell.lines) for cell in cells) * style.line_height + style.vertical_padding
        slices.append(RowLayout(cells=cells, height=height, header=row.header))
    return slices
