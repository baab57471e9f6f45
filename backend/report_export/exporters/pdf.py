"""PDF exporter using ReportLab.

Blocks are laid out top to bottom on A4 pages. Every block predicts its height
before drawing and a page break is taken up front when it would not fit, so
nothing is ever drawn past the bottom margin and then moved. Failures inside a
single block are logged and the export carries on with the next one.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import Callable

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ..core.config import settings
from ..core.errors import BlockRenderDegraded, ImageUnavailable
from ..layout.metrics import FontSet, ReportLabMeasurer, TextMeasurer
from ..layout.table import RowLayout, TableStyle, layout_table, split_row
from ..layout.wrap import WrappedLine, wrap_runs, wrap_text
from ..markdown.blocks import Blank, Block, Heading, ImageRef, ListItem, Paragraph, Table, block_kind, classify
from ..markdown.inline import is_safe_link, parse_inline
from ..services.images import HttpImageFetcher, ImageFetcher
from .base import DocumentExporter, ExportFormat, ExportRequest, ExportResult

logger = logging.getLogger(__name__)

MARGIN = 20 * mm


@dataclass(frozen=True, slots=True)
class TextStyle:
    font_size: float
    line_height: float
    spacing: float


HEADING_STYLES = {
    1: TextStyle(font_size=20, line_height=9 * mm, spacing=6 * mm),
    2: TextStyle(font_size=16, line_height=7 * mm, spacing=5 * mm),
    3: TextStyle(font_size=14, line_height=6 * mm, spacing=4 * mm),
}
BODY_STYLE = TextStyle(font_size=11, line_height=11 * 0.45 * mm, spacing=2 * mm)
CAPTION_STYLE = TextStyle(font_size=9, line_height=4 * mm, spacing=5 * mm)
PLACEHOLDER_STYLE = TextStyle(font_size=10, line_height=5 * mm, spacing=5 * mm)
TABLE_STYLE = TableStyle()

LIST_INDENT = 2 * mm
BULLET = "•"
BULLET_GAP = 5 * mm
NUMBER_GAP = 2 * mm
BLANK_HEIGHT = 4 * mm
IMAGE_MAX_HEIGHT = 100 * mm
IMAGE_SPACING = 5 * mm
TABLE_SPACING = 5 * mm

BLACK = (0, 0, 0)
LINK_BLUE = (0, 0, 1)
HEADER_FILL = (240 / 255, 240 / 255, 240 / 255)
GRID_STROKE = (200 / 255, 200 / 255, 200 / 255)


@dataclass(slots=True)
class LayoutCursor:
    """Current page and the distance of the next baseline from the page top."""

    page_index: int = 0
    y: float = MARGIN


@dataclass(frozen=True, slots=True)
class BlockPlacement:
    index: int
    kind: str
    page_index: int
    top: float


@dataclass(slots=True)
class PdfRender:
    content: bytes
    page_count: int
    placements: list[BlockPlacement] = field(default_factory=list)
    degraded: list[int] = field(default_factory=list)


class PageFlow:
    """Canvas plus cursor for a single export; never shared between exports."""

    def __init__(self, pdf: canvas.Canvas, page_size: tuple[float, float] = A4, margin: float = MARGIN) -> None:
        self.pdf = pdf
        self.page_width, self.page_height = page_size
        self.margin = margin
        self.cursor = LayoutCursor(y=margin)

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def content_height(self) -> float:
        return self.bottom - self.margin

    @property
    def bottom(self) -> float:
        return self.page_height - self.margin

    @property
    def at_top(self) -> bool:
        return self.cursor.y <= self.margin

    @property
    def overflowing(self) -> bool:
        return self.cursor.y > self.bottom

    @property
    def page_count(self) -> int:
        return self.cursor.page_index + 1

    def fits(self, height: float) -> bool:
        return self.cursor.y + height <= self.bottom

    def ensure_space(self, height: float) -> None:
        """Break the page now if ``height`` would not fit below the cursor."""
        if not self.fits(height) and not self.at_top:
            self.new_page()

    def new_page(self) -> None:
        self.pdf.showPage()
        self.cursor.page_index += 1
        self.cursor.y = self.margin

    def advance(self, height: float) -> None:
        self.cursor.y += height

    def to_pdf_y(self, y: float) -> float:
        return self.page_height - y


class _PdfRenderer:
    def __init__(self, flow: PageFlow, fonts: FontSet, measure: TextMeasurer, fetcher: ImageFetcher) -> None:
        self.flow = flow
        self.pdf = flow.pdf
        self.fonts = fonts
        self.measure = measure
        self.fetcher = fetcher
        self.placements: list[BlockPlacement] = []
        self.degraded: list[int] = []
        self._index = 0
        self._renderers: dict[type, Callable] = {
            Heading: self._draw_heading,
            ListItem: self._draw_list_item,
            Table: self._draw_table,
            ImageRef: self._draw_image,
            Paragraph: self._draw_paragraph,
            Blank: self._draw_blank,
        }

    def run(self, blocks: list[Block]) -> None:
        for index, block in enumerate(blocks):
            self._index = index
            if self.flow.overflowing:
                self.flow.new_page()
            try:
                self._renderers[type(block)](block)
            except BlockRenderDegraded as exc:
                logger.warning("Block %d (%s) degraded: %s", index, block_kind(block), exc.reason)
                self.degraded.append(index)
            except Exception:
                logger.exception("Failed to render block %d (%s)", index, block_kind(block))
                self.degraded.append(index)

    # ------------------------------------------------------------------ helpers
    def _begin(self, block: Block, height: float) -> None:
        self.flow.ensure_space(height)
        cursor = self.flow.cursor
        self.placements.append(BlockPlacement(self._index, block_kind(block), cursor.page_index, cursor.y))

    def _flow_lines(
        self,
        block: Block,
        lines: list[WrappedLine],
        x: float,
        style: TextStyle,
        marker: tuple[str, float] | None = None,
    ) -> None:
        line_count = max(len(lines), 1)
        height = line_count * style.line_height
        # A block taller than a whole page is flowed line by line instead.
        self._begin(block, height if height <= self.flow.content_height else style.line_height)
        if marker:
            text, marker_x = marker
            self.pdf.setFont(self.fonts.regular, style.font_size)
            self.pdf.setFillColorRGB(*BLACK)
            self.pdf.drawString(marker_x, self.flow.to_pdf_y(self.flow.cursor.y), text)
        if not lines:
            self.flow.advance(style.line_height)
            return
        for number, line in enumerate(lines):
            if number:
                self.flow.ensure_space(style.line_height)
            self._draw_line(line, x, style.font_size)
            self.flow.advance(style.line_height)

    def _draw_line(self, line: WrappedLine, x: float, font_size: float) -> None:
        baseline = self.flow.to_pdf_y(self.flow.cursor.y)
        space = self.measure(" ", self.fonts.regular, font_size)
        offset = x
        for number, word in enumerate(line.words):
            if number:
                offset += space
            for piece in word:
                font = self.fonts.for_run(piece)
                width = self.measure(piece.text, font, font_size)
                link = piece.link_url if is_safe_link(piece.link_url) else None
                self.pdf.setFont(font, font_size)
                self.pdf.setFillColorRGB(*(LINK_BLUE if link else BLACK))
                self.pdf.drawString(offset, baseline, piece.text)
                if link:
                    self.pdf.setStrokeColorRGB(*LINK_BLUE)
                    self.pdf.line(offset, baseline - 1, offset + width, baseline - 1)
                    self.pdf.linkURL(
                        link,
                        (offset, baseline - 0.25 * font_size, offset + width, baseline + 0.8 * font_size),
                        relative=0,
                        thickness=0,
                    )
                offset += width
        self.pdf.setFillColorRGB(*BLACK)

    def _draw_plain_lines(self, lines: list[str], font: str, style: TextStyle) -> None:
        self.pdf.setFont(font, style.font_size)
        self.pdf.setFillColorRGB(*BLACK)
        for line in lines:
            self.pdf.drawString(self.flow.margin, self.flow.to_pdf_y(self.flow.cursor.y), line)
            self.flow.advance(style.line_height)

    # ------------------------------------------------------------------ blocks
    def _draw_heading(self, block: Heading) -> None:
        style = HEADING_STYLES[block.level]
        runs = parse_inline(block.text, bold=True)
        lines = wrap_runs(runs, self.flow.content_width, style.font_size, self.fonts, self.measure)
        self._flow_lines(block, lines, self.flow.margin, style)
        self.flow.advance(style.spacing)

    def _draw_paragraph(self, block: Paragraph) -> None:
        lines = wrap_runs(parse_inline(block.text), self.flow.content_width, BODY_STYLE.font_size, self.fonts, self.measure)
        self._flow_lines(block, lines, self.flow.margin, BODY_STYLE)
        self.flow.advance(BODY_STYLE.spacing)

    def _draw_list_item(self, block: ListItem) -> None:
        marker_x = self.flow.margin + LIST_INDENT
        if block.ordered:
            marker = f"{block.index}."
            marker_width = self.measure(marker, self.fonts.regular, BODY_STYLE.font_size) + NUMBER_GAP
        else:
            marker = BULLET
            marker_width = BULLET_GAP
        text_x = marker_x + marker_width
        max_width = self.flow.content_width - LIST_INDENT - marker_width
        lines = wrap_runs(parse_inline(block.text), max_width, BODY_STYLE.font_size, self.fonts, self.measure)
        self._flow_lines(block, lines, text_x, BODY_STYLE, marker=(marker, marker_x))
        self.flow.advance(BODY_STYLE.spacing)

    def _draw_blank(self, block: Blank) -> None:
        self._begin(block, 0)
        self.flow.advance(BLANK_HEIGHT)

    def _draw_table(self, block: Table) -> None:
        layout = layout_table(block, self.flow.content_width, self.measure, self.fonts, TABLE_STYLE)
        if layout.empty:
            raise BlockRenderDegraded("table has no rows, skipped", block_index=self._index, kind="table")
        # Tables are kept on one page; only one taller than a page breaks between rows,
        # and a single row taller than a page is cut between its lines.
        self._begin(block, layout.height)
        for row in layout.rows:
            for part in split_row(row, self.flow.content_height, TABLE_STYLE):
                self._draw_table_row(part, layout.column_width)
        self.flow.advance(TABLE_SPACING)

    def _draw_table_row(self, row: RowLayout, column_width: float) -> None:
        self.flow.ensure_space(row.height)
        top = self.flow.cursor.y
        bottom_pdf_y = self.flow.to_pdf_y(top + row.height)
        if row.header:
            self.pdf.setFillColorRGB(*HEADER_FILL)
            self.pdf.rect(self.flow.margin, bottom_pdf_y, self.flow.content_width, row.height, stroke=0, fill=1)
        self.pdf.setStrokeColorRGB(*GRID_STROKE)
        self.pdf.setFillColorRGB(*BLACK)
        for column, cell in enumerate(row.cells):
            cell_x = self.flow.margin + column * column_width
            self.pdf.rect(cell_x, bottom_pdf_y, column_width, row.height, stroke=1, fill=0)
            self.pdf.setFont(self.fonts.pick(bold=cell.bold), TABLE_STYLE.font_size)
            text_y = top + TABLE_STYLE.cell_padding + TABLE_STYLE.baseline_offset
            for line in cell.lines:
                self.pdf.drawString(cell_x + TABLE_STYLE.cell_padding, self.flow.to_pdf_y(text_y), line)
                text_y += TABLE_STYLE.line_height
        self.flow.advance(row.height)

    def _draw_image(self, block: ImageRef) -> None:
        try:
            fetched = self.fetcher.fetch(block.url)
        except ImageUnavailable as exc:
            logger.warning("Image block %d degraded: %s", self._index, exc.reason)
            self.degraded.append(self._index)
            self._draw_placeholder(block)
            return

        width = self.flow.content_width
        height = width / fetched.aspect_ratio
        if height > IMAGE_MAX_HEIGHT:
            height = IMAGE_MAX_HEIGHT
            width = height * fetched.aspect_ratio
        caption = (
            wrap_text(block.alt_text, self.flow.content_width, self.fonts.italic, CAPTION_STYLE.font_size, self.measure)
            if block.alt_text
            else []
        )
        total = height + IMAGE_SPACING
        if caption:
            total += len(caption) * CAPTION_STYLE.line_height + CAPTION_STYLE.spacing
        self._begin(block, total)

        x = self.flow.margin + (self.flow.content_width - width) / 2
        top = self.flow.cursor.y
        self.pdf.drawImage(ImageReader(fetched.image), x, self.flow.to_pdf_y(top + height), width, height)
        self.flow.advance(height + IMAGE_SPACING)
        if caption:
            self._draw_plain_lines(caption, self.fonts.italic, CAPTION_STYLE)
            self.flow.advance(CAPTION_STYLE.spacing)

    def _draw_placeholder(self, block: ImageRef) -> None:
        text = f"[Image: {block.alt_text or block.url}]"
        lines = wrap_text(text, self.flow.content_width, self.fonts.italic, PLACEHOLDER_STYLE.font_size, self.measure)
        self._begin(block, len(lines) * PLACEHOLDER_STYLE.line_height)
        self._draw_plain_lines(lines, self.fonts.italic, PLACEHOLDER_STYLE)
        self.flow.advance(PLACEHOLDER_STYLE.spacing)


@dataclass
class PdfExporter(DocumentExporter):
    format: ExportFormat = ExportFormat.PDF
    fetcher: ImageFetcher = field(default_factory=HttpImageFetcher)
    measure: TextMeasurer = field(default_factory=ReportLabMeasurer)
    fonts: FontSet | None = None

    def export(self, content: str, request: ExportRequest) -> ExportResult:
        return self._result(request, self.render(content, title=request.title_hint).content)

    def render(self, content: str, title: str = "Research Report") -> PdfRender:
        fonts = self.fonts or self._default_fonts()
        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=A4, invariant=1)
        pdf.setTitle(title)
        pdf.setCreator(settings.app_name)
        flow = PageFlow(pdf)
        renderer = _PdfRenderer(flow, fonts, self.measure, self.fetcher)
        renderer.run(classify(content))
        pdf.showPage()
        pdf.save()
        return PdfRender(
            content=buffer.getvalue(),
            page_count=flow.page_count,
            placements=renderer.placements,
            degraded=renderer.degraded,
        )

    @staticmethod
    def _default_fonts() -> FontSet:
        if settings.pdf_font_path:
            return FontSet.from_ttf(settings.pdf_font_path)
        return FontSet()
