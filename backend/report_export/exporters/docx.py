"""DOCX exporter."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field

from docx import Document as DocxDocument
from docx.document import Document as DocxDocumentType
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Emu, Mm, Pt
from docx.text.paragraph import Paragraph as DocxParagraph

from ..core.config import settings
from ..core.errors import ImageUnavailable
from ..markdown.blocks import Blank, Block, Heading, ImageRef, ListItem, Paragraph, Table, block_kind, classify
from ..markdown.inline import StyledRun, is_safe_link, parse_inline
from ..services.images import HttpImageFetcher, ImageFetcher
from .base import DocumentExporter, ExportFormat, ExportRequest, ExportResult

logger = logging.getLogger(__name__)

CODE_FONT = "Courier New"
LINK_COLOR = "0000FF"
IMAGE_MAX_HEIGHT = Mm(100)


def add_hyperlink(paragraph: DocxParagraph, run: StyledRun) -> None:
    """Append an external hyperlink carrying ``run``'s text and style."""
    r_id = paragraph.part.relate_to(run.link_url, RT.HYPERLINK, is_external=True)
    hyperlink = OxmlElement("w:hyperlink")
    hyperlink.set(qn("r:id"), r_id)
    new_run = OxmlElement("w:r")
    r_pr = OxmlElement("w:rPr")
    if run.bold:
        r_pr.append(OxmlElement("w:b"))
    if run.italic:
        r_pr.append(OxmlElement("w:i"))
    color = OxmlElement("w:color")
    color.set(qn("w:val"), LINK_COLOR)
    r_pr.append(color)
    underline = OxmlElement("w:u")
    underline.set(qn("w:val"), "single")
    r_pr.append(underline)
    new_run.append(r_pr)
    text = OxmlElement("w:t")
    text.set(qn("xml:space"), "preserve")
    text.text = run.text
    new_run.append(text)
    hyperlink.append(new_run)
    paragraph._p.append(hyperlink)


def add_runs(paragraph: DocxParagraph, runs: list[StyledRun]) -> None:
    for run in runs:
        if is_safe_link(run.link_url):
            add_hyperlink(paragraph, run)
            continue
        docx_run = paragraph.add_run(run.text)
        if run.bold:
            docx_run.bold = True
        if run.italic:
            docx_run.italic = True
        if run.code:
            docx_run.font.name = CODE_FONT


@dataclass
class DocxExporter(DocumentExporter):
    """Maps blocks onto Word paragraphs; Word itself handles pagination."""

    format: ExportFormat = ExportFormat.WORD
    fetcher: ImageFetcher = field(default_factory=HttpImageFetcher)

    def __post_init__(self) -> None:
        self._renderers = {
            Heading: self._render_heading,
            ListItem: self._render_list_item,
            Table: self._render_table,
            ImageRef: self._render_image,
            Paragraph: self._render_paragraph,
            Blank: self._render_blank,
        }

    def export(self, content: str, request: ExportRequest) -> ExportResult:
        doc = DocxDocument()
        doc.core_properties.title = request.title_hint
        doc.core_properties.comments = f"Exported by {settings.app_name}"
        for index, block in enumerate(classify(content)):
            self._render_block(doc, index, block)
        buffer = io.BytesIO()
        doc.save(buffer)
        return self._result(request, buffer.getvalue())

    def _render_block(self, doc: DocxDocumentType, index: int, block: Block) -> None:
        try:
            self._renderers[type(block)](doc, block)
        except Exception:
            logger.exception("Failed to render block %d (%s)", index, block_kind(block))

    def _render_heading(self, doc: DocxDocumentType, block: Heading) -> None:
        paragraph = doc.add_paragraph(style=f"Heading {block.level}")
        add_runs(paragraph, parse_inline(block.text))

    def _render_list_item(self, doc: DocxDocumentType, block: ListItem) -> None:
        paragraph = doc.add_paragraph(style="List Number" if block.ordered else "List Bullet")
        add_runs(paragraph, parse_inline(block.text))

    def _render_paragraph(self, doc: DocxDocumentType, block: Paragraph) -> None:
        paragraph = doc.add_paragraph()
        paragraph.paragraph_format.space_after = Pt(6)
        add_runs(paragraph, parse_inline(block.text))

    def _render_blank(self, doc: DocxDocumentType, block: Blank) -> None:
        doc.add_paragraph("")

    def _render_table(self, doc: DocxDocumentType, block: Table) -> None:
        if not block.rows:
            logger.warning("Skipping table without rows")
            return
        column_count = block.column_count
        table = doc.add_table(rows=len(block.rows), cols=column_count)
        table.style = "Table Grid"
        for row_index, row in enumerate(block.rows):
            cells = (list(row) + [""] * column_count)[:column_count]
            for column, raw in enumerate(cells):
                paragraph = table.cell(row_index, column).paragraphs[0]
                add_runs(paragraph, parse_inline(raw, bold=row_index == 0))

    def _render_image(self, doc: DocxDocumentType, block: ImageRef) -> None:
        try:
            fetched = self.fetcher.fetch(block.url)
        except ImageUnavailable as exc:
            logger.warning("Image degraded to placeholder: %s", exc.reason)
            placeholder = doc.add_paragraph()
            placeholder.add_run(f"[Image: {block.alt_text or block.url}]").italic = True
            return

        section = doc.sections[-1]
        width = section.page_width - section.left_margin - section.right_margin
        if width / fetched.aspect_ratio > IMAGE_MAX_HEIGHT:
            width = IMAGE_MAX_HEIGHT * fetched.aspect_ratio
        doc.add_picture(io.BytesIO(fetched.png_bytes()), width=Emu(int(width)))
        doc.paragraphs[-1].alignment = WD_ALIGN_PARAGRAPH.CENTER
        if block.alt_text:
            caption = doc.add_paragraph()
            caption.alignment = WD_ALIGN_PARAGRAPH.CENTER
            caption_run = caption.add_run(block.alt_text)
            caption_run.italic = True
            caption_run.font.size = Pt(9)
