from io import BytesIO

from docx import Document as DocxDocument

from conftest import FakeFetcher, fake_png_bytes
from report_export.exporters.base import ExportFormat, ExportRequest
from report_export.exporters.docx import DocxExporter

REQUEST = ExportRequest(format=ExportFormat.WORD, filename_stem="research-report-t", title_hint="Market scan")


def _export(content: str, fetcher: FakeFetcher | None = None):
    result = DocxExporter(fetcher=fetcher or FakeFetcher()).export(content, REQUEST)
    return result, DocxDocument(BytesIO(result.content))


def test_artifact_metadata() -> None:
    result, doc = _export("Body")
    assert result.filename == "research-report-t.docx"
    assert result.media_type == "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    assert doc.core_properties.title == "Market scan"


def test_blocks_map_to_paragraph_styles() -> None:
    _, doc = _export("# One\n## Two\n### Three\n- bullet\n1. numbered\nplain\n")
    styles = [(p.style.name, p.text) for p in doc.paragraphs]
    assert styles == [
        ("Heading 1", "One"),
        ("Heading 2", "Two"),
        ("Heading 3", "Three"),
        ("List Bullet", "bullet"),
        ("List Number", "numbered"),
        ("Normal", "plain"),
    ]


def test_inline_styles_become_run_attributes() -> None:
    _, doc = _export("a **b** *c* `d` **e *f***")
    runs = doc.paragraphs[0].runs
    by_text = {run.text: run for run in runs}
    assert by_text["b"].bold
    assert by_text["c"].italic
    assert by_text["d"].font.name == "Courier New"
    assert by_text["f"].bold and by_text["f"].italic


def test_links_become_hyperlinks() -> None:
    result, doc = _export("Read [the docs](https://example.com/docs) or [this](javascript:void(0))")
    paragraph = doc.paragraphs[0]
    hyperlinks = paragraph._p.xpath("./w:hyperlink")
    assert len(hyperlinks) == 1
    rels = [rel.target_ref for rel in doc.part.rels.values() if rel.is_external]
    assert rels == ["https://example.com/docs"]
    assert "this" in paragraph.text


def test_blank_lines_are_empty_paragraphs() -> None:
    _, doc = _export("a\n\nb")
    assert [p.text for p in doc.paragraphs] == ["a", "", "b"]


def test_table_rendered_with_bold_header() -> None:
    _, doc = _export("| Name | Score |\n|---|---|\n| Ada | 9 |\n| Bob |")
    (table,) = doc.tables
    assert len(table.rows) == 3
    assert len(table.columns) == 2
    assert table.cell(0, 0).text == "Name"
    assert table.cell(0, 0).paragraphs[0].runs[0].bold
    assert table.cell(2, 0).text == "Bob"
    assert table.cell(2, 1).text == ""


def test_image_embedded_with_caption() -> None:
    fetcher = FakeFetcher({"https://example.com/chart.png": fake_png_bytes(300, 150)})
    _, doc = _export("![Growth](https://example.com/chart.png)", fetcher)
    assert len(doc.inline_shapes) == 1
    assert doc.paragraphs[-1].text == "Growth"


def test_missing_image_becomes_placeholder() -> None:
    _, doc = _export("![Growth](https://unreachable.invalid/x.png)\nnext")
    texts = [p.text for p in doc.paragraphs]
    assert texts == ["[Image: Growth]", "next"]
