from io import BytesIO

import pytest
from PIL import Image

from conftest import FakeFetcher, fake_png_bytes
from report_export.exporters import image as image_module
from report_export.exporters.base import ExportFormat, ExportRequest
from report_export.exporters.image import EmbeddedImages, ImageExporter

REQUEST = ExportRequest(format=ExportFormat.IMAGE, filename_stem="research-report-img")
CHART_URL = "https://example.com/chart.png"
RED = (255, 0, 0)


def _has_red(image: Image.Image) -> bool:
    colors = image.convert("RGB").getcolors(maxcolors=1 << 24)
    return any(r > 200 and g < 60 and b < 60 for _, (r, g, b) in colors)


def test_exports_png_at_double_scale() -> None:
    exporter = ImageExporter(width_px=800, padding_px=40, scale=2.0)
    result = exporter.export("# Title\n\nHello **world**.\n\n- one\n- two", REQUEST)
    assert result.filename == "research-report-img.png"
    assert result.media_type == "image/png"
    assert result.content.startswith(b"\x89PNG")
    image = Image.open(BytesIO(result.content))
    assert image.width == 1760
    assert image.height > 0


def test_long_report_is_stitched_into_one_tall_image() -> None:
    exporter = ImageExporter(width_px=400, padding_px=20, scale=1.0)
    short = Image.open(BytesIO(exporter.export("just one line", REQUEST).content))
    long = Image.open(BytesIO(exporter.export("\n\n".join(f"Paragraph {i}" for i in range(150)), REQUEST).content))
    assert long.width == short.width == 440
    assert long.height > image_module.SURFACE_PAGE_HEIGHT


def test_offscreen_surface_released_when_rasterizing_fails() -> None:
    with pytest.raises(RuntimeError):
        with image_module.offscreen_surface("<p>hi</p>", 200, 10) as surface:
            document = surface.document
            raise RuntimeError("rasterizer crashed")
    assert document.is_closed


def test_offscreen_surface_closes_document() -> None:
    with image_module.offscreen_surface("<p>hi</p>", 200, 10) as surface:
        document = surface.document
        assert document.page_count == 1
    assert document.is_closed


def test_surface_records_content_bottom_per_page() -> None:
    with image_module.offscreen_surface("<p>hi</p>", 200, 10) as surface:
        (bottom,) = surface.content_bottoms
    assert 10 < bottom < image_module.SURFACE_PAGE_HEIGHT


def test_report_images_are_drawn_into_the_png() -> None:
    fetcher = FakeFetcher({CHART_URL: fake_png_bytes(200, 100, color=RED)})
    exporter = ImageExporter(fetcher=fetcher, width_px=400, padding_px=20, scale=1.0)
    result = exporter.export(f"# T\n\n![chart]({CHART_URL})\n\nafter", REQUEST)
    assert fetcher.requested == [CHART_URL]
    assert _has_red(Image.open(BytesIO(result.content)))


def test_unreachable_image_leaves_alt_text_in_place() -> None:
    fetcher = FakeFetcher()
    exporter = ImageExporter(fetcher=fetcher, width_px=400, padding_px=20, scale=1.0)
    result = exporter.export(f"![chart]({CHART_URL})", REQUEST)
    assert fetcher.requested == [CHART_URL]
    assert not _has_red(Image.open(BytesIO(result.content)))


def test_embedded_images_fetch_each_url_once() -> None:
    fetcher = FakeFetcher({CHART_URL: fake_png_bytes()})
    images = EmbeddedImages(fetcher)
    assert images(CHART_URL) == images(CHART_URL) == "image-0.png"
    assert images("https://example.com/missing.png") is None
    assert images("https://example.com/missing.png") is None
    assert fetcher.requested == [CHART_URL, "https://example.com/missing.png"]
