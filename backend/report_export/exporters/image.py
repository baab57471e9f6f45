"""PNG exporter.

The sanitized HTML rendering is laid out by PyMuPDF on fixed-width in-memory
pages, each page is rasterized and the strips are stacked into one image.
Report images are fetched up front and served to the layout from an archive.
"""

from __future__ import annotations

import io
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator

import pymupdf as fitz
from PIL import Image

from ..core.config import settings
from ..core.errors import ImageUnavailable
from ..rendering.html import FRAGMENT_CSS, render_fragment
from ..services.images import HttpImageFetcher, ImageFetcher
from .base import DocumentExporter, ExportFormat, ExportRequest, ExportResult

logger = logging.getLogger(__name__)

SURFACE_PAGE_HEIGHT = 1200
MAX_SURFACE_PAGES = 500
CONTAINER_CSS = "body { font-family: sans-serif; line-height: 1.6; background-color: #ffffff; color: #000000; }"


class EmbeddedImages:
    """Fetches report images once each and stores them in a layout archive."""

    def __init__(self, fetcher: ImageFetcher) -> None:
        self.fetcher = fetcher
        self.archive = fitz.Archive()
        self._names: dict[str, str | None] = {}

    def __call__(self, url: str) -> str | None:
        if url not in self._names:
            self._names[url] = self._embed(url)
        return self._names[url]

    def _embed(self, url: str) -> str | None:
        try:
            fetched = self.fetcher.fetch(url)
        except ImageUnavailable as exc:
            logger.warning("Image left out of raster export: %s", exc.reason)
            return None
        name = f"image-{len(self._names)}.png"
        self.archive.add(fetched.png_bytes(), name)
        return name


@dataclass(slots=True)
class OffscreenSurface:
    document: fitz.Document
    content_bottoms: list[float]
    padding: float


@contextmanager
def offscreen_surface(
    markup: str,
    width: float,
    padding: float,
    archive: fitz.Archive | None = None,
) -> Iterator[OffscreenSurface]:
    """Lay ``markup`` out on in-memory pages; the pages are released on every exit path."""
    buffer = io.BytesIO()
    mediabox = fitz.Rect(0, 0, width + 2 * padding, SURFACE_PAGE_HEIGHT)
    where = mediabox + (padding, padding, -padding, -padding)
    story = fitz.Story(html=markup, user_css=f"{CONTAINER_CSS} {FRAGMENT_CSS}", archive=archive)
    bottoms: list[float] = []
    writer = fitz.DocumentWriter(buffer)
    try:
        more = True
        while more:
            if len(bottoms) >= MAX_SURFACE_PAGES:
                raise RuntimeError(f"report does not fit in {MAX_SURFACE_PAGES} raster pages")
            device = writer.begin_page(mediabox)
            more, filled = story.place(where)
            story.draw(device)
            writer.end_page()
            # place() reports the filled area as a plain (x0, y0, x1, y1) tuple.
            bottoms.append(max(fitz.Rect(filled).y1, padding))
    finally:
        try:
            writer.close()
        except Exception as exc:
            logger.warning("Failed to close offscreen writer: %s", exc)

    document = fitz.open(stream=buffer.getvalue(), filetype="pdf")
    try:
        yield OffscreenSurface(document=document, content_bottoms=bottoms, padding=padding)
    finally:
        try:
            document.close()
        except Exception as exc:
            logger.warning("Failed to release offscreen surface: %s", exc)


def rasterize(surface: OffscreenSurface, scale: float) -> Image.Image:
    matrix = fitz.Matrix(scale, scale)
    last = len(surface.content_bottoms) - 1
    strips: list[Image.Image] = []
    for number, page in enumerate(surface.document):
        pixmap = page.get_pixmap(matrix=matrix, alpha=False)
        strip = Image.frombytes("RGB", (pixmap.width, pixmap.height), pixmap.samples)
        top = 0 if number == 0 else surface.padding
        bottom = surface.content_bottoms[number] + (surface.padding if number == last else 0)
        box = (0, round(top * scale), pixmap.width, min(round(bottom * scale), pixmap.height))
        strips.append(strip.crop(box))

    canvas = Image.new("RGB", (strips[0].width, sum(strip.height for strip in strips)), (255, 255, 255))
    offset = 0
    for strip in strips:
        canvas.paste(strip, (0, offset))
        offset += strip.height
    return canvas


@dataclass
class ImageExporter(DocumentExporter):
    format: ExportFormat = ExportFormat.IMAGE
    fetcher: ImageFetcher = field(default_factory=HttpImageFetcher)
    width_px: int = field(default_factory=lambda: settings.raster_width_px)
    padding_px: int = field(default_factory=lambda: settings.raster_padding_px)
    scale: float = field(default_factory=lambda: settings.raster_scale)

    def export(self, content: str, request: ExportRequest) -> ExportResult:
        images = EmbeddedImages(self.fetcher)
        markup = render_fragment(content, image_src=images)
        with offscreen_surface(markup, self.width_px, self.padding_px, archive=images.archive) as surface:
            image = rasterize(surface, self.scale)
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return self._result(request, buffer.getvalue())
