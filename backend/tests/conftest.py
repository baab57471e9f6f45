from datetime import datetime
from io import BytesIO
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from report_export.app import create_app
from report_export.api.endpoints.exports import get_registry
from report_export.core.errors import ImageUnavailable
from report_export.exporters.registry import ExporterRegistry
from report_export.services.images import FetchedImage, decode_image

FIXED_NOW = datetime(2025, 3, 7, 9, 5, 3)


def fake_png_bytes(width: int = 64, height: int = 32, color=(255, 0, 0)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", (width, height), color=color).save(buf, format="PNG")
    return buf.getvalue()


def fixed_width(text: str, font_name: str, font_size: float) -> float:
    """Every character is half an em wide, whatever the font."""
    return len(text) * font_size * 0.5


class FakeFetcher:
    def __init__(self, images: dict[str, bytes] | None = None) -> None:
        self.images = images or {}
        self.requested: list[str] = []

    def fetch(self, url: str) -> FetchedImage:
        self.requested.append(url)
        if url not in self.images:
            raise ImageUnavailable(url, "unreachable")
        return decode_image(url, self.images[url])


@pytest.fixture()
def measure():
    return fixed_width


@pytest.fixture()
def fetcher() -> FakeFetcher:
    return FakeFetcher({"https://example.com/chart.png": fake_png_bytes(200, 100)})


@pytest.fixture()
def registry(fetcher: FakeFetcher) -> ExporterRegistry:
    return ExporterRegistry(fetcher=fetcher, clock=lambda: FIXED_NOW)


@pytest.fixture()
def client(registry: ExporterRegistry) -> Generator[TestClient, None, None]:
    app = create_app()
    app.dependency_overrides[get_registry] = lambda: registry
    with TestClient(app) as test_client:
        yield test_client
