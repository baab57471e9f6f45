"""Image fetching and decoding for embedded report images."""

from __future__ import annotations

import base64
import binascii
import io
import logging
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import unquote_to_bytes, urlparse

import httpx
from PIL import Image, UnidentifiedImageError

from ..core.config import settings
from ..core.errors import ImageUnavailable

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FetchedImage:
    data: bytes
    image: Image.Image

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def png_bytes(self) -> bytes:
        buffer = io.BytesIO()
        self.image.save(buffer, format="PNG")
        return buffer.getvalue()


class ImageFetcher(Protocol):
    def fetch(self, url: str) -> FetchedImage:
        ...


def decode_image(url: str, data: bytes) -> FetchedImage:
    """Decode ``data`` with Pillow, flattening transparency onto white."""
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise ImageUnavailable(url, f"cannot decode image: {exc}") from exc
    if image.width <= 0 or image.height <= 0:
        raise ImageUnavailable(url, "image has no area")
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        flattened = Image.new("RGB", rgba.size, (255, 255, 255))
        flattened.paste(rgba, mask=rgba.getchannel("A"))
        image = flattened
    elif image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    return FetchedImage(data=data, image=image)


def _decode_data_url(url: str) -> bytes:
    header, _, payload = url.partition(",")
    if not payload:
        raise ImageUnavailable(url[:64], "empty data URL")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ImageUnavailable(url[:64], "invalid base64 payload") from exc
    return unquote_to_bytes(payload)


class HttpImageFetcher:
    """Fetches images over HTTP(S) and decodes inline ``data:`` URLs."""

    def __init__(
        self,
        timeout: float | None = None,
        max_bytes: int | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.timeout = timeout if timeout is not None else settings.image_fetch_timeout_seconds
        self.max_bytes = max_bytes if max_bytes is not None else settings.image_max_bytes
        self._transport = transport

    def fetch(self, url: str) -> FetchedImage:
        scheme = urlparse(url).scheme.lower()
        if scheme == "data":
            data = _decode_data_url(url)
        elif scheme in ("http", "https"):
            data = self._download(url)
        else:
            raise ImageUnavailable(url, f"unsupported scheme {scheme or '(none)'!r}")
        if len(data) > self.max_bytes:
            raise ImageUnavailable(url, f"image exceeds {self.max_bytes} bytes")
        return decode_image(url, data)

    def _download(self, url: str) -> bytes:
        logger.debug("Fetching image %s", url)
        try:
            with httpx.Client(timeout=self.timeout, follow_redirects=True, transport=self._transport) as client:
                response = client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ImageUnavailable(url, str(exc) or type(exc).__name__) from exc
        return response.content
