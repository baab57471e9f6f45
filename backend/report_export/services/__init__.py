"""Service layer modules."""

from .images import FetchedImage, HttpImageFetcher, ImageFetcher, decode_image

__all__ = ["FetchedImage", "HttpImageFetcher", "ImageFetcher", "decode_image"]
