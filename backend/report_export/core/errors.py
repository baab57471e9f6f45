"""Error taxonomy for the export engine.

Only :class:`ExportFailure` ever reaches the caller of an export. Block level
problems are raised as :class:`BlockRenderDegraded` inside a backend, caught at
the block boundary and replaced by placeholder output.
"""

from __future__ import annotations


class ExportError(Exception):
    """Base class for export errors."""


class ExportFailure(ExportError):
    """Packing the final artifact failed; no file is produced."""

    def __init__(self, format: str, reason: str) -> None:
        super().__init__(f"{format} export failed: {reason}")
        self.format = format
        self.reason = reason


class BlockRenderDegraded(ExportError):
    """A single block could not be rendered faithfully."""

    def __init__(self, reason: str, *, block_index: int | None = None, kind: str | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.block_index = block_index
        self.kind = kind


class ImageUnavailable(BlockRenderDegraded):
    """An image reference could not be fetched or decoded."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"image {url!r} unavailable: {reason}", kind="image")
        self.url = url


class PrerequisiteMissing(ExportError):
    """There is no report content to export.

    Raised before any layout work; the coordinator turns it into a no-op.
    """
