"""Pydantic schemas."""

from .export import ExportPayload, FormatInfo

__all__ = ["ExportPayload", "FormatInfo"]
