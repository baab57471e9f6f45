"""HTML rendering helpers."""

from .html import render_document, render_fragment, render_markdown, sanitize_html

__all__ = ["render_document", "render_fragment", "render_markdown", "sanitize_html"]
