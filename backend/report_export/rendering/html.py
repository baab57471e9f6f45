"""Markdown to sanitized HTML.

Every piece of HTML derived from report markdown goes through
:func:`sanitize_html` before it is embedded in a page or rasterized.
"""

from __future__ import annotations

import html
from typing import Callable

import nh3
from markdown_it import MarkdownIt
from markdown_it.token import Token

ALLOWED_TAGS = {
    "a", "b", "blockquote", "br", "code", "del", "em", "h1", "h2", "h3", "h4",
    "h5", "h6", "hr", "i", "img", "li", "ol", "p", "pre", "s", "strong",
    "table", "tbody", "td", "th", "thead", "tr", "ul",
}
ALLOWED_ATTRIBUTES = {
    "a": {"href", "title"},
    "img": {"src", "alt", "title"},
    "ol": {"start"},
}
URL_SCHEMES = {"http", "https", "mailto"}

DOCUMENT_CSS = """\
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 800px; margin: 0 auto; padding: 20px; line-height: 1.6; }
    h1, h2, h3 { color: #333; }
    code { background: #f4f4f4; padding: 2px 6px; border-radius: 4px; }
    pre { background: #f4f4f4; padding: 16px; border-radius: 8px; overflow-x: auto; }
    blockquote { border-left: 4px solid #ddd; margin: 0; padding-left: 16px; color: #666; }
    table { border-collapse: collapse; width: 100%; }
    th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
    th { background: #f4f4f4; }"""

FRAGMENT_CSS = (
    "* { color: #000000; } h1,h2,h3,h4,h5,h6 { color: #333333; } a { color: #0066cc; } "
    "code { background-color: #f5f5f5; padding: 2px 4px; } pre { background-color: #f5f5f5; padding: 12px; } "
    "table { border-collapse: collapse; } th, td { border: 1px solid #dddddd; padding: 4px; }"
)

_DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
  <style>
{css}
  </style>
</head>
<body>
{body}
</body>
</html>"""

_markdown = MarkdownIt("commonmark", {"html": False}).enable("table").enable("strikethrough")

# Maps an image URL to the src to embed; None drops the image for its placeholder.
ImageSource = Callable[[str], str | None]


def render_markdown(text: str, image_src: ImageSource | None = None) -> str:
    """Render markdown to (unsanitized) HTML."""
    tokens = _markdown.parse(text)
    if image_src is not None:
        _rewrite_images(tokens, image_src)
    return _markdown.renderer.render(tokens, _markdown.options, {})


def _rewrite_images(tokens: list[Token], image_src: ImageSource) -> None:
    for token in tokens:
        if token.type != "inline" or not token.children:
            continue
        for position, child in enumerate(token.children):
            if child.type != "image":
                continue
            url = str(child.attrGet("src") or "")
            src = image_src(url)
            if src is None:
                label = child.content or url
                token.children[position] = Token("text", "", 0, content=f"[Image: {label}]")
            else:
                child.attrSet("src", src)


def sanitize_html(markup: str) -> str:
    return nh3.clean(
        markup,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        url_schemes=URL_SCHEMES,
        link_rel="noopener noreferrer",
    )


def render_fragment(text: str, image_src: ImageSource | None = None) -> str:
    """Sanitized HTML body for ``text`` without any page chrome."""
    return sanitize_html(render_markdown(text, image_src))


def render_document(text: str, title: str = "Research Report") -> str:
    """Full standalone HTML page for ``text``."""
    return _DOCUMENT_TEMPLATE.format(
        title=html.escape(title or "Research Report"),
        css=DOCUMENT_CSS,
        body=render_fragment(text),
    )
