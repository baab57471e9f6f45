"""Inline span parser.

Turns one line (or table cell) of markdown into styled runs. Recognised
markers, in priority order when two start at the same offset: ``**bold**``,
``[text](url)``, ``*italic*`` and ```code```. A bold span may carry italic and
link children; deeper nesting is not resolved. Unterminated markers are kept as
literal text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from urllib.parse import urlparse

# One level of balanced parentheses is allowed inside a link target.
_LINK = r"\[(?P<link_text>[^\]]*)\]\((?P<link_url>(?:[^()\s]|\([^()\s]*\))*)\)"
_ITALIC = r"\*(?P<italic>[^*]+?)\*"

_INLINE_PATTERN = re.compile(
    r"\*\*(?P<bold>.+?)\*\*(?!\*)"
    rf"|{_LINK}"
    rf"|{_ITALIC}"
    r"|`(?P<code>[^`]+)`"
)
_INSIDE_BOLD = re.compile(rf"{_LINK}|{_ITALIC}")

SAFE_LINK_SCHEMES = frozenset({"http", "https", "mailto"})


@dataclass(frozen=True, slots=True)
class StyledRun:
    text: str
    bold: bool = False
    italic: bool = False
    code: bool = False
    link_url: str | None = None

    @property
    def plain(self) -> bool:
        return not (self.bold or self.italic or self.code or self.link_url)


def parse_inline(text: str, *, bold: bool = False, italic: bool = False) -> list[StyledRun]:
    """Split ``text`` into styled runs.

    ``bold``/``italic`` set the default style: every run inherits it, so a
    heading can be parsed with ``bold=True`` and all of its runs come back bold.
    """
    base = StyledRun("", bold=bold, italic=italic)
    runs: list[StyledRun] = []
    position = 0
    for match in _INLINE_PATTERN.finditer(text):
        if match.start() > position:
            runs.append(replace(base, text=text[position : match.start()]))
        if match.group("bold") is not None:
            runs.extend(_split_bold(match.group("bold"), base))
        elif match.group("link_url") is not None:
            runs.append(replace(base, text=match.group("link_text"), link_url=match.group("link_url") or None))
        elif match.group("italic") is not None:
            runs.append(replace(base, text=match.group("italic"), italic=True))
        else:
            runs.append(replace(base, text=match.group("code"), code=True))
        position = match.end()
    if position < len(text):
        runs.append(replace(base, text=text[position:]))
    return [run for run in runs if run.text]


def _split_bold(inner: str, base: StyledRun) -> list[StyledRun]:
    bold = replace(base, bold=True)
    runs: list[StyledRun] = []
    position = 0
    for match in _INSIDE_BOLD.finditer(inner):
        if match.start() > position:
            runs.append(replace(bold, text=inner[position : match.start()]))
        if match.group("link_url") is not None:
            runs.append(replace(bold, text=match.group("link_text"), link_url=match.group("link_url") or None))
        else:
            runs.append(replace(bold, text=match.group("italic"), italic=True))
        position = match.end()
    if position < len(inner):
        runs.append(replace(bold, text=inner[position:]))
    return runs


def strip_inline(text: str) -> str:
    """Return ``text`` with emphasis, code and link markers removed."""
    return "".join(run.text for run in parse_inline(text))


def is_safe_link(url: str | None) -> bool:
    if not url:
        return False
    return urlparse(url).scheme.lower() in SAFE_LINK_SCHEMES
