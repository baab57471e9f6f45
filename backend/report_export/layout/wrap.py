"""Greedy word wrapping for plain text and styled runs."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

from ..markdown.inline import StyledRun
from .metrics import FontSet, TextMeasurer

_WHITESPACE = re.compile(r"(\s+)")

# A word is a maximal whitespace-free stretch; it may span several runs,
# e.g. "**world**." is one word made of a bold piece and a plain piece.
Word = list[StyledRun]


@dataclass(slots=True)
class WrappedLine:
    words: list[Word]
    width: float

    @property
    def text(self) -> str:
        return " ".join("".join(piece.text for piece in word) for word in self.words)


def wrap_text(text: str, max_width: float, font_name: str, font_size: float, measure: TextMeasurer) -> list[str]:
    """Wrap plain ``text``; words wider than a line are broken by character."""
    lines: list[str] = []
    current = ""
    for word in text.split():
        for piece in _break_word(word, max_width, font_name, font_size, measure):
            candidate = f"{current} {piece}" if current else piece
            if current and measure(candidate, font_name, font_size) > max_width:
                lines.append(current)
                current = piece
            else:
                current = candidate
    if current or not lines:
        lines.append(current)
    return lines


def _break_word(word: str, max_width: float, font_name: str, font_size: float, measure: TextMeasurer) -> list[str]:
    if measure(word, font_name, font_size) <= max_width:
        return [word]
    pieces: list[str] = []
    current = ""
    for char in word:
        if current and measure(current + char, font_name, font_size) > max_width:
            pieces.append(current)
            current = char
        else:
            current += char
    if current:
        pieces.append(current)
    return pieces


def split_words(runs: list[StyledRun]) -> list[Word]:
    words: list[Word] = []
    current: Word = []
    for run in runs:
        for part in _WHITESPACE.split(run.text):
            if not part:
                continue
            if part.isspace():
                if current:
                    words.append(current)
                    current = []
            else:
                current.append(replace(run, text=part))
    if current:
        words.append(current)
    return words


def _word_width(word: Word, font_size: float, fonts: FontSet, measure: TextMeasurer) -> float:
    return sum(measure(piece.text, fonts.for_run(piece), font_size) for piece in word)


def _break_styled_word(
    word: Word,
    max_width: float,
    font_size: float,
    fonts: FontSet,
    measure: TextMeasurer,
) -> list[Word]:
    """Split an over-wide word by character; every piece keeps its run style."""
    parts: list[Word] = []
    current: Word = []
    width = 0.0
    for piece in word:
        font = fonts.for_run(piece)
        text = ""
        for char in piece.text:
            char_width = measure(char, font, font_size)
            if (current or text) and width + char_width > max_width:
                if text:
                    current.append(replace(piece, text=text))
                parts.append(current)
                current, text, width = [], "", 0.0
            text += char
            width += char_width
        if text:
            current.append(replace(piece, text=text))
    if current:
        parts.append(current)
    return parts


def wrap_runs(
    runs: list[StyledRun],
    max_width: float,
    font_size: float,
    fonts: FontSet,
    measure: TextMeasurer,
) -> list[WrappedLine]:
    """Run-aware greedy wrap.

    Line width is the sum of each piece measured in its own font plus one
    regular-font space between words, which is exactly how the line is drawn.
    Words wider than a line are broken by character.
    """
    space = measure(" ", fonts.regular, font_size)
    lines: list[WrappedLine] = []
    current: list[Word] = []
    width = 0.0
    for whole in split_words(runs):
        parts = [whole]
        if _word_width(whole, font_size, fonts, measure) > max_width:
            parts = _break_styled_word(whole, max_width, font_size, fonts, measure)
        for word in parts:
            word_width = _word_width(word, font_size, fonts, measure)
            candidate = width + space + word_width if current else word_width
            if current and candidate > max_width:
                lines.append(WrappedLine(current, width))
                current = [word]
                width = word_width
            else:
                current.append(word)
                width = candidate
    if current:
        lines.append(WrappedLine(current, width))
    return lines
