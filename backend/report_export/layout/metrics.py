"""Font metrics used by the layout engines."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from ..markdown.inline import StyledRun


class TextMeasurer(Protocol):
    def __call__(self, text: str, font_name: str, font_size: float) -> float:
        ...


class ReportLabMeasurer:
    """Measures strings with the metrics of registered ReportLab fonts."""

    def __call__(self, text: str, font_name: str, font_size: float) -> float:
        return pdfmetrics.stringWidth(text, font_name, font_size)


@dataclass(frozen=True, slots=True)
class FontSet:
    regular: str = "Helvetica"
    bold: str = "Helvetica-Bold"
    italic: str = "Helvetica-Oblique"
    bold_italic: str = "Helvetica-BoldOblique"
    code: str = "Courier"

    def pick(self, *, bold: bool = False, italic: bool = False, code: bool = False) -> str:
        if code:
            return self.code
        if bold and italic:
            return self.bold_italic
        if bold:
            return self.bold
        if italic:
            return self.italic
        return self.regular

    def for_run(self, run: StyledRun) -> str:
        return self.pick(bold=run.bold, italic=run.italic, code=run.code)

    @classmethod
    def from_ttf(cls, path: Path) -> "FontSet":
        """Register a TrueType face and use it for every variant."""
        name = f"ReportFont-{path.stem}"
        if name not in pdfmetrics.getRegisteredFontNames():
            pdfmetrics.registerFont(TTFont(name, str(path)))
        return cls(regular=name, bold=name, italic=name, bold_italic=name, code=name)
