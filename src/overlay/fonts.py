from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from functools import lru_cache

from PIL import ImageFont

from fusion.text import is_cjk

log = logging.getLogger(__name__)

_REFERENCE_SIZE = 100  # fonts load once at this size; widths scale linearly


class FontMetrics(ABC):
    family: str | None = None

    @abstractmethod
    def measure(self, text: str, font_size: float) -> float:
        """Rendered advance width of a single line of `text`, in pixels."""


class DefaultFontMetrics(FontMetrics):
    """Per-character width estimates; used when no font file can be loaded."""

    @staticmethod
    def char_units(ch: str) -> float:
        if ch.isspace():
            return 0.25
        if ch.isascii():
            return 0.55 if ch.isalnum() else 0.35
        if is_cjk(ch):
            return 1.0
        return 0.9

    def measure(self, text: str, font_size: float) -> float:
        return sum(self.char_units(ch) for ch in text if ch != "\n") * font_size


class PillowFontMetrics(FontMetrics):
    def __init__(self, font: ImageFont.FreeTypeFont) -> None:
        self._font = font
        self.family = font.getname()[0]

    def measure(self, text: str, font_size: float) -> float:
        return float(self._font.getlength(text.replace("\n", ""))) * font_size / _REFERENCE_SIZE


@lru_cache(maxsize=32)
def _load_truetype(source: str) -> ImageFont.FreeTypeFont:
    return ImageFont.truetype(source, size=_REFERENCE_SIZE)


def load_font_metrics(*, font_path: str | None = None, font_family: str | None = None) -> FontMetrics:
    """
    Resolve metrics for an explicit font file, else a family/file name Pillow
    can locate. Unavailable fonts fall back to DefaultFontMetrics.
    """

    for source in (font_path, font_family):
        if not source:
            continue
        try:
            return PillowFontMetrics(_load_truetype(source))
        except OSError as e:
            log.warning("font metrics unavailable for %r (%s); using defaults", source, e)
    return DefaultFontMetrics()
