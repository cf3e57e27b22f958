from __future__ import annotations

from dataclasses import dataclass
from statistics import median_high
from typing import Iterable, Sequence

from contracts.overlay import ReplacementLine
from fusion.text import is_cjk

from .fonts import DefaultFontMetrics, FontMetrics

MIN_FONT_SIZE = 10.0
LINE_HEIGHT_FACTOR = 1.1


@dataclass(frozen=True, slots=True)
class FittedText:
    font_size: float
    lines: list[str]
    line_height: float


def tokenize_text(text: str) -> list[str]:
    """Split into words, single CJK characters, " " and "\\n" break tokens."""

    tokens: list[str] = []
    current: list[str] = []

    def flush() -> None:
        if current:
            tokens.append("".join(current))
            current.clear()

    for ch in text:
        if ch == "\n":
            flush()
            tokens.append("\n")
        elif ch.isspace():
            flush()
            tokens.append(" ")
        elif is_cjk(ch):
            flush()
            tokens.append(ch)
        else:
            current.append(ch)
    flush()
    return tokens


def wrap_text(text: str, max_width: float, font_size: float, metrics: FontMetrics | None = None) -> list[str]:
    """Greedy wrap at token boundaries; a single token wider than max_width gets its own line."""

    m = metrics or DefaultFontMetrics()
    space_w = m.measure(" ", font_size)
    result: list[str] = []
    current = ""
    width = 0.0

    for token in tokenize_text(text):
        if token == "\n":
            if current.strip():
                result.append(current.rstrip())
            current = ""
            width = 0.0
            continue
        if token == " ":
            if current and not current.endswith(" "):
                current += " "
                width += space_w
            continue
        token_w = m.measure(token, font_size)
        if width + token_w > max_width and current.strip():
            result.append(current.rstrip())
            current = ""
            width = 0.0
        current += token
        width += token_w

    if current.strip():
        result.append(current.rstrip())
    if not result:
        result.append(text.strip())
    return result


def fit_text_to_box(
    text: str,
    font_size_base: float,
    inner_w: float,
    inner_h: float,
    *,
    metrics: FontMetrics | None = None,
    allow_shrink: bool = True,
    min_size: float = MIN_FONT_SIZE,
) -> FittedText:
    """
    Wrap `text` into an inner_w x inner_h box.

    Without shrinking, the base size (floored at min_size) is kept and only
    wrapping adapts. With shrinking, the size drops until the block fits the
    height, stays within 3 lines (4 for CJK) and no line exceeds the width,
    or min_size is reached.
    """

    m = metrics or DefaultFontMetrics()
    if not allow_shrink:
        font_size = max(font_size_base, min_size)
        return FittedText(
            font_size=font_size,
            lines=wrap_text(text, inner_w, font_size, m),
            line_height=font_size * LINE_HEIGHT_FACTOR,
        )

    font_size = min(font_size_base, max(inner_h, min_size))
    lines = wrap_text(text, inner_w, font_size, m)
    max_lines = 4 if any(is_cjk(ch) for ch in text) else 3

    for _ in range(8):
        block_h = len(lines) * font_size * LINE_HEIGHT_FACTOR
        widest = max((m.measure(ln, font_size) for ln in lines), default=0.0)
        fits_h = block_h <= inner_h
        fits_w = widest <= inner_w
        if (len(lines) <= max_lines and fits_h and fits_w) or font_size <= min_size:
            break
        shrink = min(
            max_lines / len(lines) if len(lines) > max_lines else 1.0,
            1.0 if fits_h else inner_h / block_h,
            1.0 if fits_w else inner_w / widest,
            0.92,
        )
        font_size = max(font_size * shrink, min_size)
        lines = wrap_text(text, inner_w, font_size, m)

    return FittedText(font_size=font_size, lines=lines, line_height=font_size * LINE_HEIGHT_FACTOR)


def choose_fixed_font_size(lines: Sequence[ReplacementLine], image_height: int) -> float:
    """Page-wide size: median source size * 1.15, clamped to [12, 32]."""

    sizes = [ln.font_size for ln in lines if ln.font_size > 0]
    base = median_high(sizes) if sizes else image_height * 0.028
    return min(max(base * 1.15, 12.0), 32.0)


def uniform_font_size(fitted: Iterable[FittedText], default: float) -> float:
    """The smallest fitted size, so every block on a page renders at one size."""

    sizes = [f.font_size for f in fitted]
    return min(sizes) if sizes else default
