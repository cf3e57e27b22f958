from __future__ import annotations

import logging
import re
from typing import Sequence

from contracts.ocr import PixelBox
from contracts.overlay import (
    OverlapResolutionConfig,
    OverlayBlock,
    OverlayLayout,
    OverlayStyle,
    PlacedRect,
    ReplacementLine,
)

from .fit import MIN_FONT_SIZE, FittedText, choose_fixed_font_size, fit_text_to_box, uniform_font_size
from .fonts import FontMetrics, load_font_metrics
from .layout import HasBox, build_avoid_rects, has_obstacle_below, resolve_overlap

log = logging.getLogger(__name__)

_NUMERIC_LABEL_RE = re.compile(r"^[\d.,:;/()%+\-]+$")
_LABEL_LINE_HEIGHT = 1.2


def _clamp(value: float, lo: float, hi: float) -> float:
    return min(max(value, lo), hi)


def _is_numeric_label(text: str) -> bool:
    return bool(_NUMERIC_LABEL_RE.match(text)) and any(ch.isdigit() for ch in text)


class _BlockGeometry:
    """Per-line sizing derived from the source box and page size."""

    def __init__(self, box: PixelBox, width: int, height: int) -> None:
        self.src_w = float(max(box.w, 1))
        self.src_h = float(max(box.h, 1))
        self.margin = _clamp(self.src_h * 0.2, 3.0, 12.0)
        self.gap = max(self.margin * 0.4, 2.0)
        self.padding = _clamp(self.src_h * 0.22, 4.0, 10.0)
        self.max_width = min(max(width * 0.9, self.src_w * 1.4), width * 0.98)
        self.max_height = max(height * 0.5, self.src_h * 2.2)
        self.inner_w = max(self.max_width - 2 * self.padding, 40.0)
        self.inner_h = max(height * 0.5 - 2 * self.padding, 20.0)


def _page_font_size(
    lines: Sequence[ReplacementLine],
    width: int,
    height: int,
    style: OverlayStyle,
    metrics: FontMetrics,
) -> float:
    if style.font_size is not None and style.font_size > 0:
        return _clamp(style.font_size, MIN_FONT_SIZE, max(height * 0.2, MIN_FONT_SIZE))

    fixed = choose_fixed_font_size(lines, height)
    if not style.uniform_font_size:
        return fixed

    fitted: list[FittedText] = []
    for line in lines:
        text = line.text.strip()
        if not text:
            continue
        geom = _BlockGeometry(line.box, width, height)
        inner_h = max(geom.src_h * 2.2 - 2 * geom.padding, MIN_FONT_SIZE * 1.1)
        fitted.append(fit_text_to_box(text, fixed, geom.inner_w, inner_h, metrics=metrics, allow_shrink=True))
    return uniform_font_size(fitted, default=fixed)


def _source_index(obstacles: Sequence[HasBox], box: PixelBox) -> int | None:
    for idx, item in enumerate(obstacles):
        if item.box == box:
            return idx
    return None


def layout_overlay(
    lines: Sequence[ReplacementLine],
    *,
    image_width: int,
    image_height: int,
    obstacles: Sequence[HasBox] | None = None,
    style: OverlayStyle | None = None,
    metrics: FontMetrics | None = None,
) -> OverlayLayout:
    """
    Place one text block per replacement line on a page.

    Each block is anchored just under its source line (or beside it when
    something sits directly below), then moved off the obstacle set and off
    blocks placed earlier. `obstacles` defaults to the replacement lines
    themselves; pass the fused recognized lines to avoid text that is not
    being replaced. The source line of each block is never an obstacle for it.
    Lines with blank text produce no block.
    """

    st = style or OverlayStyle()
    m = metrics or load_font_metrics(font_path=st.font_path, font_family=st.font_family)
    obstacle_lines: Sequence[HasBox] = lines if obstacles is None else obstacles
    width, height = int(image_width), int(image_height)

    page_size = _page_font_size(lines, width, height, st, m)
    blocks: list[OverlayBlock] = []

    for idx, line in enumerate(lines):
        text = line.text.strip()
        if not text:
            continue
        geom = _BlockGeometry(line.box, width, height)

        if _is_numeric_label(text):
            font_size = page_size
            text_lines = [text]
            line_height = font_size * _LABEL_LINE_HEIGHT
        else:
            fitted = fit_text_to_box(text, page_size, geom.inner_w, geom.inner_h, metrics=m, allow_shrink=False)
            font_size, text_lines, line_height = fitted.font_size, fitted.lines, fitted.line_height

        max_lines = max(int((geom.max_height - 2 * geom.padding) // line_height), 1)
        if len(text_lines) > max_lines:
            log.debug("truncating block %d from %d to %d lines", idx, len(text_lines), max_lines)
            text_lines = text_lines[:max_lines]

        text_w = max(m.measure(t, font_size) for t in text_lines)
        box_w = _clamp(text_w + 2 * geom.padding, 40.0, geom.max_width)
        box_h = min(len(text_lines) * line_height + 2 * geom.padding, float(height))

        exclude = idx if obstacles is None else _source_index(obstacle_lines, line.box)
        avoid = build_avoid_rects(obstacle_lines, exclude=exclude)
        anchor = PlacedRect.from_box(line.box)
        prefer_side = has_obstacle_below(anchor, avoid, geom.gap)

        if prefer_side:
            x = anchor.right() + geom.gap
            if x + box_w > width:
                x = anchor.x - geom.gap - box_w
            y = anchor.y
        else:
            x = anchor.x + geom.src_w / 2 - box_w / 2
            y = anchor.y + geom.src_h * 0.8

        config = OverlapResolutionConfig(
            margin=geom.gap,
            max_shift=float(max(width, height)),
            step=max(geom.gap, 2.0),
            prefer_side=prefer_side,
            bounds_w=float(width),
            bounds_h=float(height),
        )
        candidate = PlacedRect(x=x, y=y, w=box_w, h=box_h, target=line.box)
        rect = resolve_overlap(candidate, avoid, config, placed=[b.rect for b in blocks])
        log.debug(
            "block %d placed at (%.1f, %.1f) %.1fx%.1f resolved=%s",
            idx,
            rect.x,
            rect.y,
            rect.w,
            rect.h,
            rect.resolved,
        )

        blocks.append(
            OverlayBlock(
                line=line,
                rect=rect,
                font_size=font_size,
                text_lines=text_lines,
                line_height=line_height,
                padding=geom.padding,
            )
        )

    return OverlayLayout(
        image_width=width,
        image_height=height,
        font_size=page_size,
        font_family=m.family,
        style=st,
        blocks=blocks,
    )
