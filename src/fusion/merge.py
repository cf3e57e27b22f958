from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Iterable

from contracts.ocr import PixelBox, RecognizedLine

from .config import FusionConfig
from .geometry import (
    horizontal_gap,
    horizontal_overlap,
    iou,
    reading_order_key,
    union_box,
    vertical_overlap,
)
from .text import cjk_ratio, join_inline, merge_confidence

log = logging.getLogger(__name__)


def _text_len(line: RecognizedLine) -> int:
    return len(line.text.strip())


def _substantially_longer(a: int, b: int, config: FusionConfig) -> bool:
    return a - b >= config.length_preference_min_gain and a >= b * config.length_preference_ratio


def _prefer_incoming(current: RecognizedLine, incoming: RecognizedLine, config: FusionConfig) -> bool:
    cur_len = _text_len(current)
    new_len = _text_len(incoming)
    # A longer reading only wins when it does not lose CJK content.
    if _substantially_longer(new_len, cur_len, config):
        if cjk_ratio(incoming.text) + 0.05 >= cjk_ratio(current.text):
            return True
    if _substantially_longer(cur_len, new_len, config):
        if cjk_ratio(current.text) + 0.05 >= cjk_ratio(incoming.text):
            return False
    return incoming.confidence > current.confidence


def _merge_duplicate(current: RecognizedLine, incoming: RecognizedLine, config: FusionConfig) -> RecognizedLine:
    winner = incoming if _prefer_incoming(current, incoming, config) else current
    conf = merge_confidence(current.confidence, _text_len(current), incoming.confidence, _text_len(incoming))
    return replace(winner, confidence=conf)


def merge_lines(
    existing: Iterable[RecognizedLine],
    incoming: Iterable[RecognizedLine],
    config: FusionConfig | None = None,
) -> list[RecognizedLine]:
    """
    Fold one recognition batch into the running set.

    Each incoming line is matched against the best-overlapping existing line
    (IoU above `duplicate_iou_threshold`). A match keeps one text and box and
    averages the confidences by text length; anything unmatched is appended.
    Lines appended earlier in the same batch are candidates for later ones.
    """

    cfg = config or FusionConfig()
    merged = list(existing)
    for line in incoming:
        best_i: int | None = None
        best_iou = cfg.duplicate_iou_threshold
        for i, cur in enumerate(merged):
            v = iou(cur.box, line.box)
            if v > best_iou:
                best_i = i
                best_iou = v
        if best_i is None:
            merged.append(line)
        else:
            merged[best_i] = _merge_duplicate(merged[best_i], line, cfg)
    return merged


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def scale_lines(lines: Iterable[RecognizedLine], scale: float) -> list[RecognizedLine]:
    """Map boxes from an upscaled variant back to original-image pixels."""

    if scale <= 0:
        raise ValueError("scale must be > 0")
    if scale == 1:
        return list(lines)
    out: list[RecognizedLine] = []
    for line in lines:
        b = line.box
        box = PixelBox(
            x=_round_half_up(b.x / scale),
            y=_round_half_up(b.y / scale),
            w=_round_half_up(b.w / scale),
            h=_round_half_up(b.h / scale),
        )
        out.append(replace(line, box=box, font_size=line.font_size / scale))
    return out


def _within_image(box: PixelBox, width: int, height: int, tolerance: int) -> bool:
    if box.is_degenerate():
        return False
    return (
        box.x >= -tolerance
        and box.y >= -tolerance
        and box.right() <= width + tolerance
        and box.bottom() <= height + tolerance
    )


@dataclass(frozen=True, slots=True)
class _TextStats:
    total: int
    word: int
    digits: int
    symbols: int


def _text_stats(text: str) -> _TextStats:
    total = word = digits = symbols = 0
    for ch in text:
        if ch.isspace():
            continue
        total += 1
        if ch.isascii() and ch.isdigit():
            digits += 1
            word += 1
        elif ch.isalpha():
            word += 1
        else:
            symbols += 1
    return _TextStats(total=total, word=word, digits=digits, symbols=symbols)


def is_noise_line(line: RecognizedLine, width: int, height: int) -> bool:
    """
    Shape/content heuristics for recognition garbage: page-tall boxes,
    hairline rules, vertical slivers, and symbol or digit soup.
    """

    text = line.text.strip()
    b = line.box
    if b.h > height * 0.25:
        return True
    if b.w > width * 0.98 and b.h < 6:
        return True
    if b.w / max(b.h, 1) < 0.35 and len(text) > 3:
        return True

    stats = _text_stats(text)
    if stats.total == 0:
        return True
    if stats.total > 4 and stats.word / stats.total < 0.35:
        return True
    if stats.total > 3 and stats.digits / stats.total > 0.85:
        return True
    if stats.total > 3 and stats.symbols / stats.total > 0.6:
        return True
    if line.confidence < 25.0 and stats.total <= 4:
        return True
    return False


def filter_lines(
    lines: Iterable[RecognizedLine],
    width: int,
    height: int,
    config: FusionConfig | None = None,
) -> list[RecognizedLine]:
    """
    Drop lines with blank text or with a box outside `[0, width) x [0, height)`
    by more than `boundary_tolerance_px`. Kept lines are returned unchanged.
    """

    cfg = config or FusionConfig()
    out: list[RecognizedLine] = []
    for line in lines:
        if not line.text.strip():
            continue
        if not _within_image(line.box, width, height, cfg.boundary_tolerance_px):
            continue
        if cfg.noise_filter and is_noise_line(line, width, height):
            continue
        out.append(line)
    return out


def _inline_pair(a: RecognizedLine, b: RecognizedLine, config: FusionConfig) -> tuple[RecognizedLine, RecognizedLine] | None:
    if vertical_overlap(a.box, b.box) < config.inline_vertical_overlap_threshold:
        return None
    left, right = (a, b) if (a.box.x, a.box.y) <= (b.box.x, b.box.y) else (b, a)
    if horizontal_overlap(left.box, right.box) > config.inline_max_horizontal_overlap:
        return None
    max_gap = max(max(left.box.h, right.box.h) * config.inline_max_gap_ratio, config.inline_min_gap_px)
    if horizontal_gap(left.box, right.box) > max_gap:
        return None
    return left, right


def _join_pair(left: RecognizedLine, right: RecognizedLine, config: FusionConfig) -> RecognizedLine:
    left_len = _text_len(left)
    right_len = _text_len(right)
    gap = horizontal_gap(left.box, right.box)
    separated = gap >= min(left.box.h, right.box.h) * config.word_gap_ratio
    total = max(left_len + right_len, 1)
    return RecognizedLine(
        text=join_inline(left.text, right.text, separated=separated),
        box=union_box(left.box, right.box),
        confidence=merge_confidence(left.confidence, left_len, right.confidence, right_len),
        font_size=(left.font_size * left_len + right.font_size * right_len) / total,
    )


def _inline_sweep(lines: list[RecognizedLine], config: FusionConfig) -> list[RecognizedLine]:
    merged: list[RecognizedLine] = []
    for line in sorted(lines, key=lambda ln: reading_order_key(ln.box)):
        for i in range(len(merged) - 1, -1, -1):
            pair = _inline_pair(merged[i], line, config)
            if pair is not None:
                merged[i] = _join_pair(pair[0], pair[1], config)
                break
        else:
            merged.append(line)
    return merged


def merge_inline_lines(lines: Iterable[RecognizedLine], config: FusionConfig | None = None) -> list[RecognizedLine]:
    """
    Rejoin one visual line that the engine split into several records.

    Lines are swept in reading order; each is joined into the most recent
    compatible merged line (same row, small horizontal gap), left part first.
    A join grows the merged box, which can make it compatible with a line
    already passed, so the sweep repeats until the line count stops changing.
    """

    cfg = config or FusionConfig()
    merged = list(lines)
    while True:
        swept = _inline_sweep(merged, cfg)
        if len(swept) == len(merged):
            return swept
        merged = swept


def _suppression_key(line: RecognizedLine) -> tuple[float, int, int, int]:
    return (-line.confidence, -_text_len(line), line.box.y, line.box.x)


def suppress_overlaps(lines: Iterable[RecognizedLine], config: FusionConfig | None = None) -> list[RecognizedLine]:
    """
    Drop residual duplicates: best line first (confidence, then text length,
    then reading order); a line overlapping an already kept one is discarded.
    Output is in reading order.
    """

    cfg = config or FusionConfig()
    kept: list[RecognizedLine] = []
    for line in sorted(lines, key=_suppression_key):
        duplicate = False
        for existing in kept:
            if iou(existing.box, line.box) > cfg.duplicate_iou_threshold:
                duplicate = True
                break
            if (
                vertical_overlap(existing.box, line.box) > cfg.containment_overlap_threshold
                and horizontal_overlap(existing.box, line.box) > cfg.containment_overlap_threshold
            ):
                duplicate = True
                break
        if not duplicate:
            kept.append(line)
    kept.sort(key=lambda ln: reading_order_key(ln.box))
    return kept


def finalize_lines(
    lines: Iterable[RecognizedLine],
    *,
    scale: float,
    width: int,
    height: int,
    config: FusionConfig | None = None,
) -> list[RecognizedLine]:
    """Apply the post-recognition passes: scale back, filter, inline merge, suppress."""

    cfg = config or FusionConfig()
    out = list(lines)
    n_in = len(out)
    if scale > 1:
        out = scale_lines(out, scale)
    out = filter_lines(out, width, height, cfg)
    n_filtered = len(out)
    out = merge_inline_lines(out, cfg)
    n_inline = len(out)
    out = suppress_overlaps(out, cfg)
    log.debug(
        "fusion passes: in=%d filtered=%d inline=%d suppressed=%d",
        n_in,
        n_filtered,
        n_inline,
        len(out),
    )
    return out
