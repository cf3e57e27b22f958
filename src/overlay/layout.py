from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Protocol, Sequence

from contracts.ocr import PixelBox
from contracts.overlay import OverlapResolutionConfig, PlacedRect

log = logging.getLogger(__name__)


class HasBox(Protocol):
    box: PixelBox


def build_avoid_rects(lines: Sequence[HasBox], exclude: int | None = None) -> list[PlacedRect]:
    """
    Obstacle rectangles for overlay placement: every line's box except the
    one at index `exclude` (the line being placed). Degenerate boxes cannot
    collide and are skipped.
    """

    return [
        PlacedRect.from_box(line.box)
        for idx, line in enumerate(lines)
        if idx != exclude and not line.box.is_degenerate()
    ]


def has_obstacle_below(anchor: PlacedRect, obstacles: Iterable[PlacedRect], gap: float = 0.0) -> bool:
    """
    True when an obstacle sits directly below `anchor`: horizontally
    overlapping it by at least 30% of the narrower width, starting no higher
    than the anchor's bottom edge minus `gap`, and within reach of a block
    placed underneath.
    """

    anchor_bottom = anchor.bottom()
    max_gap = max(anchor.h * 2.5, 48.0) + gap
    for obs in obstacles:
        if (obs.x, obs.y, obs.w, obs.h) == (anchor.x, anchor.y, anchor.w, anchor.h):
            continue
        overlap = min(anchor.right(), obs.right()) - max(anchor.x, obs.x)
        if overlap <= 0:
            continue
        if overlap / max(min(anchor.w, obs.w), 1.0) < 0.3:
            continue
        if obs.y < anchor_bottom - gap:
            continue
        if obs.y - anchor_bottom <= max_gap:
            return True
    return False


def _ring_offsets(radius: float, config: OverlapResolutionConfig) -> list[tuple[float, float]]:
    r = radius
    d = r * config.direction
    if config.prefer_side:
        order = [(r, 0.0), (-r, 0.0), (0.0, d), (0.0, -d)]
    else:
        order = [(0.0, d), (r, 0.0), (-r, 0.0), (0.0, -d)]
    order += [(r, d), (-r, d), (r, -d), (-r, -d)]
    return [
        (dx, dy)
        for dx, dy in order
        if (dx == 0 or config.allow_horizontal_shift) and (dy == 0 or config.allow_vertical_shift)
    ]


def _clamp(rect: PlacedRect, config: OverlapResolutionConfig) -> PlacedRect:
    x, y = rect.x, rect.y
    if config.bounds_w is not None:
        x = min(max(x, 0.0), max(config.bounds_w - rect.w, 0.0))
    if config.bounds_h is not None:
        y = min(max(y, 0.0), max(config.bounds_h - rect.h, 0.0))
    if (x, y) == (rect.x, rect.y):
        return rect
    return rect.moved(x - rect.x, y - rect.y)


def _collides(rect: PlacedRect, blockers: Sequence[PlacedRect]) -> bool:
    return any(rect.intersects(b) for b in blockers)


def resolve_overlap(
    candidate: PlacedRect,
    obstacles: Sequence[PlacedRect],
    config: OverlapResolutionConfig | None = None,
    placed: Sequence[PlacedRect] = (),
) -> PlacedRect:
    """
    Move `candidate` to the nearest position that touches neither an
    obstacle (grown by config.margin) nor an already placed rectangle.

    Rings of offsets step, 2*step, ... up to max_shift are probed in a fixed
    order, so results are deterministic. Size is never changed. When no clear
    position exists the original candidate is returned with resolved=False.
    """

    cfg = config or OverlapResolutionConfig()
    blockers = [o.expanded(cfg.margin) for o in obstacles] + list(placed)

    start = _clamp(candidate, cfg)
    if not _collides(start, blockers):
        return replace(start, resolved=True)

    rings = int(cfg.max_shift // cfg.step)
    for ring in range(1, rings + 1):
        for dx, dy in _ring_offsets(ring * cfg.step, cfg):
            probe = _clamp(start.moved(dx, dy), cfg)
            if not _collides(probe, blockers):
                return replace(probe, resolved=True)

    log.debug(
        "no clear position within %.1fpx for rect at (%.1f, %.1f)",
        cfg.max_shift,
        candidate.x,
        candidate.y,
    )
    return replace(candidate, resolved=False)
