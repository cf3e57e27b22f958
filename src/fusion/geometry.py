from __future__ import annotations

from contracts.ocr import PixelBox


def iou(a: PixelBox, b: PixelBox) -> float:
    ix0 = max(a.x, b.x)
    iy0 = max(a.y, b.y)
    ix1 = min(a.right(), b.right())
    iy1 = min(a.bottom(), b.bottom())
    if ix1 <= ix0 or iy1 <= iy0:
        return 0.0
    inter = float((ix1 - ix0) * (iy1 - iy0))
    union = float(a.w * a.h + b.w * b.h) - inter
    return inter / max(union, 1.0)


def horizontal_overlap(a: PixelBox, b: PixelBox) -> float:
    """
    Horizontal intersection length over the narrower box's width.
    1.0 means one box's x-span is contained in the other's.
    """

    ix0 = max(a.x, b.x)
    ix1 = min(a.right(), b.right())
    if ix1 <= ix0:
        return 0.0
    return float(ix1 - ix0) / max(float(min(a.w, b.w)), 1.0)


def vertical_overlap(a: PixelBox, b: PixelBox) -> float:
    iy0 = max(a.y, b.y)
    iy1 = min(a.bottom(), b.bottom())
    if iy1 <= iy0:
        return 0.0
    return float(iy1 - iy0) / max(float(min(a.h, b.h)), 1.0)


def union_box(a: PixelBox, b: PixelBox) -> PixelBox:
    return PixelBox.from_corners(
        min(a.x, b.x),
        min(a.y, b.y),
        max(a.right(), b.right()),
        max(a.bottom(), b.bottom()),
    )


def horizontal_gap(left: PixelBox, right: PixelBox) -> int:
    """Signed gap between `left`'s right edge and `right`'s left edge (negative when they overlap)."""

    return int(right.x - left.right())


def reading_order_key(box: PixelBox) -> tuple[int, int]:
    # top-to-bottom, then left-to-right
    return (box.y, box.x)
