"""
Fusion of multi-pass OCR output into one deduplicated set of text lines.

Everything here is a pure function over value types; no I/O, no shared state.
Functions are total over well-formed input: empty batches and empty line
lists are ordinary values, not errors.
"""

from .config import FusionConfig
from .geometry import horizontal_overlap, iou, reading_order_key, union_box, vertical_overlap
from .merge import (
    filter_lines,
    finalize_lines,
    is_noise_line,
    merge_inline_lines,
    merge_lines,
    scale_lines,
    suppress_overlaps,
)
from .text import cjk_ratio, is_cjk, join_inline, merge_confidence, needs_space

__all__ = [
    "FusionConfig",
    "iou",
    "horizontal_overlap",
    "vertical_overlap",
    "union_box",
    "reading_order_key",
    "needs_space",
    "join_inline",
    "merge_confidence",
    "cjk_ratio",
    "is_cjk",
    "merge_lines",
    "scale_lines",
    "filter_lines",
    "is_noise_line",
    "merge_inline_lines",
    "suppress_overlaps",
    "finalize_lines",
]
