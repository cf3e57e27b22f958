"""
Overlay placement: where to draw replacement text so it does not cover the
page's remaining text.

Placement never fails: a block with no clear position keeps its anchored
position and is reported with resolved=False.
"""

from .fit import FittedText, choose_fixed_font_size, fit_text_to_box, tokenize_text, uniform_font_size, wrap_text
from .fonts import DefaultFontMetrics, FontMetrics, PillowFontMetrics, load_font_metrics
from .layout import build_avoid_rects, has_obstacle_below, resolve_overlap
from .page import layout_overlay

__all__ = [
    "FontMetrics",
    "DefaultFontMetrics",
    "PillowFontMetrics",
    "load_font_metrics",
    "FittedText",
    "tokenize_text",
    "wrap_text",
    "fit_text_to_box",
    "choose_fixed_font_size",
    "uniform_font_size",
    "build_avoid_rects",
    "has_obstacle_below",
    "resolve_overlap",
    "layout_overlay",
]
