"""
Value types shared between the OCR fusion pipeline and the overlay layout engine.

Geometry is value-typed: boxes are immutable and shared by value, never by identity.
Stage code should consume/produce these contract objects (not ad-hoc dicts).
"""

from .ocr import FusedResult, OcrError, PixelBox, RecognizedLine
from .overlay import (
    OverlapResolutionConfig,
    OverlayBlock,
    OverlayLayout,
    OverlayStyle,
    PlacedRect,
    ReplacementLine,
)

__all__ = [
    "PixelBox",
    "RecognizedLine",
    "FusedResult",
    "OcrError",
    "ReplacementLine",
    "PlacedRect",
    "OverlapResolutionConfig",
    "OverlayStyle",
    "OverlayBlock",
    "OverlayLayout",
]
