from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class PixelBox:
    """
    Axis-aligned box in source-image pixel space:
    - (x, y) is top-left
    - (w, h) is the extent; right/bottom edges are exclusive
    """

    x: int
    y: int
    w: int
    h: int

    def right(self) -> int:
        return int(self.x + self.w)

    def bottom(self) -> int:
        return int(self.y + self.h)

    def is_degenerate(self) -> bool:
        return self.w <= 0 or self.h <= 0

    def contains(self, other: "PixelBox") -> bool:
        return (
            self.x <= other.x
            and self.y <= other.y
            and self.right() >= other.right()
            and self.bottom() >= other.bottom()
        )

    @staticmethod
    def from_corners(x0: int, y0: int, x1: int, y1: int) -> "PixelBox":
        return PixelBox(x=x0, y=y0, w=x1 - x0, h=y1 - y0)

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "PixelBox":
        return PixelBox(x=int(d["x"]), y=int(d["y"]), w=int(d["w"]), h=int(d["h"]))

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}


@dataclass(frozen=True, slots=True)
class RecognizedLine:
    text: str
    box: PixelBox
    confidence: float  # engine-native 0..100
    font_size: float

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "RecognizedLine":
        return RecognizedLine(
            text=str(d.get("text", "")),
            box=PixelBox.from_dict(d["box"]),
            confidence=float(d.get("confidence", 0.0)),
            font_size=float(d.get("font_size", 0.0)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "box": self.box.to_dict(),
            "confidence": self.confidence,
            "font_size": self.font_size,
        }


@dataclass(frozen=True, slots=True)
class FusedResult:
    """
    Deduplicated lines for one image, in reading order, in original-image pixels.
    """

    image_width: int
    image_height: int
    lines: list[RecognizedLine]

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "FusedResult":
        lines_raw = d.get("lines") or []
        if not isinstance(lines_raw, list):
            raise TypeError("FusedResult.lines must be a list")
        return FusedResult(
            image_width=int(d["image_width"]),
            image_height=int(d["image_height"]),
            lines=[RecognizedLine.from_dict(ln) for ln in lines_raw],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "image_width": self.image_width,
            "image_height": self.image_height,
            "lines": [ln.to_dict() for ln in self.lines],
        }


@dataclass(frozen=True, slots=True)
class OcrError:
    code: str
    message: str
    detail: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "detail": self.detail}
