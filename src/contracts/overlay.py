from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from .ocr import PixelBox


@dataclass(frozen=True, slots=True)
class ReplacementLine:
    """
    Translated text for one recognized line. `box` is the target position
    (the source line's box), not an observation.
    """

    text: str
    box: PixelBox
    font_size: float

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "ReplacementLine":
        return ReplacementLine(
            text=str(d.get("text", "")),
            box=PixelBox.from_dict(d["box"]),
            font_size=float(d.get("font_size", 0.0)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "box": self.box.to_dict(), "font_size": self.font_size}


@dataclass(frozen=True, slots=True)
class PlacedRect:
    """
    Candidate or final overlay rectangle (float pixels).

    `target` is the box the placement started from; `shift_x`/`shift_y` is the
    cumulative displacement applied by the resolver.
    """

    x: float
    y: float
    w: float
    h: float
    target: PixelBox | None = None
    shift_x: float = 0.0
    shift_y: float = 0.0
    resolved: bool = True

    @staticmethod
    def from_box(box: PixelBox) -> "PlacedRect":
        return PlacedRect(x=float(box.x), y=float(box.y), w=float(box.w), h=float(box.h), target=box)

    def right(self) -> float:
        return self.x + self.w

    def bottom(self) -> float:
        return self.y + self.h

    def moved(self, dx: float, dy: float) -> "PlacedRect":
        return replace(
            self,
            x=self.x + dx,
            y=self.y + dy,
            shift_x=self.shift_x + dx,
            shift_y=self.shift_y + dy,
        )

    def expanded(self, margin: float) -> "PlacedRect":
        return replace(
            self,
            x=self.x - margin,
            y=self.y - margin,
            w=self.w + 2 * margin,
            h=self.h + 2 * margin,
        )

    def intersects(self, other: "PlacedRect") -> bool:
        return (
            self.x < other.right()
            and other.x < self.right()
            and self.y < other.bottom()
            and other.y < self.bottom()
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "w": self.w,
            "h": self.h,
            "target": None if self.target is None else self.target.to_dict(),
            "shift_x": self.shift_x,
            "shift_y": self.shift_y,
            "resolved": self.resolved,
        }


@dataclass(frozen=True, slots=True)
class OverlapResolutionConfig:
    """
    Policy for moving an overlay rectangle away from obstacles.

    The resolver probes rings of offsets `step, 2*step, ...` up to `max_shift`
    along the allowed axes. `direction` +1 tries downward before upward, -1
    the reverse. When `bounds_w`/`bounds_h` are set, candidates are clamped
    into `[0, bounds)`.
    """

    margin: float = 2.0
    max_shift: float = 200.0
    step: float = 2.0
    allow_vertical_shift: bool = True
    allow_horizontal_shift: bool = True
    prefer_side: bool = False
    direction: float = 1.0
    bounds_w: float | None = None
    bounds_h: float | None = None

    def __post_init__(self) -> None:
        if self.margin < 0:
            raise ValueError("margin must be >= 0")
        if self.max_shift < 0:
            raise ValueError("max_shift must be >= 0")
        if self.step <= 0:
            raise ValueError("step must be > 0")
        if self.direction not in (1.0, -1.0):
            raise ValueError("direction must be 1.0 or -1.0")


@dataclass(frozen=True, slots=True)
class OverlayStyle:
    text_color: str = "#111111"
    stroke_color: str = "#333333"
    fill_color: str = "#ffffffe6"
    font_size: float | None = None
    font_family: str | None = None
    font_path: str | None = None
    uniform_font_size: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "text_color": self.text_color,
            "stroke_color": self.stroke_color,
            "fill_color": self.fill_color,
            "font_size": self.font_size,
            "font_family": self.font_family,
            "font_path": self.font_path,
            "uniform_font_size": self.uniform_font_size,
        }


@dataclass(frozen=True, slots=True)
class OverlayBlock:
    """
    Final placement of one replacement line: the rectangle to paint, the
    wrapped text to draw inside it (after `padding`), and whether the
    resolver found a collision-free position.
    """

    line: ReplacementLine
    rect: PlacedRect
    font_size: float
    text_lines: list[str]
    line_height: float
    padding: float

    @property
    def resolved(self) -> bool:
        return self.rect.resolved

    def to_dict(self) -> dict[str, Any]:
        return {
            "line": self.line.to_dict(),
            "rect": self.rect.to_dict(),
            "font_size": self.font_size,
            "text_lines": list(self.text_lines),
            "line_height": self.line_height,
            "padding": self.padding,
            "resolved": self.resolved,
        }


@dataclass(frozen=True, slots=True)
class OverlayLayout:
    image_width: int
    image_height: int
    font_size: float
    font_family: str | None
    style: OverlayStyle
    blocks: list[OverlayBlock]

    def to_dict(self) -> dict[str, Any]:
        return {
            "image_width": self.image_width,
            "image_height": self.image_height,
            "font_size": self.font_size,
            "font_family": self.font_family,
            "style": self.style.to_dict(),
            "blocks": [b.to_dict() for b in self.blocks],
        }
