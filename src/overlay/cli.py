from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from contracts.ocr import FusedResult
from contracts.overlay import OverlayStyle, ReplacementLine

from .artifacts import write_layout_artifact
from .page import layout_overlay


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="overlay-place",
        description=(
            "Place replacement text blocks over an image's fused OCR lines, avoiding the "
            "remaining text; emit the layout as JSON."
        ),
    )
    p.add_argument(
        "--fused",
        required=True,
        type=Path,
        help="Fused result JSON, or an ocr-fuse batch artifact (see --item).",
    )
    p.add_argument("--item", type=int, default=0, help="Batch item index when --fused is a batch artifact.")
    p.add_argument(
        "--replacements",
        required=True,
        type=Path,
        help=(
            "JSON list: either strings (one per fused line, in order) or objects "
            '{"text", "box", "font_size"}.'
        ),
    )
    p.add_argument("--out", required=True, type=Path, help="Output layout JSON file path.")
    p.add_argument("--font-path", default=None, help="TrueType/OpenType font file used for text metrics.")
    p.add_argument("--font-family", default=None, help="Font name Pillow can locate, e.g. DejaVuSans.ttf.")
    p.add_argument("--font-size", type=float, default=None, help="Fixed font size for every block.")
    p.add_argument(
        "--uniform-font-size",
        action="store_true",
        help="Use the smallest fitted size for every block on the page.",
    )
    p.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...).")
    return p


def _load_fused(path: Path, item: int) -> FusedResult:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if "items" in raw:
        entry = raw["items"][item]
        if entry.get("result") is None:
            raise ValueError(f"batch item {item} has no result: {entry.get('error')}")
        raw = entry["result"]
    return FusedResult.from_dict(raw)


def _load_replacements(path: Path, fused: FusedResult) -> list[ReplacementLine]:
    raw: list[Any] = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise TypeError("replacements must be a JSON list")

    if all(isinstance(r, str) for r in raw):
        if len(raw) != len(fused.lines):
            raise ValueError(f"got {len(raw)} replacement strings for {len(fused.lines)} fused lines")
        return [
            ReplacementLine(text=text, box=line.box, font_size=line.font_size)
            for text, line in zip(raw, fused.lines)
        ]
    return [ReplacementLine.from_dict(r) for r in raw]


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        fused = _load_fused(args.fused, args.item)
        replacements = _load_replacements(args.replacements, fused)
    except (OSError, ValueError, KeyError, IndexError, TypeError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    style = OverlayStyle(
        font_size=args.font_size,
        font_family=args.font_family,
        font_path=args.font_path,
        uniform_font_size=args.uniform_font_size,
    )
    layout = layout_overlay(
        replacements,
        image_width=fused.image_width,
        image_height=fused.image_height,
        obstacles=fused.lines,
        style=style,
    )
    write_layout_artifact(layout=layout, out_file=args.out)

    unresolved = sum(1 for b in layout.blocks if not b.resolved)
    print(f"blocks={len(layout.blocks)} unresolved={unresolved} font_size={layout.font_size:.1f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
