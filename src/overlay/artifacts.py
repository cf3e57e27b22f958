from __future__ import annotations

import json
from pathlib import Path

from contracts.overlay import OverlayLayout


def serialize_layout(layout: OverlayLayout) -> str:
    return json.dumps(layout.to_dict(), ensure_ascii=False, sort_keys=True, indent=2) + "\n"


def write_layout_artifact(*, layout: OverlayLayout, out_file: Path) -> None:
    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(serialize_layout(layout), encoding="utf-8")
