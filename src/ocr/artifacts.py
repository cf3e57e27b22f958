from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from contracts.ocr import FusedResult

from .batch import BatchResult


def serialize_payload(payload: dict[str, Any]) -> str:
    """
    Stable JSON serialization for artifacts.
    """

    return json.dumps(payload, ensure_ascii=False, sort_keys=True, indent=2) + "\n"


def serialize_fused_result(result: FusedResult) -> str:
    return serialize_payload(result.to_dict())


def write_batch_artifact(*, result: BatchResult, out_file: Path) -> None:
    """
    Write batch extraction output to a JSON artifact file.

    Callers provide an explicit output path; no artifact root is assumed.
    """

    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(serialize_payload(result.to_dict()), encoding="utf-8")
