from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Sequence

from contracts.ocr import FusedResult, OcrError

from .contracts import OcrConfig
from .engines.base import OcrEngine
from .errors import OcrFailure
from .module import extract_lines

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ImageOutcome:
    """Result for one image of a batch: exactly one of `result`/`error` is set."""

    index: int
    source: str | None
    result: FusedResult | None
    error: OcrError | None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "source": self.source,
            "ok": self.ok,
            "result": None if self.result is None else self.result.to_dict(),
            "error": None if self.error is None else self.error.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class BatchResult:
    ok: bool
    items: list[ImageOutcome]

    def to_dict(self) -> dict[str, Any]:
        return {"ok": self.ok, "items": [item.to_dict() for item in self.items]}


def extract_many(
    images: Sequence[bytes],
    config: OcrConfig | None = None,
    *,
    sources: Sequence[str] | None = None,
    max_workers: int = 4,
    engine: OcrEngine | None = None,
    cancel: threading.Event | None = None,
) -> BatchResult:
    """
    Extract independent images on a worker pool.

    Each image owns its line accumulator, so workers share nothing mutable.
    A failing image becomes an error record; the other images still complete.
    Setting `cancel` stops work at the next pass boundary and marks every
    unfinished image as cancelled.
    """

    if sources is not None and len(sources) != len(images):
        raise ValueError("sources must match images one-to-one")
    if max_workers < 1:
        raise ValueError("max_workers must be >= 1")

    cfg = config or OcrConfig()

    def _run(data: bytes) -> FusedResult:
        return extract_lines(data, cfg, engine=engine, cancel=cancel)

    items: list[ImageOutcome] = []
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ocr") as pool:
        futures = [pool.submit(_run, data) for data in images]
        for idx, fut in enumerate(futures):
            source = None if sources is None else sources[idx]
            try:
                result = fut.result()
            except OcrFailure as e:
                log.warning("OCR failed for image %d (%s): %s", idx, source, e.code)
                items.append(ImageOutcome(index=idx, source=source, result=None, error=e.to_error()))
                continue
            items.append(ImageOutcome(index=idx, source=source, result=result, error=None))

    return BatchResult(ok=all(item.ok for item in items), items=items)
