from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from contracts.ocr import OcrError
from fusion.config import FusionConfig
from pdf_pages import PdfRenderError, render_pdf_pages

from .artifacts import write_batch_artifact
from .batch import BatchResult, ImageOutcome, extract_many
from .contracts import OcrConfig


def _psm_list(value: str) -> tuple[int, ...]:
    try:
        modes = tuple(int(v) for v in value.split(",") if v.strip())
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected comma-separated integers, got {value!r}") from e
    if not modes:
        raise argparse.ArgumentTypeError("expected at least one page segmentation mode")
    return modes


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ocr-fuse",
        description="Multi-pass OCR with line fusion: emit deduplicated text lines + pixel boxes as JSON.",
    )
    p.add_argument(
        "--input",
        required=True,
        action="append",
        type=Path,
        help="Image or PDF file (repeatable). Each PDF page is extracted as its own image.",
    )
    p.add_argument("--out", required=True, type=Path, help="Output JSON artifact file path.")
    p.add_argument("--languages", default="eng", help='Tesseract languages, e.g. "eng+jpn" (default: eng).')
    p.add_argument("--primary-psm", type=_psm_list, default=(3, 4), help="PSM list for the primary variant.")
    p.add_argument("--secondary-psm", type=_psm_list, default=(4,), help="PSM list for later variants.")
    p.add_argument("--tesseract-cmd", default="tesseract", help="Tesseract executable.")
    p.add_argument("--timeout-s", type=float, default=None, help="Per-invocation timeout (default: none).")
    p.add_argument("--max-workers", type=int, default=4, help="Images processed in parallel.")
    p.add_argument("--noise-filter", action="store_true", help="Drop lines that look like recognition noise.")
    p.add_argument("--pdf-dpi", type=int, default=200, help="Render DPI for PDF inputs.")
    p.add_argument("--page-selection", default=None, help='PDF pages like "1,3-5". Default: all pages.')
    p.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...).")
    return p


def _collect_inputs(
    paths: list[Path], *, pdf_dpi: int, page_selection: str | None
) -> list[tuple[str, bytes | OcrError]]:
    """Expand inputs into (source, image bytes) slots; unreadable inputs become error slots."""

    slots: list[tuple[str, bytes | OcrError]] = []
    for path in paths:
        try:
            data = path.read_bytes()
        except OSError as e:
            slots.append(
                (
                    str(path),
                    OcrError(code="OCR_INPUT_NOT_FOUND", message="Input file not readable", detail={"reason": str(e)}),
                )
            )
            continue

        if path.suffix.lower() != ".pdf":
            slots.append((str(path), data))
            continue

        try:
            pages = render_pdf_pages(data, dpi=pdf_dpi, page_selection=page_selection)
        except PdfRenderError as e:
            slots.append((str(path), OcrError(code=e.code, message=e.message, detail=e.detail)))
            continue
        for page in pages:
            slots.append((f"{path}#page={page.page_num}", page.png_bytes))
    return slots


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = OcrConfig(
        languages=args.languages,
        tesseract_cmd=args.tesseract_cmd,
        primary_psm_modes=args.primary_psm,
        secondary_psm_modes=args.secondary_psm,
        timeout_s=args.timeout_s,
        fusion=replace(FusionConfig(), noise_filter=args.noise_filter),
    )

    slots = _collect_inputs(args.input, pdf_dpi=args.pdf_dpi, page_selection=args.page_selection)
    images = [(source, data) for source, data in slots if isinstance(data, bytes)]
    batch = extract_many(
        [data for _, data in images],
        config,
        sources=[source for source, _ in images],
        max_workers=args.max_workers,
    )

    # Stitch failures back in input order.
    extracted = iter(batch.items)
    items: list[ImageOutcome] = []
    for idx, (source, data) in enumerate(slots):
        if isinstance(data, bytes):
            item = next(extracted)
            items.append(replace(item, index=idx))
        else:
            items.append(ImageOutcome(index=idx, source=source, result=None, error=data))

    result = BatchResult(ok=all(item.ok for item in items), items=items)
    write_batch_artifact(result=result, out_file=args.out)

    failed = sum(1 for item in items if not item.ok)
    print(f"images={len(items)} failed={failed} ok={result.ok}")
    return 0 if result.ok else 2


if __name__ == "__main__":
    raise SystemExit(main())
