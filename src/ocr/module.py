from __future__ import annotations

import logging
import tempfile
import threading
from pathlib import Path

from contracts.ocr import FusedResult, RecognizedLine
from fusion.merge import finalize_lines, merge_lines

from .contracts import OcrConfig, OcrEngineName, OutputFormat
from .engines.base import OcrEngine
from .engines.tesseract_cli import TesseractCliEngine
from .errors import ExtractionCancelled
from .languages import normalize_languages
from .parse import parse_raw_output
from .preprocess import decode_image, ocr_scale, preprocess_variants

log = logging.getLogger(__name__)


def _get_engine(config: OcrConfig) -> OcrEngine:
    if config.engine == OcrEngineName.TESSERACT_CLI:
        return TesseractCliEngine(config)
    raise ValueError(f"Unsupported OCR engine: {config.engine}")


def _check_cancelled(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise ExtractionCancelled("extraction cancelled by caller")


def recognize_pass(
    engine: OcrEngine, *, image_file: Path, psm: int, languages: str
) -> list[RecognizedLine]:
    """
    One recognition pass: hOCR first, TSV for the same pass when hOCR yields
    no lines. Engine and parse failures propagate.
    """

    raw = engine.recognize(image_file=image_file, psm=psm, languages=languages, output_format=OutputFormat.HOCR)
    lines = parse_raw_output(raw)
    if not lines:
        log.debug("psm=%d: hOCR produced no lines, falling back to TSV", psm)
        raw = engine.recognize(image_file=image_file, psm=psm, languages=languages, output_format=OutputFormat.TSV)
        lines = parse_raw_output(raw)
    return lines


def extract_lines(
    image_bytes: bytes,
    config: OcrConfig | None = None,
    *,
    engine: OcrEngine | None = None,
    cancel: threading.Event | None = None,
) -> FusedResult:
    """
    Recognize and fuse the text lines of one image.

    Every recognition batch is folded into the running line set as soon as it
    is parsed; the final passes (scale back, filter, inline merge, suppress)
    run once at the end. Any OcrFailure aborts the image: there is no partial
    result.
    """

    cfg = config or OcrConfig()
    image = decode_image(image_bytes)
    width, height = image.size
    engine = engine or _get_engine(cfg)

    scale = ocr_scale(width, max_scale=cfg.max_scale, max_scaled_width=cfg.max_scaled_width)
    languages = normalize_languages(cfg.languages, engine)
    variants = preprocess_variants(image, scale, binarize_threshold=cfg.binarize_threshold)
    log.info("OCR %dx%d scale=%d variants=%d languages=%s", width, height, scale, len(variants), languages)

    lines: list[RecognizedLine] = []
    for idx, variant in enumerate(variants):
        _check_cancelled(cancel)
        with tempfile.TemporaryDirectory(prefix="ocr_pass_") as tmp:
            image_file = Path(tmp) / f"variant_{idx}.png"
            variant.save(image_file, format="PNG")
            for psm in cfg.psm_modes_for(idx):
                _check_cancelled(cancel)
                batch = recognize_pass(engine, image_file=image_file, psm=psm, languages=languages)
                lines = merge_lines(lines, batch, cfg.fusion)
                log.debug("variant=%d psm=%d batch=%d running=%d", idx, psm, len(batch), len(lines))

    fused = finalize_lines(lines, scale=scale, width=width, height=height, config=cfg.fusion)
    log.info("OCR fused %d lines", len(fused))
    return FusedResult(image_width=width, image_height=height, lines=fused)


def extract_lines_from_file(
    image_file: Path,
    config: OcrConfig | None = None,
    *,
    engine: OcrEngine | None = None,
) -> FusedResult:
    return extract_lines(image_file.read_bytes(), config, engine=engine)
