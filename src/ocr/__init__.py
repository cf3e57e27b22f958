"""
OCR extraction: image -> fused text lines with pixel boxes.

Flow per image:
- Decode, upscale narrow images, build recognition variants
- For each variant and page segmentation mode: run the engine (hOCR, TSV fallback)
  and fold the parsed batch into the running line set
- Scale back, filter, rejoin split lines, suppress residual duplicates

Failures (decode, engine, parse, language) abort the image; no partial result
is published. No environment variable reads in this package.
"""

from .batch import BatchResult, ImageOutcome, extract_many
from .contracts import OcrConfig, OcrEngineName, OutputFormat, RawOutput
from .engines import OcrEngine, TesseractCliEngine
from .errors import (
    EngineInvocationError,
    EngineNotInstalledError,
    ExtractionCancelled,
    ImageDecodeError,
    OcrFailure,
    OutputParseError,
    UnsupportedLanguageError,
)
from .module import extract_lines, extract_lines_from_file

__all__ = [
    "BatchResult",
    "ImageOutcome",
    "extract_many",
    "OcrConfig",
    "OcrEngineName",
    "OutputFormat",
    "RawOutput",
    "OcrEngine",
    "TesseractCliEngine",
    "OcrFailure",
    "ImageDecodeError",
    "EngineInvocationError",
    "EngineNotInstalledError",
    "OutputParseError",
    "UnsupportedLanguageError",
    "ExtractionCancelled",
    "extract_lines",
    "extract_lines_from_file",
]
