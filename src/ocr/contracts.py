from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from fusion.config import FusionConfig


class OcrEngineName(str, Enum):
    """OCR backends supported by this module."""

    TESSERACT_CLI = "tesseract_cli"


class OutputFormat(str, Enum):
    HOCR = "hocr"
    TSV = "tsv"


@dataclass(frozen=True, slots=True)
class RawOutput:
    """Engine output for one (image variant, page segmentation mode) pass."""

    format: OutputFormat
    text: str


@dataclass(frozen=True, slots=True)
class OcrConfig:
    """
    Extraction configuration.

    This module must NOT read environment variables itself; callers (CLI,
    services) build the config explicitly.
    """

    engine: OcrEngineName = OcrEngineName.TESSERACT_CLI
    languages: str = "eng"  # "+", "," or space separated Tesseract language codes
    tesseract_cmd: str = "tesseract"
    oem: int = 1
    dpi: int = 300

    # The primary variant gets full automatic layout then single-column;
    # later variants only single-column.
    primary_psm_modes: tuple[int, ...] = (3, 4)
    secondary_psm_modes: tuple[int, ...] = (4,)

    max_scale: int = 3
    max_scaled_width: int = 6000
    binarize_threshold: float = 0.65

    timeout_s: float | None = None  # no internal deadline unless a caller sets one
    fusion: FusionConfig = field(default_factory=FusionConfig)

    def __post_init__(self) -> None:
        if not self.languages.strip():
            raise ValueError("languages must not be empty")
        if not self.primary_psm_modes:
            raise ValueError("primary_psm_modes must not be empty")
        if self.max_scale < 1:
            raise ValueError("max_scale must be >= 1")
        if self.max_scaled_width < 1:
            raise ValueError("max_scaled_width must be >= 1")
        if not (0.0 < self.binarize_threshold < 1.0):
            raise ValueError("binarize_threshold must be within (0, 1)")
        if self.timeout_s is not None and self.timeout_s <= 0:
            raise ValueError("timeout_s must be > 0 when set")
        self.fusion.validate()

    def psm_modes_for(self, variant_index: int) -> tuple[int, ...]:
        return self.primary_psm_modes if variant_index == 0 else self.secondary_psm_modes
