from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FusionConfig:
    """
    Thresholds for folding multi-pass OCR output into one set of lines.

    Defaults are starting points; validate them against recorded engine
    output for the target language before relying on them.
    """

    # Two observations with IoU above this are the same physical line.
    duplicate_iou_threshold: float = 0.5

    # Inline merge: fragments of one visual line.
    inline_vertical_overlap_threshold: float = 0.6
    inline_max_gap_ratio: float = 1.0  # max_gap = max(line height * ratio, inline_min_gap_px)
    inline_min_gap_px: int = 6
    inline_max_horizontal_overlap: float = 0.5
    word_gap_ratio: float = 0.2  # gaps narrower than height * ratio join without a space

    # Filtering: how far a box may poke past the image edge.
    boundary_tolerance_px: int = 2

    # Suppression: both directional overlaps above this count as a duplicate.
    containment_overlap_threshold: float = 0.8

    # Duplicate merge: a longer text wins over a higher confidence when it is
    # at least this many characters and this many times longer.
    length_preference_min_gain: int = 2
    length_preference_ratio: float = 1.25

    noise_filter: bool = False

    def validate(self) -> None:
        for name in (
            "duplicate_iou_threshold",
            "inline_vertical_overlap_threshold",
            "inline_max_horizontal_overlap",
            "containment_overlap_threshold",
        ):
            value = getattr(self, name)
            if not (0.0 <= value <= 1.0):
                raise ValueError(f"{name} must be within [0, 1]")
        if self.inline_max_gap_ratio < 0:
            raise ValueError("inline_max_gap_ratio must be >= 0")
        if self.inline_min_gap_px < 0:
            raise ValueError("inline_min_gap_px must be >= 0")
        if self.word_gap_ratio < 0:
            raise ValueError("word_gap_ratio must be >= 0")
        if self.boundary_tolerance_px < 0:
            raise ValueError("boundary_tolerance_px must be >= 0")
        if self.length_preference_min_gain < 0:
            raise ValueError("length_preference_min_gain must be >= 0")
        if self.length_preference_ratio < 1.0:
            raise ValueError("length_preference_ratio must be >= 1")
