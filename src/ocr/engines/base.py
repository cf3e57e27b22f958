from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from ..contracts import OutputFormat, RawOutput


class OcrEngine(ABC):
    """
    Interface for OCR recognition engines.

    IMPORTANT:
    - Engines return the backend's structured output verbatim (hOCR or TSV text).
    - Parsing, merging and filtering happen outside the engine.
    - A failed invocation raises EngineInvocationError; it never returns empty output instead.
    """

    @abstractmethod
    def recognize(
        self, *, image_file: Path, psm: int, languages: str, output_format: OutputFormat
    ) -> RawOutput:
        raise NotImplementedError

    @abstractmethod
    def list_languages(self) -> list[str]:
        raise NotImplementedError
