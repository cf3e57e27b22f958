from __future__ import annotations

from typing import Any

from contracts.ocr import OcrError


class OcrFailure(Exception):
    """
    Fatal failure of one image's extraction. No partial result accompanies it.

    `code` is a stable identifier for artifacts; `detail` must stay
    JSON-serializable.
    """

    code = "OCR_FAILED"

    def __init__(self, message: str, *, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_error(self) -> OcrError:
        return OcrError(code=self.code, message=self.message, detail=self.detail)


class ImageDecodeError(OcrFailure):
    code = "OCR_IMAGE_DECODE_FAILED"


class EngineInvocationError(OcrFailure):
    code = "OCR_BACKEND_ERROR"


class OutputParseError(OcrFailure):
    code = "OCR_OUTPUT_MALFORMED"


class UnsupportedLanguageError(OcrFailure):
    code = "OCR_LANGUAGE_UNSUPPORTED"

    def __init__(self, message: str, *, requested: list[str], supported: list[str]) -> None:
        super().__init__(message, detail={"requested": list(requested), "supported": list(supported)})
        self.requested = list(requested)
        self.supported = list(supported)


class ExtractionCancelled(OcrFailure):
    code = "OCR_CANCELLED"


class EngineNotInstalledError(EngineInvocationError):
    code = "OCR_BACKEND_NOT_INSTALLED"
