from __future__ import annotations

import logging
import re

from .engines.base import OcrEngine
from .errors import EngineInvocationError, UnsupportedLanguageError

log = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[+,\s]+")


def split_languages(requested: str) -> list[str]:
    return [lang for lang in _SEPARATORS.split(requested.strip()) if lang]


def normalize_languages(requested: str, engine: OcrEngine) -> str:
    """
    Reduce a requested language list to the languages the engine has installed,
    joined the way Tesseract expects ("eng+jpn").

    Unavailable languages are dropped with a warning; if none remain,
    UnsupportedLanguageError lists what is supported. When the engine cannot
    enumerate its languages the request is passed through unchanged.
    """

    wanted = split_languages(requested)
    if not wanted:
        raise UnsupportedLanguageError("no OCR language requested", requested=[], supported=[])

    try:
        available = engine.list_languages()
    except EngineInvocationError as e:
        log.warning("could not list OCR languages (%s); using request as-is", e.message)
        return "+".join(wanted)

    chosen = [lang for lang in wanted if lang in available]
    missing = [lang for lang in wanted if lang not in available]
    if not chosen:
        raise UnsupportedLanguageError(
            f"OCR language(s) not available: {', '.join(missing)}",
            requested=wanted,
            supported=available,
        )
    if missing:
        log.warning(
            "OCR language(s) not available: %s (available: %s)",
            ", ".join(missing),
            ", ".join(available),
        )
    return "+".join(chosen)
