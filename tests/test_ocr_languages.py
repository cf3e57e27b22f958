from __future__ import annotations

import unittest
from pathlib import Path

from ocr.contracts import OutputFormat, RawOutput
from ocr.engines.base import OcrEngine
from ocr.errors import EngineInvocationError, UnsupportedLanguageError
from ocr.languages import normalize_languages, split_languages


class _LangEngine(OcrEngine):
    def __init__(self, languages: list[str] | None) -> None:
        self._languages = languages

    def recognize(self, *, image_file: Path, psm: int, languages: str, output_format: OutputFormat) -> RawOutput:
        raise AssertionError("recognize should not be called")

    def list_languages(self) -> list[str]:
        if self._languages is None:
            raise EngineInvocationError("OCR backend returned a non-zero exit code", detail={"returncode": 1})
        return list(self._languages)


class TestLanguages(unittest.TestCase):
    def test_split_accepts_plus_comma_and_space(self) -> None:
        self.assertEqual(split_languages("eng+jpn"), ["eng", "jpn"])
        self.assertEqual(split_languages(" eng, jpn  chi_sim "), ["eng", "jpn", "chi_sim"])
        self.assertEqual(split_languages("  "), [])

    def test_all_available(self) -> None:
        engine = _LangEngine(["eng", "jpn", "osd"])
        self.assertEqual(normalize_languages("eng,jpn", engine), "eng+jpn")

    def test_missing_languages_are_dropped_with_warning(self) -> None:
        engine = _LangEngine(["eng", "osd"])
        with self.assertLogs("ocr.languages", level="WARNING") as logs:
            self.assertEqual(normalize_languages("eng+deu", engine), "eng")
        self.assertIn("deu", logs.output[0])

    def test_none_available(self) -> None:
        engine = _LangEngine(["eng"])
        with self.assertRaises(UnsupportedLanguageError) as ctx:
            normalize_languages("deu+fra", engine)
        err = ctx.exception
        self.assertEqual(err.supported, ["eng"])
        self.assertEqual(err.requested, ["deu", "fra"])
        self.assertEqual(err.to_error().code, "OCR_LANGUAGE_UNSUPPORTED")

    def test_empty_request(self) -> None:
        with self.assertRaises(UnsupportedLanguageError):
            normalize_languages(" + ", _LangEngine(["eng"]))

    def test_enumeration_failure_passes_request_through(self) -> None:
        with self.assertLogs("ocr.languages", level="WARNING"):
            self.assertEqual(normalize_languages("eng deu", _LangEngine(None)), "eng+deu")


if __name__ == "__main__":
    unittest.main()
