from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from ..contracts import OcrConfig, OutputFormat, RawOutput
from ..errors import EngineInvocationError, EngineNotInstalledError
from .base import OcrEngine

log = logging.getLogger(__name__)


class TesseractCliEngine(OcrEngine):
    """
    Tesseract OCR via the `tesseract` CLI, writing hOCR or TSV to stdout.

    This engine performs no correction, no merging, and no filtering.
    """

    def __init__(self, config: OcrConfig) -> None:
        self._config = config

    def _run(self, args: list[str]) -> str:
        cmd = [self._config.tesseract_cmd, *args]
        try:
            proc = subprocess.run(
                cmd,
                check=False,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self._config.timeout_s,
            )
        except FileNotFoundError as e:
            raise EngineNotInstalledError(
                "tesseract binary not found on PATH",
                detail={"expected_command": self._config.tesseract_cmd},
            ) from e
        except subprocess.TimeoutExpired as e:
            raise EngineInvocationError(
                "OCR backend timed out",
                detail={"timeout_s": self._config.timeout_s},
            ) from e

        if proc.returncode != 0:
            raise EngineInvocationError(
                "OCR backend returned a non-zero exit code",
                detail={
                    "returncode": proc.returncode,
                    "stderr": (proc.stderr or "")[-4000:],  # truncate for artifact stability
                },
            )
        return proc.stdout

    def recognize(
        self, *, image_file: Path, psm: int, languages: str, output_format: OutputFormat
    ) -> RawOutput:
        args = [
            str(image_file),
            "stdout",
            "-l",
            languages,
            "--oem",
            str(self._config.oem),
            "--psm",
            str(psm),
            "--dpi",
            str(self._config.dpi),
            output_format.value,
        ]
        log.debug("tesseract psm=%d format=%s languages=%s", psm, output_format.value, languages)
        return RawOutput(format=output_format, text=self._run(args))

    def list_languages(self) -> list[str]:
        stdout = self._run(["--list-langs"])
        # First line is a header like: List of available languages in "/usr/share/tessdata/" (3):
        langs: list[str] = []
        for idx, line in enumerate(stdout.splitlines()):
            if idx == 0:
                continue
            value = line.strip()
            if value:
                langs.append(value)
        return langs
