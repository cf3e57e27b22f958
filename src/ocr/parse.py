from __future__ import annotations

import csv
import re
from dataclasses import dataclass
from html.parser import HTMLParser
from statistics import median_high

from contracts.ocr import PixelBox, RecognizedLine
from fusion.geometry import union_box
from fusion.text import is_cjk, needs_space

from .contracts import OutputFormat, RawOutput
from .errors import OutputParseError

_BBOX_RE = re.compile(r"\bbbox\s+(-?\d+)\s+(-?\d+)\s+(-?\d+)\s+(-?\d+)")
_WCONF_RE = re.compile(r"\bx_wconf\s+(-?\d+(?:\.\d+)?)")

_LINE_CLASSES = ("ocr_line", "ocr_caption", "ocr_textfloat", "ocr_header")

TSV_COLUMNS = (
    "level",
    "page_num",
    "block_num",
    "par_num",
    "line_num",
    "word_num",
    "left",
    "top",
    "width",
    "height",
    "conf",
    "text",
)

WORD_LEVEL = 5  # 1=page, 2=block, 3=para, 4=line, 5=word


@dataclass(frozen=True, slots=True)
class WordToken:
    text: str
    box: PixelBox
    conf: float

    @property
    def length(self) -> int:
        return max(len(self.text), 1)


def _keep_hocr_word(text: str, conf: float, box: PixelBox) -> bool:
    if not text or box.w == 0:
        return False
    if box.h < 8:
        return conf >= 80.0 and len(text) >= 2
    if conf < 55.0 and len(text) <= 1:
        return False
    if conf < 60.0 and not any(ch.isalnum() or is_cjk(ch) for ch in text):
        return False
    return True


def split_word_segments(words: list[WordToken]) -> list[list[WordToken]]:
    """
    Split one engine line (words sorted by x) where a large horizontal gap or a
    vertical jump shows it actually spans separate text runs.
    """

    if len(words) <= 1:
        return [words] if words else []

    median_h = max(median_high([w.box.h for w in words]), 1)
    gap_threshold = min(max(median_h * 2.5, 12.0), 120.0)
    vertical_threshold = min(max(median_h * 0.9, 6.0), 80.0)

    segments: list[list[WordToken]] = []
    current: list[WordToken] = [words[0]]
    last_right = words[0].box.right()
    last_center_y = words[0].box.y + words[0].box.h * 0.5
    for word in words[1:]:
        gap = max(word.box.x - last_right, 0)
        center_y = word.box.y + word.box.h * 0.5
        if gap > gap_threshold or abs(center_y - last_center_y) > vertical_threshold:
            segments.append(current)
            current = [word]
            last_right = word.box.right()
            last_center_y = center_y
        else:
            current.append(word)
            last_right = max(last_right, word.box.right())
            last_center_y = (last_center_y + center_y) * 0.5
    segments.append(current)
    return segments


def build_line(words: list[WordToken]) -> RecognizedLine | None:
    if not words:
        return None

    parts: list[str] = []
    for word in words:
        if parts and needs_space(parts[-1], word.text):
            parts.append(" ")
        parts.append(word.text)
    text = "".join(parts).strip()
    if not text:
        return None

    box = words[0].box
    for word in words[1:]:
        box = union_box(box, word.box)

    weights = sum(w.length for w in words)
    conf = sum(w.conf * w.length for w in words) / weights if weights > 0 else 0.0
    median_h = max(median_high([w.box.h for w in words]), 1)
    font_size = min(max(median_h * 0.9, 8.0), 96.0)
    return RecognizedLine(text=text, box=box, confidence=conf, font_size=font_size)


def _lines_from_groups(groups: list[list[WordToken]]) -> list[RecognizedLine]:
    lines: list[RecognizedLine] = []
    for words in groups:
        ordered = sorted(words, key=lambda w: w.box.x)
        for segment in split_word_segments(ordered):
            line = build_line(segment)
            if line is not None:
                lines.append(line)
    return lines


class _HocrParser(HTMLParser):
    """Collect ocrx_word spans grouped by their enclosing line span."""

    def __init__(self) -> None:
        super().__init__()
        self.saw_page = False
        self.groups: list[list[WordToken]] = []
        self._span_depth = 0
        self._line: list[WordToken] | None = None
        self._line_depth = -1
        self._word_title: str | None = None
        self._word_depth = -1
        self._word_text: list[str] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        d = dict(attrs)
        cls = d.get("class") or ""
        title = d.get("title") or ""
        if "ocr_page" in cls:
            self.saw_page = True
        if tag != "span":
            return
        self._span_depth += 1
        if any(c in cls for c in _LINE_CLASSES) and self._line is None:
            self._line = []
            self._line_depth = self._span_depth
        elif "ocrx_word" in cls and self._word_title is None:
            self._word_title = title
            self._word_depth = self._span_depth
            self._word_text = []

    def handle_data(self, data: str) -> None:
        if self._word_title is not None:
            self._word_text.append(data)

    def handle_endtag(self, tag: str) -> None:
        if tag != "span":
            return
        if self._word_title is not None and self._span_depth == self._word_depth:
            self._finish_word()
        elif self._line is not None and self._span_depth == self._line_depth:
            if self._line:
                self.groups.append(self._line)
            self._line = None
        self._span_depth -= 1

    def _finish_word(self) -> None:
        title = self._word_title or ""
        text = "".join(self._word_text).replace("\u00a0", " ").strip()
        self._word_title = None
        self._word_text = []

        m_box = _BBOX_RE.search(title)
        m_conf = _WCONF_RE.search(title)
        if m_box is None or m_conf is None:
            raise OutputParseError(
                "hOCR word is missing bbox or x_wconf",
                detail={"title": title[:200]},
            )
        x0, y0, x1, y1 = (int(v) for v in m_box.groups())
        if x1 <= x0 or y1 <= y0 or x0 < 0 or y0 < 0:
            return
        box = PixelBox.from_corners(x0, y0, x1, y1)
        conf = float(m_conf.group(1))
        if self._line is not None and _keep_hocr_word(text, conf, box):
            self._line.append(WordToken(text=text, box=box, conf=conf))


def parse_hocr_lines(hocr: str) -> list[RecognizedLine]:
    """
    Parse Tesseract hOCR into lines.

    Blank output is well-formed and yields no lines. Non-blank output without
    an ocr_page element, or words without bbox/x_wconf, raise OutputParseError.
    """

    if not hocr.strip():
        return []
    parser = _HocrParser()
    parser.feed(hocr)
    parser.close()
    if not parser.saw_page:
        raise OutputParseError("hOCR output has no ocr_page element", detail={"head": hocr[:200]})
    return _lines_from_groups(parser.groups)


def _parse_int(row: dict[str, str | None], key: str, row_num: int) -> int:
    raw = row.get(key)
    try:
        return int(raw or "")
    except ValueError as e:
        raise OutputParseError(
            f"TSV row {row_num}: column {key!r} is not an integer",
            detail={"row": row_num, "column": key, "value": raw},
        ) from e


def parse_tsv_lines(tsv: str) -> list[RecognizedLine]:
    """
    Parse Tesseract TSV into lines, grouping word rows by (page, block, par, line).

    Blank output and header-only output yield no lines. A missing column or a
    non-numeric geometry/confidence value raises OutputParseError.
    """

    if not tsv.strip():
        return []
    reader = csv.DictReader(tsv.splitlines(), delimiter="\t", quoting=csv.QUOTE_NONE)
    header = reader.fieldnames or []
    missing = [c for c in TSV_COLUMNS if c not in header]
    if missing:
        raise OutputParseError("TSV header is missing columns", detail={"missing": missing})

    groups: dict[tuple[int, int, int, int], list[WordToken]] = {}
    for row_num, row in enumerate(reader, start=2):
        if _parse_int(row, "level", row_num) != WORD_LEVEL:
            continue
        key = (
            _parse_int(row, "page_num", row_num),
            _parse_int(row, "block_num", row_num),
            _parse_int(row, "par_num", row_num),
            _parse_int(row, "line_num", row_num),
        )
        left = _parse_int(row, "left", row_num)
        top = _parse_int(row, "top", row_num)
        width = _parse_int(row, "width", row_num)
        height = _parse_int(row, "height", row_num)
        conf_raw = row.get("conf")
        try:
            conf = float(conf_raw or "")
        except ValueError as e:
            raise OutputParseError(
                f"TSV row {row_num}: conf is not a number",
                detail={"row": row_num, "value": conf_raw},
            ) from e

        text = (row.get("text") or "").strip()
        if not text or conf < 0 or width <= 0 or height <= 0:
            continue
        groups.setdefault(key, []).append(
            WordToken(text=text, box=PixelBox(x=left, y=top, w=width, h=height), conf=conf)
        )

    return _lines_from_groups(list(groups.values()))


def parse_raw_output(raw: RawOutput) -> list[RecognizedLine]:
    if raw.format == OutputFormat.HOCR:
        return parse_hocr_lines(raw.text)
    return parse_tsv_lines(raw.text)
