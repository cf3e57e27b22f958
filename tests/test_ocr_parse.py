from __future__ import annotations

import unittest

from contracts.ocr import PixelBox
from ocr.contracts import OutputFormat, RawOutput
from ocr.errors import OutputParseError
from ocr.parse import TSV_COLUMNS, parse_hocr_lines, parse_raw_output, parse_tsv_lines


def _hocr(lines: list[list[tuple[str, int, int, int, int, float]]], *, width: int = 400, height: int = 100) -> str:
    body: list[str] = []
    for words in lines:
        spans = "".join(
            f"<span class='ocrx_word' title='bbox {x0} {y0} {x1} {y1}; x_wconf {conf:g}'>{text}</span> "
            for text, x0, y0, x1, y1, conf in words
        )
        body.append(f"<span class='ocr_line' title='bbox 0 0 {width} {height}; baseline 0 0'>{spans}</span>")
    return (
        "<?xml version='1.0' encoding='UTF-8'?>\n"
        "<html><body>"
        f"<div class='ocr_page' id='page_1' title='image \"x.png\"; bbox 0 0 {width} {height}; ppageno 0'>"
        f"<div class='ocr_carea'><p class='ocr_par'>{''.join(body)}</p></div>"
        "</div></body></html>\n"
    )


def _tsv(rows: list[tuple]) -> str:
    out = ["\t".join(TSV_COLUMNS)]
    out.extend("\t".join(str(v) for v in row) for row in rows)
    return "\n".join(out) + "\n"


class TestParseHocr(unittest.TestCase):
    def test_words_join_into_lines(self) -> None:
        hocr = _hocr(
            [
                [("Hello", 10, 10, 60, 30, 90), ("world", 66, 10, 110, 30, 80)],
                [("Total", 10, 50, 60, 70, 95), ("42", 300, 50, 330, 70, 90)],
            ]
        )

        lines = parse_hocr_lines(hocr)

        self.assertEqual([ln.text for ln in lines], ["Hello world", "Total", "42"])
        first = lines[0]
        self.assertEqual(first.box, PixelBox(x=10, y=10, w=100, h=20))
        self.assertAlmostEqual(first.confidence, 85.0)
        self.assertAlmostEqual(first.font_size, 18.0)

    def test_punctuation_attaches_without_space(self) -> None:
        hocr = _hocr([[("Total", 10, 10, 60, 30, 90), (":", 61, 10, 66, 30, 90), ("42", 70, 10, 90, 30, 90)]])
        self.assertEqual([ln.text for ln in parse_hocr_lines(hocr)], ["Total:42"])

    def test_low_confidence_noise_words_are_dropped(self) -> None:
        hocr = _hocr(
            [
                [
                    ("|", 2, 10, 5, 30, 40),
                    ("~~", 6, 10, 9, 30, 50),
                    ("Hello", 10, 10, 60, 30, 90),
                    ("ab", 62, 10, 70, 15, 70),  # tiny box, not confident enough
                ]
            ]
        )
        lines = parse_hocr_lines(hocr)
        self.assertEqual([ln.text for ln in lines], ["Hello"])

    def test_degenerate_word_box_is_skipped(self) -> None:
        hocr = _hocr([[("Hello", 10, 10, 60, 30, 90), ("ghost", 70, 10, 70, 30, 90)]])
        self.assertEqual([ln.text for ln in parse_hocr_lines(hocr)], ["Hello"])

    def test_entities_are_unescaped(self) -> None:
        hocr = _hocr([[("A&amp;B", 10, 10, 60, 30, 90)]])
        self.assertEqual(parse_hocr_lines(hocr)[0].text, "A&B")

    def test_blank_output_yields_no_lines(self) -> None:
        self.assertEqual(parse_hocr_lines(""), [])
        self.assertEqual(parse_hocr_lines(_hocr([])), [])

    def test_missing_page_is_malformed(self) -> None:
        with self.assertRaises(OutputParseError) as ctx:
            parse_hocr_lines("<html><body><p>nothing here</p></body></html>")
        self.assertEqual(ctx.exception.code, "OCR_OUTPUT_MALFORMED")

    def test_word_without_confidence_is_malformed(self) -> None:
        hocr = _hocr([[("Hello", 10, 10, 60, 30, 90)]]).replace("; x_wconf 90", "")
        with self.assertRaises(OutputParseError):
            parse_hocr_lines(hocr)


class TestParseTsv(unittest.TestCase):
    def test_word_rows_group_by_line(self) -> None:
        tsv = _tsv(
            [
                (1, 1, 0, 0, 0, 0, 0, 0, 400, 100, -1, ""),
                (4, 1, 1, 1, 1, 0, 10, 10, 100, 20, -1, ""),
                (5, 1, 1, 1, 1, 1, 10, 10, 50, 20, 91.5, "Hello"),
                (5, 1, 1, 1, 1, 2, 66, 10, 44, 20, 88.0, "world"),
                (5, 1, 1, 1, 2, 1, 10, 50, 50, 20, -1, ""),
                (5, 1, 2, 1, 1, 1, 10, 50, 60, 20, 93.0, "Second"),
            ]
        )

        lines = parse_tsv_lines(tsv)

        self.assertEqual([ln.text for ln in lines], ["Hello world", "Second"])
        self.assertEqual(lines[0].box, PixelBox(x=10, y=10, w=100, h=20))
        self.assertAlmostEqual(lines[0].confidence, 89.75)

    def test_blank_and_header_only(self) -> None:
        self.assertEqual(parse_tsv_lines(""), [])
        self.assertEqual(parse_tsv_lines(_tsv([])), [])

    def test_missing_columns_are_malformed(self) -> None:
        with self.assertRaises(OutputParseError) as ctx:
            parse_tsv_lines("level\tleft\ttop\n5\t1\t2\n")
        self.assertIn("conf", ctx.exception.detail["missing"])

    def test_non_numeric_geometry_is_malformed(self) -> None:
        tsv = _tsv([(5, 1, 1, 1, 1, 1, "ten", 10, 50, 20, 90, "Hello")])
        with self.assertRaises(OutputParseError) as ctx:
            parse_tsv_lines(tsv)
        self.assertEqual(ctx.exception.detail["column"], "left")

    def test_parse_raw_output_dispatches_on_format(self) -> None:
        tsv = _tsv([(5, 1, 1, 1, 1, 1, 10, 10, 50, 20, 90, "Hello")])
        lines = parse_raw_output(RawOutput(format=OutputFormat.TSV, text=tsv))
        self.assertEqual([ln.text for ln in lines], ["Hello"])


if __name__ == "__main__":
    unittest.main()
