from __future__ import annotations

import unittest
from io import BytesIO

import pypdfium2 as pdfium
from PIL import Image

from pdf_pages import PdfRenderError, parse_page_selection, render_pdf_pages


def _blank_pdf(pages: int, *, width_pt: float = 144, height_pt: float = 72) -> bytes:
    doc = pdfium.PdfDocument.new()
    for _ in range(pages):
        doc.new_page(width_pt, height_pt)
    buf = BytesIO()
    doc.save(buf)
    doc.close()
    return buf.getvalue()


class TestPageSelection(unittest.TestCase):
    def test_all_pages_by_default(self) -> None:
        self.assertEqual(parse_page_selection(None, page_count=3), [1, 2, 3])
        self.assertEqual(parse_page_selection("  ", page_count=2), [1, 2])

    def test_ranges_are_sorted_and_unique(self) -> None:
        self.assertEqual(parse_page_selection("4, 1-2,2", page_count=5), [1, 2, 4])

    def test_invalid_selection(self) -> None:
        for selection in ("0", "3-1", "9"):
            with self.subTest(selection=selection):
                with self.assertRaises(ValueError):
                    parse_page_selection(selection, page_count=5)


class TestRenderPdfPages(unittest.TestCase):
    def test_renders_every_page_at_dpi(self) -> None:
        pages = render_pdf_pages(_blank_pdf(2), dpi=72)

        self.assertEqual([p.page_num for p in pages], [1, 2])
        for page in pages:
            self.assertEqual((page.width_px, page.height_px), (144, 72))
            im = Image.open(BytesIO(page.png_bytes))
            self.assertEqual(im.format, "PNG")
            self.assertEqual(im.size, (144, 72))

    def test_page_selection(self) -> None:
        pages = render_pdf_pages(_blank_pdf(3), dpi=36, page_selection="2")
        self.assertEqual([p.page_num for p in pages], [2])
        self.assertEqual((pages[0].width_px, pages[0].height_px), (72, 36))

    def test_bad_selection_is_render_error(self) -> None:
        with self.assertRaises(PdfRenderError) as ctx:
            render_pdf_pages(_blank_pdf(1), page_selection="2-3")
        self.assertEqual(ctx.exception.code, "PDF_RENDER_FAILED")

    def test_not_a_pdf(self) -> None:
        with self.assertRaises(PdfRenderError):
            render_pdf_pages(b"%PDF-1.7 truncated")


if __name__ == "__main__":
    unittest.main()
