from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from io import BytesIO
from typing import Any

log = logging.getLogger(__name__)

_PAGE_TOKEN_RE = re.compile(r"^(\d+)(?:\s*-\s*(\d+))?$")


class PdfRenderError(Exception):
    code = "PDF_RENDER_FAILED"

    def __init__(self, message: str, *, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


@dataclass(frozen=True, slots=True)
class RenderedPage:
    page_num: int  # 1-indexed
    png_bytes: bytes
    width_px: int
    height_px: int


def _require_pdfium():
    try:
        import pypdfium2 as pdfium  # type: ignore

        return pdfium
    except ImportError as e:
        raise RuntimeError("Missing dependency: pypdfium2 is required for PDF page rendering.") from e


def parse_page_selection(selection: str | None, *, page_count: int) -> list[int]:
    """
    "1,3-5" -> [1, 3, 4, 5] (1-indexed, sorted, unique).
    None or blank selects every page.
    """

    if selection is None or not selection.strip():
        return list(range(1, page_count + 1))

    pages: set[int] = set()
    for token in filter(None, (t.strip() for t in selection.split(","))):
        m = _PAGE_TOKEN_RE.match(token)
        if m is None:
            raise ValueError(f"invalid page token: {token!r}")
        first = int(m.group(1))
        last = int(m.group(2) or first)
        if first < 1 or last < first or last > page_count:
            raise ValueError(f"page range {token!r} outside 1..{page_count}")
        pages.update(range(first, last + 1))
    return sorted(pages)


def render_pdf_pages(pdf_bytes: bytes, *, dpi: int = 200, page_selection: str | None = None) -> list[RenderedPage]:
    """
    Rasterize PDF pages to RGB PNG bytes so each page can be extracted as an
    independent image.
    """

    if dpi <= 0:
        raise ValueError("dpi must be > 0")
    pdfium = _require_pdfium()

    try:
        doc = pdfium.PdfDocument(pdf_bytes)
    except pdfium.PdfiumError as e:
        raise PdfRenderError("failed to open PDF", detail={"reason": str(e)}) from e

    try:
        page_count = len(doc)
        try:
            pages = parse_page_selection(page_selection, page_count=page_count)
        except ValueError as e:
            raise PdfRenderError(
                "Invalid page_selection",
                detail={"page_selection": page_selection, "error": str(e)},
            ) from e

        scale = dpi / 72.0  # PDF points are 1/72 inch
        rendered: list[RenderedPage] = []
        for page_num in pages:
            page = doc[page_num - 1]
            pil_img = page.render(scale=scale).to_pil().convert("RGB")
            buf = BytesIO()
            pil_img.save(buf, format="PNG")
            width_px, height_px = pil_img.size
            rendered.append(
                RenderedPage(
                    page_num=page_num,
                    png_bytes=buf.getvalue(),
                    width_px=int(width_px),
                    height_px=int(height_px),
                )
            )
        log.debug("rendered %d of %d PDF pages at %d dpi", len(rendered), page_count, dpi)
        return rendered
    finally:
        doc.close()
