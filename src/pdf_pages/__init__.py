"""
PDF input: render pages to raster images for OCR.

This package only rasterizes; it performs NO OCR, text extraction, or layout inference.
"""

from .render import PdfRenderError, RenderedPage, parse_page_selection, render_pdf_pages

__all__ = ["PdfRenderError", "RenderedPage", "parse_page_selection", "render_pdf_pages"]
