"""Exporters that turn thread records into document and grid files."""

from emlthread.export.layout import DocumentLayout, LayoutCursor, TextStyle, wrap_to_width
from emlthread.export.pdf import RenderedDocument, build_pdf, render_pdf
from emlthread.export.tabular import build_csv, build_xlsx, estimate_row_lines

__all__ = [
    "build_csv",
    "build_pdf",
    "build_xlsx",
    "DocumentLayout",
    "estimate_row_lines",
    "LayoutCursor",
    "render_pdf",
    "RenderedDocument",
    "TextStyle",
    "wrap_to_width",
]
