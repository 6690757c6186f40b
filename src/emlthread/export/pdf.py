"""Paginated PDF export of thread records."""

import io
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone

from emlthread.config import ExportSettings, default_settings
from emlthread.export.layout import DocumentLayout
from emlthread.models import ThreadRecord

logger = logging.getLogger(__name__)

EMPTY_DOCUMENT_NOTICE = "No messages were extracted."


@dataclass(frozen=True, slots=True)
class RenderedDocument:
    """A finished PDF with its layout bookkeeping.

    Attributes:
        content: PDF bytes.
        page_count: Total number of pages.
        record_pages: Page number on which each record starts.
        footer_labels: "Page N of TOTAL" label stamped on each page.
    """

    content: bytes
    page_count: int
    record_pages: tuple[int, ...]
    footer_labels: tuple[str, ...]


def render_pdf(
    records: Sequence[ThreadRecord],
    settings: ExportSettings | None = None,
    generated_at: datetime | None = None,
) -> RenderedDocument:
    """Lay out records as a PDF.

    Args:
        records: Records in output order.
        settings: Presentation settings; defaults when omitted.
        generated_at: Timestamp for the running header; now (UTC) when omitted.

    Returns:
        RenderedDocument with the PDF bytes and page bookkeeping.
    """
    settings = settings or default_settings()
    generated_at = generated_at or datetime.now(timezone.utc)

    buffer = io.BytesIO()
    layout = DocumentLayout(buffer, settings, generated_at)

    if not records:
        layout.draw_notice(EMPTY_DOCUMENT_NOTICE)

    for index, record in enumerate(records, start=1):
        layout.draw_record(record, index, len(records))

    page_count = layout.page_count
    layout.finish()

    return RenderedDocument(
        content=buffer.getvalue(),
        page_count=page_count,
        record_pages=tuple(layout.record_pages),
        footer_labels=tuple(layout.footer_labels),
    )


def build_pdf(
    records: Sequence[ThreadRecord],
    settings: ExportSettings | None = None,
    generated_at: datetime | None = None,
) -> bytes:
    """Lay out records as a PDF and return its bytes."""
    return render_pdf(records, settings, generated_at).content
