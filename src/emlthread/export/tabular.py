"""Grid exports of thread records: styled XLSX and flat CSV.

Row heights in the XLSX grid are estimated from the body length instead
of measured; spreadsheet rows tolerate approximate sizing.
"""

import csv
import io
import logging
import math
from collections.abc import Sequence

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from emlthread.config import ExportSettings, default_settings
from emlthread.models import EXPORT_COLUMNS, ThreadRecord

logger = logging.getLogger(__name__)

# Excel rejects longer cell values
MAX_CELL_CHARS = 32767
_TRUNCATION_MARKER = " [truncated]"

SHEET_TITLE = "Emails"

_HEADER_FONT = Font(bold=True, color="FFFFFF")
_HEADER_FILL = PatternFill(fill_type="solid", start_color="1F4E78", end_color="1F4E78")
_STRIPE_FILL = PatternFill(fill_type="solid", start_color="F2F6FA", end_color="F2F6FA")
_THIN = Side(style="thin", color="BFC9D4")
_BORDER = Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN)
_HEADER_ALIGNMENT = Alignment(horizontal="center", vertical="center", wrap_text=True)
_CELL_ALIGNMENT = Alignment(vertical="top", wrap_text=True)


def estimate_row_lines(body: str, chars_per_line: int, max_lines: int) -> int:
    """Estimate how many wrapped lines a body cell needs.

    Args:
        body: Body text.
        chars_per_line: Characters assumed to fit on one line.
        max_lines: Upper bound on the estimate.

    Returns:
        ``ceil(len(body) / chars_per_line)`` clamped to ``[1, max_lines]``.
    """
    lines = math.ceil(len(body) / chars_per_line)
    return max(1, min(lines, max_lines))


def cell_text(value: str) -> str:
    """Make a string safe for a worksheet cell.

    Strips control characters openpyxl refuses and truncates values over
    Excel's cell limit.
    """
    value = ILLEGAL_CHARACTERS_RE.sub("", value)
    if len(value) > MAX_CELL_CHARS:
        logger.debug("Truncating cell value of %d characters", len(value))
        value = value[: MAX_CELL_CHARS - len(_TRUNCATION_MARKER)] + _TRUNCATION_MARKER
    return value


def build_xlsx(records: Sequence[ThreadRecord], settings: ExportSettings | None = None) -> bytes:
    """Build a styled XLSX workbook with one row per record.

    Args:
        records: Records in output order.
        settings: Presentation settings; defaults when omitted.

    Returns:
        XLSX file bytes.
    """
    settings = settings or default_settings()

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_TITLE

    sheet.append(list(EXPORT_COLUMNS))
    for column_index, width in enumerate(settings.xlsx_column_widths, start=1):
        sheet.column_dimensions[get_column_letter(column_index)].width = width
        header = sheet.cell(row=1, column=column_index)
        header.font = _HEADER_FONT
        header.fill = _HEADER_FILL
        header.border = _BORDER
        header.alignment = _HEADER_ALIGNMENT
    sheet.row_dimensions[1].height = 22

    for row_index, record in enumerate(records, start=2):
        sheet.append([cell_text(value) for value in record.as_row()])
        striped = row_index % 2 == 1
        for column_index in range(1, len(EXPORT_COLUMNS) + 1):
            cell = sheet.cell(row=row_index, column=column_index)
            cell.alignment = _CELL_ALIGNMENT
            cell.border = _BORDER
            if striped:
                cell.fill = _STRIPE_FILL

        lines = estimate_row_lines(record.body_text, settings.xlsx_chars_per_line, settings.xlsx_max_row_lines)
        sheet.row_dimensions[row_index].height = lines * settings.xlsx_line_height

    last_column = get_column_letter(len(EXPORT_COLUMNS))
    sheet.auto_filter.ref = f"A1:{last_column}{max(1, len(records) + 1)}"
    sheet.freeze_panes = "A2"

    buffer = io.BytesIO()
    workbook.save(buffer)
    logger.debug("Built XLSX grid with %d rows", len(records))
    return buffer.getvalue()


def build_csv(records: Sequence[ThreadRecord]) -> bytes:
    """Build a UTF-8 CSV with a header row and one row per record."""
    text = io.StringIO(newline="")
    writer = csv.writer(text)
    writer.writerow(EXPORT_COLUMNS)
    for record in records:
        writer.writerow(record.as_row())
    return text.getvalue().encode("utf-8")
