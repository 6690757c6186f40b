"""Cursor-based page layout on a reportlab canvas.

Draws text top-down with an explicit cursor, breaking pages when the
cursor reaches the footer region. Footers carry "Page N of TOTAL", so
they are stamped in a second pass once every page has been laid out.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, letter
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.pdfgen import canvas

from emlthread.config import ExportSettings
from emlthread.exceptions import InvalidInputError
from emlthread.models import NO_BODY_PLACEHOLDER, ThreadRecord

logger = logging.getLogger(__name__)

_PAGE_SIZES: dict[str, tuple[float, float]] = {"letter": letter, "A4": A4}

_INK = colors.HexColor("#1f2933")
_MUTED = colors.HexColor("#616e7c")
_RULE = colors.HexColor("#cbd2d9")
_CARD_FILL = colors.HexColor("#f5f7fa")


@dataclass(frozen=True, slots=True)
class TextStyle:
    """Font, size, and color for a run of text."""

    font_name: str
    size: float
    color: colors.Color = _INK


def measure(text: str, font_name: str, font_size: float) -> float:
    """Width of ``text`` in points, from the font's advance widths."""
    return pdfmetrics.stringWidth(text, font_name, font_size)


def _hard_split(word: str, font_name: str, font_size: float, max_width: float) -> list[str]:
    """Split a word that is wider than ``max_width`` character by character.

    A single character wider than ``max_width`` becomes its own piece.
    """
    pieces: list[str] = []
    current = ""
    for char in word:
        candidate = current + char
        if current and measure(candidate, font_name, font_size) > max_width:
            pieces.append(current)
            current = char
        else:
            current = candidate
    if current:
        pieces.append(current)
    return pieces


def wrap_to_width(text: str, font_name: str, font_size: float, max_width: float) -> list[str]:
    """Greedy word wrap measured in font units.

    Words are appended to the running line while its measured width stays
    within ``max_width``. A word that alone exceeds ``max_width`` is hard
    split so no line overflows (except a single unsplittable character).

    Args:
        text: Text to wrap; any whitespace separates words.
        font_name: Registered reportlab font name.
        font_size: Font size in points.
        max_width: Available width in points.

    Returns:
        Wrapped lines. Empty list for text without words.
    """
    lines: list[str] = []
    current = ""

    for word in text.split():
        if measure(word, font_name, font_size) > max_width:
            if current:
                lines.append(current)
            pieces = _hard_split(word, font_name, font_size, max_width)
            lines.extend(pieces[:-1])
            current = pieces[-1]
            continue

        candidate = f"{current} {word}" if current else word
        if measure(candidate, font_name, font_size) <= max_width:
            current = candidate
        else:
            lines.append(current)
            current = word

    if current:
        lines.append(current)
    return lines


def body_paragraphs(body: str) -> list[str]:
    """Split a body on blank lines and join each paragraph onto one line."""
    paragraphs = []
    for block in body.split("\n\n"):
        joined = " ".join(line.strip() for line in block.split("\n") if line.strip())
        if joined:
            paragraphs.append(joined)
    return paragraphs


def resolve_font(font_name: str, font_file: str = "") -> str:
    """Make a font available to the canvas.

    With ``font_file`` the TrueType file is registered under ``font_name``,
    which lets bodies in scripts outside cp1252 (Cyrillic, CJK) render.
    Without it ``font_name`` must already be known to reportlab, such as
    one of the standard Type 1 fonts.

    Args:
        font_name: Name the layout refers to the font by.
        font_file: Path to a .ttf file, or empty.

    Returns:
        ``font_name``.

    Raises:
        InvalidInputError: If the file cannot be loaded or the name is unknown.
    """
    if font_file:
        try:
            pdfmetrics.registerFont(TTFont(font_name, font_file))
        except (OSError, TTFError) as e:
            raise InvalidInputError(message=f"Cannot load font file {font_file!r}: {e}") from e
        logger.debug("Registered TrueType font %s from %s", font_name, font_file)
        return font_name

    try:
        pdfmetrics.getFont(font_name)
    except KeyError as e:
        raise InvalidInputError(message=f"Unknown font: {font_name!r}") from e
    return font_name


def _drawable(text: str, font_name: str) -> str:
    """Replace characters the standard Type 1 fonts cannot encode.

    Registered TrueType fonts embed their own glyphs, so text drawn with
    them passes through unchanged.
    """
    if font_name in pdfmetrics.standardFonts:
        return text.encode("cp1252", "replace").decode("cp1252")
    return text


class FooterStampingCanvas(canvas.Canvas):
    """Canvas that defers footers until the page count is known.

    ``showPage`` stores the finished page instead of emitting it. ``save``
    replays every stored page, stamps the footer with the final total,
    and only then writes the document.
    """

    def __init__(
        self,
        *args,
        footer_text: str = "",
        footer_style: TextStyle | None = None,
        margin: float = 54.0,
        **kwargs,
    ) -> None:
        super().__init__(*args, **kwargs)
        self._footer_text = footer_text
        self._footer_style = footer_style or TextStyle("Helvetica", 8.0, _MUTED)
        self._margin = margin
        self._saved_pages: list[dict] = []
        self.footer_labels: list[str] = []

    @property
    def page_count(self) -> int:
        return len(self._saved_pages)

    def showPage(self) -> None:
        self._saved_pages.append(dict(self.__dict__))
        self._startPage()

    def save(self) -> None:
        total = len(self._saved_pages)
        for number, state in enumerate(self._saved_pages, start=1):
            self.__dict__.update(state)
            self._stamp_footer(number, total)
            super().showPage()
        super().save()

    def _stamp_footer(self, number: int, total: int) -> None:
        width, _height = self._pagesize
        style = self._footer_style
        label = f"Page {number} of {total}"
        baseline = self._margin - style.size

        self.saveState()
        self.setStrokeColor(_RULE)
        self.setLineWidth(0.5)
        self.line(self._margin, self._margin, width - self._margin, self._margin)
        self.setFont(style.font_name, style.size)
        self.setFillColor(style.color)
        self.drawCentredString(width / 2, baseline, _drawable(self._footer_text, style.font_name))
        self.drawRightString(width - self._margin, baseline, label)
        self.restoreState()

        self.footer_labels.append(label)


@dataclass(slots=True)
class LayoutCursor:
    """Position of the next draw operation.

    ``y`` only decreases within a page and resets to ``content_top`` on a
    page break.
    """

    page_width: float
    page_height: float
    margin: float
    header_height: float
    footer_height: float
    page_number: int = 1
    y: float = 0.0

    def __post_init__(self) -> None:
        self.y = self.content_top

    @property
    def left(self) -> float:
        return self.margin

    @property
    def right(self) -> float:
        return self.page_width - self.margin

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def content_top(self) -> float:
        return self.page_height - self.margin - self.header_height

    @property
    def content_bottom(self) -> float:
        return self.margin + self.footer_height

    @property
    def at_top(self) -> bool:
        return self.y >= self.content_top

    def fits(self, needed: float) -> bool:
        return self.y - needed >= self.content_bottom

    def next_page(self) -> None:
        self.page_number += 1
        self.y = self.content_top


class DocumentLayout:
    """Lays out thread records as a paginated PDF.

    Each record after the first starts on a fresh page and consists of a
    heading, a metadata card, a divider, and the wrapped body paragraphs.
    Every page carries a running header (title and generation time) and
    a footer (brand text and "Page N of TOTAL").

    Example:
        layout = DocumentLayout(buffer, settings, generated_at)
        for index, record in enumerate(records, start=1):
            layout.draw_record(record, index, len(records))
        layout.finish()
    """

    def __init__(self, output: BinaryIO, settings: ExportSettings, generated_at: datetime) -> None:
        """Initialize the layout and open the first page.

        Args:
            output: Binary stream the PDF is written to on finish().
            settings: Presentation settings.
            generated_at: Timestamp shown in the running header.
        """
        self._settings = settings
        self._generated_label = f"Generated {generated_at:%Y-%m-%d %H:%M %Z}".rstrip()

        resolve_font(settings.font_regular, settings.font_regular_file)
        resolve_font(settings.font_bold, settings.font_bold_file)

        page_width, page_height = _PAGE_SIZES[settings.page_size]
        self.cursor = LayoutCursor(
            page_width=page_width,
            page_height=page_height,
            margin=settings.margin,
            header_height=settings.header_height,
            footer_height=settings.footer_height,
        )
        self.record_pages: list[int] = []

        self.heading_style = TextStyle(settings.font_bold, settings.heading_size)
        self.label_style = TextStyle(settings.font_bold, settings.label_size, _MUTED)
        self.value_style = TextStyle(settings.font_regular, settings.label_size)
        self.body_style = TextStyle(settings.font_regular, settings.body_size)

        self._canvas = FooterStampingCanvas(
            output,
            pagesize=(page_width, page_height),
            footer_text=settings.brand_text,
            footer_style=TextStyle(settings.font_regular, max(settings.label_size - 1, 1.0), _MUTED),
            margin=settings.margin,
        )
        self._canvas.setTitle(settings.title)
        self._canvas.setAuthor(settings.brand_text)
        self._canvas.setCreator(settings.brand_text)

        self._draw_running_header()

    @property
    def page_count(self) -> int:
        """Pages produced so far, including the open page."""
        return self.cursor.page_number

    @property
    def footer_labels(self) -> list[str]:
        """Footer labels stamped by finish(), one per page."""
        return self._canvas.footer_labels

    def new_page(self) -> None:
        """Close the current page and open the next one."""
        self._canvas.showPage()
        self.cursor.next_page()
        self._draw_running_header()

    def ensure_space(self, needed: float) -> None:
        """Break the page unless ``needed`` points fit above the footer.

        A block taller than a whole page is drawn from the top of a fresh
        page rather than triggering repeated breaks.
        """
        if not self.cursor.fits(needed) and not self.cursor.at_top:
            self.new_page()

    def draw_text_line(self, text: str, style: TextStyle, x: float | None = None) -> None:
        """Draw one pre-wrapped line and advance the cursor."""
        step = style.size + self._settings.line_gap
        self.ensure_space(step)
        self._canvas.setFont(style.font_name, style.size)
        self._canvas.setFillColor(style.color)
        self._canvas.drawString(
            self.cursor.left if x is None else x,
            self.cursor.y - style.size,
            _drawable(text, style.font_name),
        )
        self.cursor.y -= step

    def draw_wrapped(self, text: str, style: TextStyle, indent: float = 0.0) -> int:
        """Wrap text to the content width and draw it line by line.

        Args:
            text: Text to draw.
            style: Text style.
            indent: Left indent in points.

        Returns:
            Number of lines drawn.
        """
        text = _drawable(text, style.font_name)
        lines = wrap_to_width(text, style.font_name, style.size, self.cursor.content_width - indent)
        for line in lines:
            self.draw_text_line(line, style, x=self.cursor.left + indent)
        return len(lines)

    def draw_metadata_card(self, fields: Sequence[tuple[str, str]]) -> None:
        """Draw a shaded card of label/value rows.

        The card height is computed up front from the wrapped value lines so
        a card that fits on a page lands on one page. Values are never cut:
        a card taller than the remaining space continues on the next page
        with its own shaded box.

        Args:
            fields: (label, value) pairs, drawn top to bottom.
        """
        settings = self._settings
        padding = settings.card_padding
        value_width = self.cursor.content_width - 2 * padding - settings.card_label_width
        row_height = self.value_style.size + settings.line_gap

        # One entry per drawn row; the label appears on the first row of its value
        entries: list[tuple[str, str]] = []
        for label, value in fields:
            for number, line in enumerate(self._card_value_lines(value, value_width)):
                entries.append((label if number == 0 else "", line))

        height = len(entries) * row_height + 2 * padding
        page_room = self.cursor.content_top - self.cursor.content_bottom
        self.ensure_space(min(height, page_room) + settings.paragraph_gap)

        while entries:
            available = self.cursor.y - self.cursor.content_bottom - 2 * padding
            count = max(1, int(available // row_height))
            chunk, entries = entries[:count], entries[count:]
            self._draw_card_rows(chunk, row_height)
            if entries:
                logger.debug("Metadata card continues on page %d", self.cursor.page_number + 1)
                self.new_page()

        self.cursor.y -= settings.paragraph_gap

    def _draw_card_rows(self, entries: Sequence[tuple[str, str]], row_height: float) -> None:
        """Draw one shaded box of card rows at the cursor and move below it."""
        padding = self._settings.card_padding
        value_x = self.cursor.left + padding + self._settings.card_label_width
        height = len(entries) * row_height + 2 * padding
        top = self.cursor.y

        self._canvas.saveState()
        self._canvas.setFillColor(_CARD_FILL)
        self._canvas.setStrokeColor(_RULE)
        self._canvas.roundRect(self.cursor.left, top - height, self.cursor.content_width, height, 4, stroke=1, fill=1)
        self._canvas.restoreState()

        y = top - padding
        for label, line in entries:
            if label:
                self._canvas.setFont(self.label_style.font_name, self.label_style.size)
                self._canvas.setFillColor(self.label_style.color)
                self._canvas.drawString(self.cursor.left + padding, y - self.label_style.size, label)

            self._canvas.setFont(self.value_style.font_name, self.value_style.size)
            self._canvas.setFillColor(self.value_style.color)
            self._canvas.drawString(value_x, y - self.value_style.size, line)
            y -= row_height

        self.cursor.y = top - height

    def draw_divider(self) -> None:
        """Draw a horizontal rule across the content width."""
        gap = self._settings.paragraph_gap
        self.ensure_space(2 * gap)
        y = self.cursor.y - gap
        self._canvas.saveState()
        self._canvas.setStrokeColor(_RULE)
        self._canvas.setLineWidth(0.75)
        self._canvas.line(self.cursor.left, y, self.cursor.right, y)
        self._canvas.restoreState()
        self.cursor.y -= 2 * gap

    def draw_record(self, record: ThreadRecord, index: int, total: int) -> None:
        """Draw one record, starting a fresh page for every record after the first.

        Args:
            record: Record to draw.
            index: 1-based record position.
            total: Number of records in the document.
        """
        if index > 1:
            self.new_page()
        self.record_pages.append(self.cursor.page_number)

        self.draw_wrapped(f"Message {index} of {total}", self.heading_style)
        self.cursor.y -= self._settings.paragraph_gap

        self.draw_metadata_card(
            [
                ("File", record.file_name),
                ("From", record.sender),
                ("To", record.recipient),
                ("Date", record.date),
                ("Subject", record.subject),
            ]
        )
        self.draw_divider()
        self.draw_text_line("Body", self.label_style)
        self.cursor.y -= self._settings.line_gap

        paragraphs = body_paragraphs(record.body_text) or [NO_BODY_PLACEHOLDER]
        for number, paragraph in enumerate(paragraphs):
            if number:
                self.cursor.y -= self._settings.paragraph_gap
            self.draw_wrapped(paragraph, self.body_style)

    def draw_notice(self, text: str) -> None:
        """Draw a single muted paragraph, used when there is nothing else to show."""
        self.draw_wrapped(text, TextStyle(self._settings.font_regular, self._settings.body_size, _MUTED))

    def finish(self) -> None:
        """Close the last page, stamp footers, and write the document."""
        self._canvas.showPage()
        self._canvas.save()
        logger.debug("Laid out %d records on %d pages", len(self.record_pages), self._canvas.page_count)

    def _card_value_lines(self, value: str, width: float) -> list[str]:
        font_name = self.value_style.font_name
        return wrap_to_width(_drawable(value, font_name) or "-", font_name, self.value_style.size, width) or ["-"]

    def _draw_running_header(self) -> None:
        settings = self._settings
        size = settings.label_size
        baseline = self.cursor.page_height - settings.margin - size

        self._canvas.saveState()
        self._canvas.setFont(settings.font_bold, size + 1)
        self._canvas.setFillColor(_INK)
        self._canvas.drawString(self.cursor.left, baseline, _drawable(settings.title, settings.font_bold))
        self._canvas.setFont(settings.font_regular, size)
        self._canvas.setFillColor(_MUTED)
        self._canvas.drawRightString(self.cursor.right, baseline, self._generated_label)
        self._canvas.setStrokeColor(_RULE)
        self._canvas.setLineWidth(0.5)
        rule_y = baseline - size / 2 - 2
        self._canvas.line(self.cursor.left, rule_y, self.cursor.right, rule_y)
        self._canvas.restoreState()
