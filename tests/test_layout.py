"""Tests for the Document Layout Engine."""

import io
from datetime import datetime, timezone

from reportlab.pdfbase.pdfmetrics import stringWidth

from emlthread import ExportSettings, default_settings
from emlthread.export.layout import (
    DocumentLayout,
    LayoutCursor,
    body_paragraphs,
    wrap_to_width,
)

GENERATED_AT = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _layout(settings: ExportSettings | None = None) -> DocumentLayout:
    """Create a layout writing to an in-memory buffer."""
    return DocumentLayout(io.BytesIO(), settings or default_settings(), GENERATED_AT)


class TestWrapToWidth:
    """Tests for greedy word wrapping."""

    def test_short_text_one_line(self) -> None:
        """Text narrower than the width stays on one line."""
        assert wrap_to_width("Hello world", "Helvetica", 10, 500) == ["Hello world"]

    def test_empty_text(self) -> None:
        """Text without words yields no lines."""
        assert wrap_to_width("", "Helvetica", 10, 500) == []
        assert wrap_to_width("   \n ", "Helvetica", 10, 500) == []

    def test_lines_fit_width(self) -> None:
        """Every wrapped line fits within max_width."""
        text = " ".join(["lorem ipsum dolor sit amet consectetur"] * 20)
        lines = wrap_to_width(text, "Helvetica", 10, 150)

        assert len(lines) > 1
        for line in lines:
            assert stringWidth(line, "Helvetica", 10) <= 150

    def test_words_preserved(self) -> None:
        """Wrapping only moves line breaks; the words are unchanged."""
        text = "the quick brown fox jumps over the lazy dog " * 10
        lines = wrap_to_width(text, "Helvetica", 12, 120)

        assert " ".join(lines).split() == text.split()

    def test_greedy(self) -> None:
        """Each line takes as many words as fit."""
        text = "aa bb cc dd ee ff gg hh"
        max_width = stringWidth("aa bb cc", "Helvetica", 10)
        lines = wrap_to_width(text, "Helvetica", 10, max_width)

        assert lines == ["aa bb cc", "dd ee ff", "gg hh"]

    def test_overlong_word_hard_split(self) -> None:
        """A 300-character token is split into pieces that each fit."""
        token = "x" * 300
        max_width = 200.0
        lines = wrap_to_width(token, "Helvetica", 10, max_width)

        assert len(lines) > 1
        assert "".join(lines) == token
        for line in lines:
            assert stringWidth(line, "Helvetica", 10) <= max_width

    def test_overlong_word_between_words(self) -> None:
        """Text around a hard-split word keeps its order."""
        token = "https://example.com/" + "a" * 200
        lines = wrap_to_width(f"see {token} now", "Helvetica", 10, 150)

        assert lines[0] == "see"
        assert "".join(lines[1:]).replace(" ", "").startswith("https://example.com/")
        assert lines[-1].endswith("now")
        for line in lines:
            assert stringWidth(line, "Helvetica", 10) <= 150


class TestBodyParagraphs:
    """Tests for paragraph splitting."""

    def test_split_on_blank_lines(self) -> None:
        """Blank lines separate paragraphs; inner newlines become spaces."""
        assert body_paragraphs("one\ntwo\n\nthree") == ["one two", "three"]

    def test_empty_body(self) -> None:
        """An empty body has no paragraphs."""
        assert body_paragraphs("") == []


class TestLayoutCursor:
    """Tests for the layout cursor."""

    def test_geometry(self) -> None:
        """Content area is the page minus margins and reserved bands."""
        cursor = LayoutCursor(page_width=600, page_height=800, margin=50, header_height=30, footer_height=20)

        assert cursor.y == 720
        assert cursor.content_top == 720
        assert cursor.content_bottom == 70
        assert cursor.content_width == 500
        assert cursor.right == 550
        assert cursor.at_top

    def test_fits(self) -> None:
        """Blocks fit until they would cross into the footer."""
        cursor = LayoutCursor(page_width=600, page_height=800, margin=50, header_height=30, footer_height=20)

        assert cursor.fits(650)
        assert not cursor.fits(651)

    def test_next_page(self) -> None:
        """A page break bumps the page number and resets y."""
        cursor = LayoutCursor(page_width=600, page_height=800, margin=50, header_height=30, footer_height=20)
        cursor.y = 100
        cursor.next_page()

        assert cursor.page_number == 2
        assert cursor.y == cursor.content_top


class TestDocumentLayout:
    """Tests for drawing operations and page breaking."""

    def test_ensure_space_breaks_page(self) -> None:
        """A block that does not fit moves to a new page."""
        layout = _layout()
        layout.cursor.y = layout.cursor.content_bottom + 5

        layout.ensure_space(10)

        assert layout.page_count == 2
        assert layout.cursor.at_top

    def test_ensure_space_keeps_page(self) -> None:
        """A block that fits stays on the current page."""
        layout = _layout()

        layout.ensure_space(10)

        assert layout.page_count == 1

    def test_oversized_block_at_top(self) -> None:
        """A block taller than a page does not trigger empty pages."""
        layout = _layout()

        layout.ensure_space(10_000)

        assert layout.page_count == 1

    def test_draw_wrapped_advances_cursor(self) -> None:
        """Each drawn line moves y down by size plus line gap."""
        settings = default_settings()
        layout = _layout(settings)
        start = layout.cursor.y

        count = layout.draw_wrapped("one short line", layout.body_style)

        assert count == 1
        assert layout.cursor.y == start - (settings.body_size + settings.line_gap)

    def test_long_text_paginates(self) -> None:
        """Enough wrapped text spills over several pages."""
        layout = _layout()

        layout.draw_wrapped("word " * 6000, layout.body_style)

        assert layout.page_count > 1

    def test_y_monotonic_within_page(self) -> None:
        """The cursor only moves down until a page break resets it."""
        layout = _layout()
        positions: list[tuple[int, float]] = []

        for _ in range(200):
            layout.draw_text_line("line", layout.body_style)
            positions.append((layout.page_count, layout.cursor.y))

        for (page_a, y_a), (page_b, y_b) in zip(positions, positions[1:]):
            if page_a == page_b:
                assert y_b < y_a
            else:
                assert page_b == page_a + 1

    def test_metadata_card_not_split(self) -> None:
        """A card that does not fit is moved whole to the next page."""
        layout = _layout()
        layout.cursor.y = layout.cursor.content_bottom + 30

        layout.draw_metadata_card([("From", "a@x.com"), ("To", "b@y.com"), ("Subject", "hi")])

        assert layout.page_count == 2

    def test_unencodable_text(self) -> None:
        """Characters outside the standard font encoding do not fail drawing."""
        layout = _layout()

        layout.draw_wrapped("Emoji \U0001F600 and CJK 会議", layout.body_style)
        layout.finish()

    def test_a4_page_size(self) -> None:
        """The page size setting selects the page dimensions."""
        layout = _layout(ExportSettings(page_size="A4"))

        assert round(layout.cursor.page_width) == 595
