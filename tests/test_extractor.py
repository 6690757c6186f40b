"""Tests for the ThreadExtractor class."""

import pytest

from emlthread import (
    ExtractionResult,
    HeaderFields,
    InvalidInputError,
    RawMessage,
    ThreadExtractor,
    ThreadSegmenter,
)
from emlthread.extractor import part_file_name
from emlthread.models import NO_BODY_PLACEHOLDER

FALLBACK = HeaderFields(
    sender="me@x.com",
    recipient="you@y.com",
    subject="Re: hi",
    date="2024-01-02T09:30:00.000Z",
)

OUTLOOK_THREAD = (
    "Hello,\nThanks.\n\n-----Original Message-----\nFrom: a@x.com\nTo: b@y.com\n"
    "Subject: Re: hi\nSent: Jan 1\n\nOriginal text"
)


class TestScenarios:
    """End-to-end extraction scenarios."""

    def test_outlook_reply(self) -> None:
        """A reply with a quoted Outlook header yields two records."""
        extractor = ThreadExtractor()
        records = extractor.extract(RawMessage("thread.eml", FALLBACK, OUTLOOK_THREAD))

        assert len(records) == 2

        reply, original = records
        assert reply.body_text == "Hello,\nThanks."
        assert reply.sender == FALLBACK.sender
        assert reply.recipient == FALLBACK.recipient
        assert reply.subject == FALLBACK.subject
        assert reply.date == FALLBACK.date

        assert original.sender == "a@x.com"
        assert original.recipient == "b@y.com"
        assert original.subject == "Re: hi"
        assert original.date == "Jan 1"
        assert original.body_text == "Original text"

    def test_no_markers(self) -> None:
        """A body without boundaries is one record with the fallback fields."""
        extractor = ThreadExtractor()
        body = "Hi team,\r\n\r\n\r\nThe  report is attached.\r\n"
        records = extractor.extract(RawMessage("memo.eml", FALLBACK, body))

        assert len(records) == 1
        assert records[0].body_text == "Hi team,\n\nThe report is attached."
        assert records[0].sender == FALLBACK.sender
        assert records[0].subject == FALLBACK.subject
        assert records[0].file_name == "memo.eml"

    def test_divider_only_body(self) -> None:
        """A body that is only a divider falls back to the full body."""
        extractor = ThreadExtractor()
        result = extractor.extract_with_metadata(RawMessage("dash.eml", FALLBACK, "--------"))

        assert len(result.records) == 1
        assert result.records[0].body_text == "--------"
        assert result.used_fallback

    def test_empty_body(self) -> None:
        """An empty body yields one placeholder record."""
        extractor = ThreadExtractor()
        records = extractor.extract(RawMessage("empty.eml", FALLBACK, ""))

        assert len(records) == 1
        assert records[0].body_text == NO_BODY_PLACEHOLDER

    def test_gmail_chain(self) -> None:
        """Attribution-separated replies become separate records in order."""
        extractor = ThreadExtractor()
        body = (
            "Works for me, see you at 3.\n\n"
            "On Mon, Jan 1, 2024 at 9:00 AM Bob <bob@y.com> wrote:\n"
            "How about Tuesday afternoon?\n\n"
            "On Sun, Dec 31, 2023 at 8:00 PM Ann <ann@x.com> wrote:\n"
            "> Can we meet this week?\n"
        )
        records = extractor.extract(RawMessage("chain.eml", FALLBACK, body))

        assert [r.body_text for r in records] == [
            "Works for me, see you at 3.",
            "How about Tuesday afternoon?",
            "Can we meet this week?",
        ]
        assert [r.file_name for r in records] == [
            "chain.eml (message 1 of 3)",
            "chain.eml (message 2 of 3)",
            "chain.eml (message 3 of 3)",
        ]

    def test_quoted_attribution_stays_in_body(self) -> None:
        """An attribution inside quoted text is not a boundary."""
        extractor = ThreadExtractor()
        body = (
            "Replying inline below.\n\n"
            "On Mon Bob wrote:\n"
            "> Agreed.\n"
            "> On Sun Ann wrote:\n"
            ">> Shall we ship it?\n"
        )
        records = extractor.extract(RawMessage("inline.eml", FALLBACK, body))

        assert len(records) == 2
        assert records[1].body_text == "Agreed.\nOn Sun Ann wrote:\nShall we ship it?"


class TestMetadata:
    """Tests for extract_with_metadata."""

    def test_result_fields(self) -> None:
        """Segment and header-block counts are reported."""
        extractor = ThreadExtractor()
        result = extractor.extract_with_metadata(RawMessage("thread.eml", FALLBACK, OUTLOOK_THREAD))

        assert isinstance(result, ExtractionResult)
        assert result.segment_count == 3
        assert result.header_blocks_found == 1
        assert not result.used_fallback

    def test_custom_segmenter(self) -> None:
        """Injected components are used."""
        extractor = ThreadExtractor(segmenter=ThreadSegmenter(header_lookahead=0))
        result = extractor.extract_with_metadata(RawMessage("thread.eml", FALLBACK, OUTLOOK_THREAD))

        # Without lookahead the quoted header does not open its own segment
        assert result.segment_count == 2


class TestBatch:
    """Tests for extract_many."""

    def test_records_concatenated_in_order(self) -> None:
        """Records of several files follow file order."""
        extractor = ThreadExtractor()
        records = extractor.extract_many(
            [
                RawMessage("b.eml", FALLBACK, OUTLOOK_THREAD),
                RawMessage("a.eml", FALLBACK, "Single message body"),
            ]
        )

        assert [r.file_name for r in records] == [
            "b.eml (message 1 of 2)",
            "b.eml (message 2 of 2)",
            "a.eml",
        ]

    def test_empty_batch(self) -> None:
        """No messages give no records."""
        assert ThreadExtractor().extract_many([]) == ()


class TestValidation:
    """Precondition failures."""

    def test_non_message(self) -> None:
        """Passing a bare string raises InvalidInputError."""
        with pytest.raises(InvalidInputError):
            ThreadExtractor().extract("just text")  # type: ignore[arg-type]

    def test_bytes_body(self) -> None:
        """A bytes body raises InvalidInputError."""
        message = RawMessage("x.eml", FALLBACK, b"bytes")  # type: ignore[arg-type]

        with pytest.raises(InvalidInputError):
            ThreadExtractor().extract(message)

    def test_non_string_header(self) -> None:
        """A non-string header value raises InvalidInputError."""
        message = RawMessage("x.eml", HeaderFields(sender=None), "body text here")  # type: ignore[arg-type]

        with pytest.raises(InvalidInputError, match="sender"):
            ThreadExtractor().extract(message)


class TestInvariants:
    """Properties that hold for any input."""

    def test_never_empty_and_bodies_non_empty(self) -> None:
        """Every message yields at least one record with a body."""
        extractor = ThreadExtractor()
        bodies = [
            "",
            "   ",
            "________",
            "From: a@x.com\nTo: b@y.com",
            "short",
            OUTLOOK_THREAD,
            "-----Original Message-----\n-----Original Message-----",
        ]

        for body in bodies:
            records = extractor.extract(RawMessage("x.eml", FALLBACK, body))
            assert len(records) >= 1
            assert all(r.body_text for r in records)

    def test_fallback_fields_fill_gaps(self) -> None:
        """A field missing from every source is empty, never None."""
        extractor = ThreadExtractor()
        records = extractor.extract(RawMessage("x.eml", HeaderFields(), "body with no headers"))

        assert records[0].sender == ""
        assert records[0].date == ""


class TestPartFileName:
    """Tests for part_file_name."""

    def test_single(self) -> None:
        """A single record keeps the bare name."""
        assert part_file_name("a.eml", 1, 1) == "a.eml"

    def test_multiple(self) -> None:
        """Parts of a multi-record file are numbered."""
        assert part_file_name("a.eml", 2, 5) == "a.eml (message 2 of 5)"
