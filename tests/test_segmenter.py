"""Tests for the Thread Segmenter component."""

from emlthread import Normalizer, ThreadSegmenter

SCENARIO_BODY = (
    "Hello,\nThanks.\n\n-----Original Message-----\nFrom: a@x.com\nTo: b@y.com\n"
    "Subject: Re: hi\nSent: Jan 1\n\nOriginal text"
)


class TestBoundaries:
    """Tests for boundary detection."""

    def test_first_line_always_boundary(self) -> None:
        """Line 0 opens a segment even without a marker."""
        segmenter = ThreadSegmenter()

        assert segmenter.find_boundaries(["plain", "text"]) == [0]

    def test_outlook_reply(self) -> None:
        """Divider and quoted header each open a segment."""
        segmenter = ThreadSegmenter()
        lines = SCENARIO_BODY.split("\n")

        assert segmenter.find_boundaries(lines) == [0, 3, 4]

    def test_boundaries_sorted_and_unique(self) -> None:
        """A line matched by several rules is one boundary."""
        segmenter = ThreadSegmenter()
        lines = ["-----Original Message-----", "From: a", "To: b", "", "body"]

        boundaries = segmenter.find_boundaries(lines)

        assert boundaries == sorted(set(boundaries))
        assert boundaries == [0, 1]


class TestSegmentation:
    """Tests for segment slicing."""

    def test_empty_text(self) -> None:
        """Empty text yields no segments."""
        segmenter = ThreadSegmenter()

        assert segmenter.segment("") == ()

    def test_no_markers(self) -> None:
        """Text without markers is a single segment."""
        segmenter = ThreadSegmenter()
        segments = segmenter.segment("Just one message.\n\nWith two paragraphs.")

        assert len(segments) == 1
        assert segments[0].text == "Just one message.\n\nWith two paragraphs."
        assert segments[0].start_line == 0
        assert segments[0].end_line == 3

    def test_scenario_segments(self) -> None:
        """The reply, the divider, and the quoted message are separate."""
        segmenter = ThreadSegmenter()
        segments = segmenter.segment(SCENARIO_BODY)

        assert [segment.text for segment in segments] == [
            "Hello,\nThanks.",
            "-----Original Message-----",
            "From: a@x.com\nTo: b@y.com\nSubject: Re: hi\nSent: Jan 1\n\nOriginal text",
        ]

    def test_reply_attribution_chain(self) -> None:
        """Gmail-style attributions split the thread."""
        segmenter = ThreadSegmenter()
        text = (
            "Sounds good.\n\n"
            "On Mon, Jan 1, 2024 at 9:00 AM Bob <b@y.com> wrote:\n"
            "> Can we meet tomorrow?\n"
        )
        segments = segmenter.segment(text)

        assert len(segments) == 2
        assert segments[1].lines[0].startswith("On Mon")

    def test_segments_are_stripped(self) -> None:
        """Segment text carries no surrounding blank lines."""
        segmenter = ThreadSegmenter()
        segments = segmenter.segment("First part\n\n\n________\n\nSecond part\n")

        for segment in segments:
            assert segment.text == segment.text.strip()
            assert segment.text


class TestCoverage:
    """Every non-blank input line lands in exactly one segment."""

    def test_segments_cover_input(self) -> None:
        """Concatenated segment lines equal the non-blank input lines."""
        normalizer = Normalizer()
        segmenter = ThreadSegmenter()
        text = normalizer.normalize(
            "Top reply\n\nOn Tue Ann wrote:\n> middle\n\n"
            "-----Original Message-----\nFrom: c@z.com\nDate: Jan 3\n\nbottom message\n"
            "________\nfooter text"
        )

        segments = segmenter.segment(text)
        segment_lines = [line for segment in segments for line in segment.lines if line.strip()]
        input_lines = [line for line in text.split("\n") if line.strip()]

        assert segment_lines == input_lines

    def test_segments_ordered_non_overlapping(self) -> None:
        """Segments follow source order without overlap."""
        segmenter = ThreadSegmenter()
        segments = segmenter.segment(SCENARIO_BODY)

        for previous, current in zip(segments, segments[1:]):
            assert previous.end_line <= current.start_line


class TestDeduplication:
    """Tests for adjacent duplicate removal."""

    def test_adjacent_duplicates_dropped(self) -> None:
        """A segment repeating its predecessor is dropped."""
        segmenter = ThreadSegmenter()
        text = "________\nsame text here\n________\nsame text here"
        segments = segmenter.segment(text)

        assert len(segments) == 1
        assert segments[0].start_line == 0

    def test_non_adjacent_duplicates_kept(self) -> None:
        """Only adjacent segments are compared."""
        segmenter = ThreadSegmenter()
        text = "________\nalpha\n________\nbeta\n________\nalpha"
        segments = segmenter.segment(text)

        assert len(segments) == 3

    def test_prefix_window(self) -> None:
        """Segments equal within the window but differing after it collapse."""
        preamble = "x" * 20
        text = f"________\n{preamble} one\n________\n{preamble} two"

        assert len(ThreadSegmenter(dedupe_chars=20).segment(text)) == 1
        assert len(ThreadSegmenter().segment(text)) == 2
