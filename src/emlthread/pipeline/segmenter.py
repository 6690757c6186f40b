"""Thread segmentation for normalized email bodies.

Splits a body into the embedded messages of a reply/forward chain:
- Boundary detection (ordered predicate cascade, see patterns.boundaries)
- Slicing between consecutive boundaries
- Removal of empty and duplicated adjacent segments
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from emlthread.patterns.boundaries import DEFAULT_HEADER_LOOKAHEAD, boundary_predicates

logger = logging.getLogger(__name__)

# Number of leading characters compared when removing duplicate segments.
# Two distinct short replies sharing a long quoted preamble can collide.
DEFAULT_DEDUPE_CHARS = 300


@dataclass(frozen=True, slots=True)
class Segment:
    """A contiguous slice of body lines between two boundaries.

    Attributes:
        text: Stripped segment text.
        start_line: Index of the boundary line that opens the segment.
        end_line: Index one past the last line of the segment.
    """

    text: str
    start_line: int
    end_line: int

    @property
    def lines(self) -> tuple[str, ...]:
        return tuple(self.text.split("\n"))


class ThreadSegmenter:
    """Splits normalized body text at thread boundary markers.

    Line 0 always opens a segment. Any other line opens a segment when
    it is one of:
    - an "Original Message" divider
    - a "From:" line followed by another header label
    - an "On ... wrote:" attribution
    - a run of 8+ underscores or hyphens
    """

    def __init__(
        self,
        *,
        header_lookahead: int = DEFAULT_HEADER_LOOKAHEAD,
        dedupe_chars: int = DEFAULT_DEDUPE_CHARS,
    ) -> None:
        """Initialize the segmenter.

        Args:
            header_lookahead: Lines searched after "From:" for a companion label.
            dedupe_chars: Leading characters compared between adjacent segments.
        """
        self._dedupe_chars = dedupe_chars
        self._predicates = boundary_predicates(header_lookahead)

    def segment(self, text: str) -> tuple[Segment, ...]:
        """Split normalized text into ordered segments.

        Args:
            text: Output of the Normalizer.

        Returns:
            Tuple of non-empty segments in source order. Empty for empty text.
        """
        if not text.strip():
            return ()

        lines = text.split("\n")
        boundaries = self.find_boundaries(lines)

        segments: list[Segment] = []
        ends = boundaries[1:] + [len(lines)]
        for start, end in zip(boundaries, ends):
            chunk = "\n".join(lines[start:end]).strip()
            if not chunk:
                continue
            segments.append(Segment(text=chunk, start_line=start, end_line=end))

        deduped = self._dedupe(segments)

        logger.debug(
            "Segmented %d lines at %d boundaries into %d segments (%d duplicates dropped)",
            len(lines),
            len(boundaries),
            len(deduped),
            len(segments) - len(deduped),
        )
        return tuple(deduped)

    def find_boundaries(self, lines: Sequence[str]) -> list[int]:
        """Find the sorted line indices at which segments start.

        Args:
            lines: Lines of normalized text.

        Returns:
            Ascending list of unique indices, always starting with 0.
        """
        boundaries = {0}
        for index in range(len(lines)):
            if any(predicate(lines, index) for predicate in self._predicates):
                boundaries.add(index)
        return sorted(boundaries)

    def _dedupe(self, segments: list[Segment]) -> list[Segment]:
        """Drop segments whose prefix repeats the previous kept segment.

        Args:
            segments: Segments in source order.

        Returns:
            Segments with adjacent duplicates removed, first occurrence kept.
        """
        kept: list[Segment] = []
        for segment in segments:
            if kept and self._prefix(kept[-1]) == self._prefix(segment):
                continue
            kept.append(segment)
        return kept

    def _prefix(self, segment: Segment) -> str:
        return segment.text[: self._dedupe_chars]
