"""Thread Message Assembler for rebuilding embedded messages from segments.

Takes thread segments and turns each into a message:
- Drops "On ... wrote:" lead-in lines
- Parses the quoted header block and separates it from the body
- Strips quote markers and re-normalizes the body
- Resolves every field against the parent message's headers
- Filters out segmentation artifacts
"""

import logging
from dataclasses import dataclass

from emlthread.models import NO_BODY_PLACEHOLDER, HeaderFields
from emlthread.patterns.boundaries import is_marker_only, is_reply_attribution
from emlthread.patterns.quotes import strip_quotes
from emlthread.pipeline.headers import HeaderBlockParser
from emlthread.pipeline.normalizer import Normalizer
from emlthread.pipeline.segmenter import Segment

logger = logging.getLogger(__name__)

# Bodies shorter than this are treated as segmentation noise
DEFAULT_MIN_BODY_CHARS = 10


@dataclass(frozen=True, slots=True)
class AssembledMessage:
    """One message rebuilt from a thread segment.

    Attributes:
        sender: From value (parsed or fallback).
        recipient: To value (parsed or fallback).
        subject: Subject value (parsed or fallback).
        date: Date value (parsed or fallback).
        body_text: Normalized, quote-stripped body. Never empty.
        from_header_block: Whether an embedded header block was found.
        whole_body: Whether this is the unsegmented single-message fallback.
    """

    sender: str
    recipient: str
    subject: str
    date: str
    body_text: str
    from_header_block: bool
    whole_body: bool = False


def resolve_field(*sources: str | None) -> str:
    """Return the first non-empty source, or an empty string.

    Sources are given in precedence order, e.g.
    ``resolve_field(parsed.subject, fallback.subject)``.
    """
    for value in sources:
        if value:
            return value
    return ""


class ThreadAssembler:
    """Assembles ordered messages from thread segments.

    The assembler never returns an empty result for non-empty input:
    when every segment is filtered out, the whole body becomes a single
    message carrying the fallback headers.
    """

    def __init__(
        self,
        *,
        header_parser: HeaderBlockParser | None = None,
        normalizer: Normalizer | None = None,
        min_body_chars: int = DEFAULT_MIN_BODY_CHARS,
    ) -> None:
        """Initialize the assembler.

        Args:
            header_parser: Parser for embedded header blocks.
            normalizer: Normalizer applied to bodies after quote stripping.
            min_body_chars: Minimum body length for a segment to be kept.
        """
        self._header_parser = header_parser or HeaderBlockParser()
        self._normalizer = normalizer or Normalizer()
        self._min_body_chars = min_body_chars

    def assemble(
        self,
        segments: tuple[Segment, ...],
        fallback: HeaderFields,
        source_text: str | None = None,
    ) -> tuple[AssembledMessage, ...]:
        """Assemble messages from segments.

        Args:
            segments: Output of ThreadSegmenter, in source order.
            fallback: Headers of the parent message.
            source_text: Normalized body the segments were cut from. Used for
                the single-message fallback; defaults to the joined segments.

        Returns:
            Messages in segment order. At least one message.
        """
        candidates = [self._build_candidate(segment, fallback) for segment in segments]
        kept = [message for message, raw_body in candidates if self._is_real_body(raw_body)]

        if len(kept) < len(candidates):
            logger.debug("Filtered %d of %d segments as noise", len(candidates) - len(kept), len(candidates))

        if kept:
            return tuple(kept)

        if source_text is None:
            source_text = "\n\n".join(segment.text for segment in segments)

        logger.debug("No segment survived filtering; falling back to whole body")
        return (self._whole_body_message(source_text, fallback),)

    def _build_candidate(
        self,
        segment: Segment,
        fallback: HeaderFields,
    ) -> tuple[AssembledMessage, str]:
        """Build a message from one segment.

        Args:
            segment: A thread segment.
            fallback: Headers of the parent message.

        Returns:
            Tuple of (message, body before placeholder substitution).
        """
        lines = list(segment.lines)

        # Step 1: Drop the reply attribution lead-in
        if lines and is_reply_attribution(lines[0]):
            lines = lines[1:]

        # Step 2: Parse the header block
        parsed = self._header_parser.parse(lines)

        # Step 3: Clean the remaining body
        raw_body = self._clean_body("\n".join(lines[parsed.consumed_lines :]))

        # Step 4: Resolve fields
        message = AssembledMessage(
            sender=resolve_field(parsed.sender, fallback.sender),
            recipient=resolve_field(parsed.recipient, fallback.recipient),
            subject=resolve_field(parsed.subject, fallback.subject),
            date=resolve_field(parsed.date, fallback.date),
            body_text=raw_body or NO_BODY_PLACEHOLDER,
            from_header_block=parsed.accepted,
        )
        return message, raw_body

    def _clean_body(self, text: str) -> str:
        """Strip quote markers and normalize."""
        return self._normalizer.normalize(strip_quotes(text))

    def _is_real_body(self, body: str) -> bool:
        """Check whether a cleaned body is a message rather than an artifact.

        Rejects bodies that are empty, shorter than ``min_body_chars``, made
        only of divider lines, or equal to the placeholder.
        """
        stripped = body.strip()
        if len(stripped) < self._min_body_chars or stripped == NO_BODY_PLACEHOLDER:
            return False
        return not is_marker_only(stripped)

    def _whole_body_message(self, text: str, fallback: HeaderFields) -> AssembledMessage:
        """Build the single-message fallback from the unsegmented body."""
        body = self._clean_body(text)
        return AssembledMessage(
            sender=fallback.sender,
            recipient=fallback.recipient,
            subject=fallback.subject,
            date=fallback.date,
            body_text=body or NO_BODY_PLACEHOLDER,
            from_header_block=False,
            whole_body=True,
        )
