"""ThreadExtractor - Main public interface for thread extraction.

Provides two extraction methods:
- extract(): Records for one message file
- extract_with_metadata(): Records plus segmentation details for debugging

and extract_many() for a batch of files processed in order.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from emlthread.exceptions import InvalidInputError
from emlthread.models import HeaderFields, RawMessage, ThreadRecord
from emlthread.pipeline.assembler import AssembledMessage, ThreadAssembler
from emlthread.pipeline.normalizer import Normalizer
from emlthread.pipeline.segmenter import ThreadSegmenter

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Full extraction result with metadata.

    Attributes:
        records: Extracted records in thread order.
        segment_count: Number of segments found before filtering.
        header_blocks_found: Records whose headers came from an embedded block.
        used_fallback: Whether the whole body became a single record.
    """

    records: tuple[ThreadRecord, ...]
    segment_count: int
    header_blocks_found: int
    used_fallback: bool


def part_file_name(source_name: str, index: int, total: int) -> str:
    """Name a record cut from a multi-message file.

    Args:
        source_name: Name of the uploaded file.
        index: 1-based position of the record in its file.
        total: Number of records cut from the file.

    Returns:
        The bare source name for single-record files, otherwise the name
        suffixed with its position.
    """
    if total <= 1:
        return source_name
    return f"{source_name} (message {index} of {total})"


class ThreadExtractor:
    """Main class for splitting a message body into its thread.

    The extraction pipeline:
    1. Normalize body text
    2. Segment at thread boundaries
    3. Parse embedded header blocks and assemble messages
    4. Attach file names

    Example:
        extractor = ThreadExtractor()
        records = extractor.extract(raw_message)
    """

    def __init__(
        self,
        *,
        normalizer: Normalizer | None = None,
        segmenter: ThreadSegmenter | None = None,
        assembler: ThreadAssembler | None = None,
    ) -> None:
        """Initialize the extractor.

        Args:
            normalizer: Body normalizer.
            segmenter: Thread segmenter.
            assembler: Message assembler.
        """
        self._normalizer = normalizer or Normalizer()
        self._segmenter = segmenter or ThreadSegmenter()
        self._assembler = assembler or ThreadAssembler(normalizer=self._normalizer)

    def extract(self, message: RawMessage) -> tuple[ThreadRecord, ...]:
        """Extract thread records from a message.

        Args:
            message: Decoded message file.

        Returns:
            One or more records, in the order they appear in the body.

        Raises:
            InvalidInputError: If the message or its fields have the wrong type.
        """
        return self.extract_with_metadata(message).records

    def extract_with_metadata(self, message: RawMessage) -> ExtractionResult:
        """Extract records with segmentation details.

        Args:
            message: Decoded message file.

        Returns:
            ExtractionResult with records and debugging info.

        Raises:
            InvalidInputError: If the message or its fields have the wrong type.
        """
        _validate(message)

        # Step 1: Normalize
        normalized = self._normalizer.normalize(message.body_text)

        # Step 2: Segment
        segments = self._segmenter.segment(normalized)

        # Step 3: Assemble
        assembled = self._assembler.assemble(segments, message.headers, source_text=normalized)

        # Step 4: Name records
        records = tuple(
            _to_record(item, part_file_name(message.source_name, index, len(assembled)))
            for index, item in enumerate(assembled, start=1)
        )

        header_blocks_found = sum(1 for item in assembled if item.from_header_block)
        used_fallback = assembled[0].whole_body

        logger.debug(
            "Extracted %d records from %s (%d segments, %d header blocks)",
            len(records),
            message.source_name,
            len(segments),
            header_blocks_found,
        )

        return ExtractionResult(
            records=records,
            segment_count=len(segments),
            header_blocks_found=header_blocks_found,
            used_fallback=used_fallback,
        )

    def extract_many(self, messages: Iterable[RawMessage]) -> tuple[ThreadRecord, ...]:
        """Extract records from several messages, concatenated in input order."""
        records: list[ThreadRecord] = []
        for message in messages:
            records.extend(self.extract(message))
        return tuple(records)


def _validate(message: RawMessage) -> None:
    """Check the caller honoured the input contract."""
    if not isinstance(message, RawMessage):
        raise InvalidInputError(message=f"Expected RawMessage, got {type(message).__name__}")
    if not isinstance(message.body_text, str):
        raise InvalidInputError(message="body_text must be a string")
    if not isinstance(message.headers, HeaderFields):
        raise InvalidInputError(message="headers must be HeaderFields")
    for name in ("sender", "recipient", "subject", "date"):
        if not isinstance(getattr(message.headers, name), str):
            raise InvalidInputError(message=f"header field {name!r} must be a string")


def _to_record(item: AssembledMessage, file_name: str) -> ThreadRecord:
    return ThreadRecord(
        file_name=file_name,
        sender=item.sender,
        recipient=item.recipient,
        subject=item.subject,
        date=item.date,
        body_text=item.body_text,
    )
