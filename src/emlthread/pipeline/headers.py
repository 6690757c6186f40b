"""Quoted header-block parsing.

Recognizes the From/To/Subject/Date block a mail client inserts above a
quoted or forwarded message and extracts its fields. The block is only
accepted when enough fields are present; a lone "From:" line in prose is
not a header block.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from emlthread.patterns.header_labels import HEADER_FIELDS, match_header_label

# Header blocks longer than this are not searched further
DEFAULT_MAX_SCAN_LINES = 10

# Minimum number of distinct fields for a block to be accepted
DEFAULT_MIN_FIELDS = 2


@dataclass(frozen=True, slots=True)
class ParsedHeaderBlock:
    """Result of parsing the leading lines of a segment.

    Attributes:
        sender: From value, or None.
        recipient: To value, or None.
        subject: Subject value, or None.
        date: Sent/Date value, or None.
        consumed_lines: Number of leading lines that belong to the header
            block (0 when the block was rejected).
    """

    sender: str | None = None
    recipient: str | None = None
    subject: str | None = None
    date: str | None = None
    consumed_lines: int = 0

    @property
    def field_count(self) -> int:
        """Number of fields that were found."""
        return sum(
            1 for value in (self.sender, self.recipient, self.subject, self.date) if value is not None
        )

    @property
    def confidence(self) -> float:
        """Fraction of the four header fields that were found."""
        return self.field_count / len(HEADER_FIELDS)

    @property
    def accepted(self) -> bool:
        return self.consumed_lines > 0


class HeaderBlockParser:
    """Parses an embedded From/To/Subject/Date header block.

    Scans the first lines of a segment up to the first blank line. Each
    line is tested for a From, To, Subject, or Sent/Date label. Lines
    that carry no label (an "Original Message" divider, a Cc line) are
    still part of the block.
    """

    def __init__(
        self,
        *,
        max_scan_lines: int = DEFAULT_MAX_SCAN_LINES,
        min_fields: int = DEFAULT_MIN_FIELDS,
    ) -> None:
        """Initialize the parser.

        Args:
            max_scan_lines: Maximum number of leading lines to scan.
            min_fields: Minimum distinct fields needed to accept the block.
        """
        self._max_scan_lines = max_scan_lines
        self._min_fields = min_fields

    def parse(self, lines: Sequence[str]) -> ParsedHeaderBlock:
        """Parse the header block at the start of ``lines``.

        Args:
            lines: Lines of a segment, in order.

        Returns:
            ParsedHeaderBlock. When fewer than ``min_fields`` fields are
            found, every field is None and ``consumed_lines`` is 0.
        """
        found: dict[str, str] = {}
        scanned = 0

        for line in lines[: self._max_scan_lines]:
            if not line.strip():
                break
            scanned += 1

            matched = match_header_label(line)
            if matched is None:
                continue

            field_name, value = matched
            # First occurrence wins
            found.setdefault(field_name, value)

        if len(found) < self._min_fields:
            return ParsedHeaderBlock()

        return ParsedHeaderBlock(
            sender=found.get("sender"),
            recipient=found.get("recipient"),
            subject=found.get("subject"),
            date=found.get("date"),
            consumed_lines=scanned,
        )
