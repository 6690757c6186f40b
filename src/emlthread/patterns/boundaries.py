"""Thread boundary detection for plain-text email bodies.

Each predicate answers one question about one line: does a new embedded
message start here? They are kept separate so the segmenter can evaluate
them as an ordered cascade and each rule can be tested on its own.

Predicates take the full line sequence and an index, because some rules
(quoted header blocks) need to look ahead.
"""

import re
from collections.abc import Callable, Sequence
from functools import partial

# How many lines after a "From:" line are searched for a companion header
DEFAULT_HEADER_LOOKAHEAD = 8

BoundaryPredicate = Callable[[Sequence[str], int], bool]

# -----Original Message----- (dash-bracketed, any case)
_ORIGINAL_MESSAGE_PATTERN = re.compile(r"^-+\s*Original\s+Message\s*-+$", re.IGNORECASE)

# On Mon, Jan 1, 2024 at 10:00 AM Alice <a@x.com> wrote:
_REPLY_ATTRIBUTION_PATTERN = re.compile(r"^On\s.*\bwrote:$", re.IGNORECASE)

# ________ or -------- (8 or more of the same character, nothing else)
_DIVIDER_RUN_PATTERN = re.compile(r"^(?:_{8,}|-{8,})$")

_FROM_LABEL_PATTERN = re.compile(r"^From:", re.IGNORECASE)

# Labels that confirm a "From:" line opens a quoted header block
_COMPANION_LABELS: tuple[str, ...] = ("to:", "subject:", "sent:", "date:")


def is_original_message_divider(line: str) -> bool:
    """Check if a line is an "Original Message" divider.

    Args:
        line: A single line of text.

    Returns:
        True for lines like ``-----Original Message-----``.
    """
    return _ORIGINAL_MESSAGE_PATTERN.match(line.strip()) is not None


def is_reply_attribution(line: str) -> bool:
    """Check if a line is an ``On ... wrote:`` reply attribution."""
    return _REPLY_ATTRIBUTION_PATTERN.match(line.strip()) is not None


def is_divider_run(line: str) -> bool:
    """Check if a line is a run of 8+ underscores or 8+ hyphens.

    Args:
        line: A single line of text.

    Returns:
        True if the stripped line consists only of the divider run.
    """
    return _DIVIDER_RUN_PATTERN.match(line.strip()) is not None


def is_quoted_header_start(
    lines: Sequence[str],
    index: int,
    lookahead: int = DEFAULT_HEADER_LOOKAHEAD,
) -> bool:
    """Check if ``lines[index]`` opens a quoted From/To/Subject block.

    A body line can start with "From:" by accident, so the line only
    counts when one of the next ``lookahead`` lines mentions another
    header label.

    Args:
        lines: All lines of the normalized body.
        index: Position of the candidate line.
        lookahead: Number of following lines to search.

    Returns:
        True if the line starts a quoted header block.
    """
    if not _FROM_LABEL_PATTERN.match(lines[index].strip()):
        return False

    following = lines[index + 1 : index + 1 + lookahead]
    return any(
        label in line.lower() for line in following for label in _COMPANION_LABELS
    )


def _line_rule(check: Callable[[str], bool]) -> BoundaryPredicate:
    """Lift a single-line check to the (lines, index) predicate shape."""

    def predicate(lines: Sequence[str], index: int) -> bool:
        return check(lines[index])

    predicate.__name__ = check.__name__
    return predicate


def boundary_predicates(
    lookahead: int = DEFAULT_HEADER_LOOKAHEAD,
) -> tuple[BoundaryPredicate, ...]:
    """Build the ordered boundary cascade.

    Args:
        lookahead: Lines searched after "From:" for a companion label.

    Returns:
        Predicates in evaluation order; the first match marks a boundary.
    """
    return (
        _line_rule(is_original_message_divider),
        partial(is_quoted_header_start, lookahead=lookahead),
        _line_rule(is_reply_attribution),
        _line_rule(is_divider_run),
    )


BOUNDARY_PREDICATES = boundary_predicates()


def is_boundary_line(lines: Sequence[str], index: int) -> bool:
    """Check whether any boundary predicate matches ``lines[index]``."""
    return any(predicate(lines, index) for predicate in BOUNDARY_PREDICATES)


def is_marker_only(text: str) -> bool:
    """Check if text holds nothing but boundary marker lines.

    Segments made only of dividers are artifacts of segmentation,
    not messages.

    Args:
        text: A block of text, possibly spanning several lines.

    Returns:
        True if every non-blank line is a divider or "Original Message" line.
    """
    content = [line for line in text.split("\n") if line.strip()]
    if not content:
        return False
    return all(is_divider_run(line) or is_original_message_divider(line) for line in content)
