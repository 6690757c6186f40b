"""Line patterns for plain-text email thread detection."""

from emlthread.patterns.boundaries import (
    BOUNDARY_PREDICATES,
    boundary_predicates,
    is_boundary_line,
    is_divider_run,
    is_marker_only,
    is_original_message_divider,
    is_quoted_header_start,
    is_reply_attribution,
)
from emlthread.patterns.header_labels import HEADER_FIELDS, match_header_label
from emlthread.patterns.quotes import strip_quote_markers, strip_quotes

__all__ = [
    "BOUNDARY_PREDICATES",
    "boundary_predicates",
    "HEADER_FIELDS",
    "is_boundary_line",
    "is_divider_run",
    "is_marker_only",
    "is_original_message_divider",
    "is_quoted_header_start",
    "is_reply_attribution",
    "match_header_label",
    "strip_quote_markers",
    "strip_quotes",
]
