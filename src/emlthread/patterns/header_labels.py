"""Header label recognition for quoted From/To/Subject/Date blocks.

Mail clients insert a short header block when quoting or forwarding a
message. The labels are matched anywhere the trimmed line starts with
them, case-insensitively. ``Sent:`` (Outlook) and ``Date:`` both map to
the date field.
"""

import re
from typing import Literal

HeaderField = Literal["sender", "recipient", "subject", "date"]

HEADER_FIELDS: tuple[HeaderField, ...] = ("sender", "recipient", "subject", "date")

_LABEL_PATTERN = re.compile(r"^(from|to|subject|sent|date)\s*:\s*(.*)$", re.IGNORECASE)

_LABEL_TO_FIELD: dict[str, HeaderField] = {
    "from": "sender",
    "to": "recipient",
    "subject": "subject",
    "sent": "date",
    "date": "date",
}


def match_header_label(line: str) -> tuple[HeaderField, str] | None:
    """Match a quoted header line.

    Args:
        line: A single line of text.

    Returns:
        Tuple of (field name, value) or None if the line is not a
        From/To/Subject/Sent/Date header. The value may be empty.
    """
    match = _LABEL_PATTERN.match(line.strip())
    if match is None:
        return None

    label, value = match.groups()
    return _LABEL_TO_FIELD[label.lower()], value.strip()
