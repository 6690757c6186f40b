"""Quote marker stripping.

Reply bodies prefix quoted lines with one or more ``>`` characters,
sometimes separated by single spaces (``> > text``).
"""

import re

_QUOTE_PREFIX_PATTERN = re.compile(r"^[ \t]*(?:>+ ?)+")


def strip_quote_markers(line: str) -> str:
    """Remove leading quote markers from one line."""
    return _QUOTE_PREFIX_PATTERN.sub("", line, count=1)


def strip_quotes(text: str) -> str:
    """Remove leading quote markers from every line of a text block.

    Args:
        text: Text with ``\\n`` line endings.

    Returns:
        Text with the quote prefix removed from each line.
    """
    return "\n".join(strip_quote_markers(line) for line in text.split("\n"))
