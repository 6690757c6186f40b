"""Text normalization for decoded email bodies.

Handles:
- Line ending normalization
- Non-breaking space replacement
- Horizontal whitespace collapsing
- Blank-line run collapsing
"""

import re

from emlthread.exceptions import InvalidInputError

# NO-BREAK SPACE, NARROW NO-BREAK SPACE, FIGURE SPACE
_NBSP_TRANSLATION = str.maketrans({"\u00a0": " ", "\u202f": " ", "\u2007": " "})

_HORIZONTAL_RUN_PATTERN = re.compile(r"[ \t]+")

# Trailing spaces are dropped so whitespace-only lines become empty lines
_TRAILING_SPACE_PATTERN = re.compile(r" +\n")

_BLANK_RUN_PATTERN = re.compile(r"\n{3,}")


class Normalizer:
    """Canonicalizes whitespace in a decoded message body.

    Applies the following transformations:
    1. Line ending normalization (CRLF/CR → LF)
    2. Non-breaking spaces → ordinary space
    3. Runs of spaces/tabs → single space
    4. 3+ consecutive newlines → one blank line
    5. Leading/trailing whitespace trimmed

    The result is idempotent: normalizing normalized text is a no-op.
    """

    def normalize(self, text: str) -> str:
        """Normalize body text.

        Args:
            text: Decoded plain-text body.

        Returns:
            Normalized text (empty string for empty or whitespace-only input).

        Raises:
            InvalidInputError: If text is not a string.
        """
        if not isinstance(text, str):
            raise InvalidInputError(message=f"Expected str, got {type(text).__name__}")

        text = text.replace("\r\n", "\n").replace("\r", "\n")
        text = text.translate(_NBSP_TRANSLATION)
        text = _HORIZONTAL_RUN_PATTERN.sub(" ", text)
        text = _TRAILING_SPACE_PATTERN.sub("\n", text)
        text = _BLANK_RUN_PATTERN.sub("\n\n", text)
        return text.strip()


_default_normalizer = Normalizer()


def normalize(text: str) -> str:
    """Normalize body text with a shared Normalizer."""
    return _default_normalizer.normalize(text)
