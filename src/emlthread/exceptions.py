"""Exceptions for emlthread conversion."""

from dataclasses import dataclass


class ConversionError(Exception):
    """Base exception for all conversion errors."""

    pass


@dataclass
class InvalidInputError(ConversionError):
    """Input is not valid for processing.

    Raised when:
    - A body or header value is not a string
    - An EML payload is not bytes
    - A settings file contains unknown keys or invalid values
    """

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class UnsupportedFormatError(ConversionError):
    """An export format was requested that no builder produces.

    Attributes:
        message: Description of the error.
        requested: The format name that was asked for.
    """

    message: str
    requested: str

    def __str__(self) -> str:
        return f"{self.message} (requested: {self.requested!r})"


@dataclass
class NoMessagesError(ConversionError):
    """A batch contained no usable message files."""

    message: str

    def __str__(self) -> str:
        return self.message
