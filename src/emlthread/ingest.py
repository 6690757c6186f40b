"""Decoding of uploaded .eml files into RawMessage values.

Only the top-level headers and the plain-text body are read; HTML
bodies and attachments are ignored.
"""

import logging
import re
from datetime import timezone
from email import policy
from email.message import EmailMessage
from email.parser import BytesParser
from email.utils import parsedate_to_datetime
from pathlib import Path

from emlthread.exceptions import InvalidInputError
from emlthread.models import HeaderFields, RawMessage

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_NAME = "upload.eml"
MAX_FILE_NAME_CHARS = 140

_UNSAFE_NAME_CHARS = re.compile(r"[^\w.\-()]+")
_UNDERSCORE_RUN = re.compile(r"_+")

_parser = BytesParser(policy=policy.default)


def is_eml_name(name: str) -> bool:
    """Check whether an upload name carries the .eml extension."""
    return name.lower().endswith(".eml")


def safe_file_name(name: str) -> str:
    """Sanitize an upload name for use in storage paths.

    Keeps letters, digits, underscore, dot, hyphen, and parentheses;
    everything else becomes a single underscore.

    Args:
        name: Name as supplied by the client.

    Returns:
        Sanitized name of at most MAX_FILE_NAME_CHARS characters.
    """
    cleaned = _UNSAFE_NAME_CHARS.sub("_", name or DEFAULT_UPLOAD_NAME)
    cleaned = _UNDERSCORE_RUN.sub("_", cleaned)
    return cleaned[:MAX_FILE_NAME_CHARS]


def format_date(value: str) -> str:
    """Render an RFC 2822 date as ISO-8601 UTC with millisecond precision.

    Dates without a zone are taken as UTC. Unparseable values are
    returned unchanged.
    """
    if not value:
        return ""
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.debug("Keeping unparseable date %r", value)
        return value

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z")


def _header_text(message: EmailMessage, name: str) -> str:
    value = message.get(name)
    if value is None:
        return ""
    return str(value).strip()


def _plain_body(message: EmailMessage) -> str:
    """Return the decoded text/plain body, or an empty string."""
    part = message.get_body(preferencelist=("plain",))
    if part is None:
        return ""
    try:
        return part.get_content()
    except (LookupError, UnicodeError):
        payload = part.get_payload(decode=True) or b""
        charset = part.get_content_charset() or "utf-8"
        try:
            return payload.decode(charset, errors="replace")
        except LookupError:
            return payload.decode("utf-8", errors="replace")


def parse_eml(data: bytes, source_name: str = DEFAULT_UPLOAD_NAME) -> RawMessage:
    """Decode an .eml file.

    Args:
        data: Raw RFC 822 message bytes.
        source_name: Name of the uploaded file.

    Returns:
        RawMessage with top-level headers and the plain-text body.

    Raises:
        InvalidInputError: If data is not bytes.
    """
    if not isinstance(data, (bytes, bytearray)):
        raise InvalidInputError(message=f"Expected bytes, got {type(data).__name__}")

    message = _parser.parsebytes(bytes(data))
    headers = HeaderFields(
        sender=_header_text(message, "From"),
        recipient=_header_text(message, "To"),
        subject=_header_text(message, "Subject"),
        date=format_date(_header_text(message, "Date")),
    )
    body = _plain_body(message)
    if not body:
        logger.debug("No text/plain body in %s", source_name)

    return RawMessage(source_name=source_name, headers=headers, body_text=body)


def load_eml(path: Path | str) -> RawMessage:
    """Read and decode an .eml file from disk."""
    path = Path(path)
    return parse_eml(path.read_bytes(), source_name=path.name)
