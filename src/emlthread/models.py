"""Value types shared by the extraction and export halves.

Every type here is frozen: each pipeline stage produces new values
rather than mutating the ones it was given.
"""

from dataclasses import dataclass, field

# Placeholder written in place of a body that has no text left after cleanup
NO_BODY_PLACEHOLDER = "(No body text)"

# Export column headers, in output order
EXPORT_COLUMNS: tuple[str, ...] = ("File Name", "From", "To", "Subject", "Date", "Body")


@dataclass(frozen=True, slots=True)
class HeaderFields:
    """From/To/Subject/Date of a message.

    Used both for the top-level headers of an uploaded file and as the
    fallback tuple for embedded messages whose own headers are missing.
    """

    sender: str = ""
    recipient: str = ""
    subject: str = ""
    date: str = ""


@dataclass(frozen=True, slots=True)
class RawMessage:
    """A decoded message file, before any thread extraction.

    Attributes:
        source_name: Name of the uploaded file.
        headers: Top-level headers of the message.
        body_text: Decoded plain-text body (not normalized).
    """

    source_name: str
    headers: HeaderFields = field(default_factory=HeaderFields)
    body_text: str = ""

    @property
    def top_from(self) -> str:
        return self.headers.sender

    @property
    def top_to(self) -> str:
        return self.headers.recipient

    @property
    def top_subject(self) -> str:
        return self.headers.subject

    @property
    def top_date(self) -> str:
        return self.headers.date


@dataclass(frozen=True, slots=True)
class ThreadRecord:
    """One message of a thread, ready for export.

    Attributes:
        file_name: Source file name, suffixed when the file held several messages.
        sender: From value.
        recipient: To value.
        subject: Subject value.
        date: Date value.
        body_text: Normalized body; never empty.
    """

    file_name: str
    sender: str
    recipient: str
    subject: str
    date: str
    body_text: str

    def as_row(self) -> tuple[str, str, str, str, str, str]:
        """Return the export columns in EXPORT_COLUMNS order."""
        return (
            self.file_name,
            self.sender,
            self.recipient,
            self.subject,
            self.date,
            self.body_text,
        )
