"""Conversion of message files into export artifacts.

Extraction runs sequentially, file by file. When several formats are
requested they are built concurrently: each builder reads the same
immutable record tuple and returns its own bytes.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from emlthread.config import ExportSettings, default_settings
from emlthread.exceptions import NoMessagesError, UnsupportedFormatError
from emlthread.export.pdf import build_pdf
from emlthread.export.tabular import build_csv, build_xlsx
from emlthread.extractor import ThreadExtractor
from emlthread.ingest import is_eml_name, load_eml, parse_eml
from emlthread.models import RawMessage, ThreadRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ExportFormat:
    """An output format and its download metadata."""

    name: str
    file_name: str
    media_type: str


FORMATS: dict[str, ExportFormat] = {
    "xlsx": ExportFormat(
        "xlsx",
        "converted-emails.xlsx",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ),
    "pdf": ExportFormat("pdf", "email-records.pdf", "application/pdf"),
    "csv": ExportFormat("csv", "converted-emails.csv", "text/csv; charset=utf-8"),
}


@dataclass(frozen=True, slots=True)
class ExportArtifact:
    """Bytes of one exported file.

    Attributes:
        format: Format name (a key of FORMATS).
        file_name: Suggested download name.
        media_type: MIME type for the download.
        content: File bytes.
    """

    format: str
    file_name: str
    media_type: str
    content: bytes


def batch_display_name(source_names: Sequence[str]) -> str:
    """Label a batch for history listings: the file name, or "<n> files"."""
    if len(source_names) == 1:
        return source_names[0]
    return f"{len(source_names)} files"


def _check_formats(formats: Iterable[str]) -> list[str]:
    requested: list[str] = []
    for name in formats:
        key = name.lower()
        if key not in FORMATS:
            raise UnsupportedFormatError(message="Unknown export format", requested=name)
        if key not in requested:
            requested.append(key)
    return requested


class Converter:
    """Turns decoded messages into export files.

    Example:
        converter = Converter()
        artifacts = converter.convert_files(paths, ["xlsx", "pdf"])
        pdf_bytes = artifacts["pdf"].content
    """

    def __init__(
        self,
        *,
        extractor: ThreadExtractor | None = None,
        settings: ExportSettings | None = None,
        max_workers: int = 2,
    ) -> None:
        """Initialize the converter.

        Args:
            extractor: Thread extractor.
            settings: Presentation settings for all exporters.
            max_workers: Threads used when several formats are requested.
        """
        self._extractor = extractor or ThreadExtractor()
        self._settings = settings or default_settings()
        self._max_workers = max_workers

    def build(
        self,
        records: Sequence[ThreadRecord],
        formats: Iterable[str],
        generated_at: datetime | None = None,
    ) -> dict[str, ExportArtifact]:
        """Build export artifacts from records.

        Args:
            records: Records in output order.
            formats: Format names (see FORMATS).
            generated_at: Timestamp for the document header; now (UTC) when omitted.

        Returns:
            Mapping of format name to artifact, in request order.

        Raises:
            UnsupportedFormatError: If a format name is unknown.
        """
        requested = _check_formats(formats)
        records = tuple(records)
        generated_at = generated_at or datetime.now(timezone.utc)

        builders: dict[str, Callable[[], bytes]] = {
            "xlsx": lambda: build_xlsx(records, self._settings),
            "pdf": lambda: build_pdf(records, self._settings, generated_at),
            "csv": lambda: build_csv(records),
        }

        if len(requested) == 1:
            contents = {requested[0]: builders[requested[0]]()}
        else:
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                futures = {name: pool.submit(builders[name]) for name in requested}
                contents = {name: future.result() for name, future in futures.items()}

        logger.debug("Built %s for %d records", ", ".join(requested), len(records))

        artifacts: dict[str, ExportArtifact] = {}
        for name in requested:
            export_format = FORMATS[name]
            artifacts[name] = ExportArtifact(
                format=name,
                file_name=export_format.file_name,
                media_type=export_format.media_type,
                content=contents[name],
            )
        return artifacts

    def convert(
        self,
        messages: Iterable[RawMessage],
        formats: Iterable[str],
        generated_at: datetime | None = None,
    ) -> dict[str, ExportArtifact]:
        """Extract records from messages and build artifacts.

        Raises:
            NoMessagesError: If there are no messages.
            UnsupportedFormatError: If a format name is unknown.
        """
        requested = _check_formats(formats)
        messages = list(messages)
        if not messages:
            raise NoMessagesError(message="No valid .eml files found.")

        records = self._extractor.extract_many(messages)
        return self.build(records, requested, generated_at)

    def convert_uploads(
        self,
        uploads: Iterable[tuple[str, bytes]],
        formats: Iterable[str],
        generated_at: datetime | None = None,
    ) -> dict[str, ExportArtifact]:
        """Convert (file name, bytes) uploads, skipping names without .eml.

        Raises:
            NoMessagesError: If no upload is an .eml file.
            UnsupportedFormatError: If a format name is unknown.
        """
        messages = []
        for name, data in uploads:
            if not is_eml_name(name):
                logger.info("Skipping non-.eml upload %s", name)
                continue
            messages.append(parse_eml(data, source_name=name))
        return self.convert(messages, formats, generated_at)

    def convert_files(
        self,
        paths: Iterable[Path | str],
        formats: Iterable[str],
        generated_at: datetime | None = None,
    ) -> dict[str, ExportArtifact]:
        """Convert .eml files on disk, skipping other files.

        Raises:
            NoMessagesError: If no path is an .eml file.
            UnsupportedFormatError: If a format name is unknown.
        """
        messages = []
        for path in map(Path, paths):
            if not is_eml_name(path.name):
                logger.info("Skipping non-.eml file %s", path)
                continue
            messages.append(load_eml(path))
        return self.convert(messages, formats, generated_at)
