"""emlthread - Split email threads into records and export them."""

from emlthread.config import ExportSettings, default_settings, load_settings
from emlthread.converter import Converter, ExportArtifact, FORMATS, batch_display_name
from emlthread.exceptions import (
    ConversionError,
    InvalidInputError,
    NoMessagesError,
    UnsupportedFormatError,
)
from emlthread.export import build_csv, build_pdf, build_xlsx, render_pdf
from emlthread.extractor import ExtractionResult, ThreadExtractor
from emlthread.ingest import load_eml, parse_eml
from emlthread.models import HeaderFields, RawMessage, ThreadRecord
from emlthread.pipeline import (
    AssembledMessage,
    HeaderBlockParser,
    Normalizer,
    ParsedHeaderBlock,
    Segment,
    ThreadAssembler,
    ThreadSegmenter,
)

__version__ = "0.1.0"

__all__ = [
    "AssembledMessage",
    "batch_display_name",
    "build_csv",
    "build_pdf",
    "build_xlsx",
    "ConversionError",
    "Converter",
    "default_settings",
    "ExportArtifact",
    "ExportSettings",
    "ExtractionResult",
    "FORMATS",
    "HeaderBlockParser",
    "HeaderFields",
    "InvalidInputError",
    "load_eml",
    "load_settings",
    "NoMessagesError",
    "Normalizer",
    "parse_eml",
    "ParsedHeaderBlock",
    "RawMessage",
    "render_pdf",
    "Segment",
    "ThreadAssembler",
    "ThreadExtractor",
    "ThreadRecord",
    "ThreadSegmenter",
    "UnsupportedFormatError",
]
