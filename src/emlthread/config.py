"""Export presentation settings.

Defaults cover every value. A YAML file may override any subset:

    title: Case 4411 correspondence
    brand_text: Example LLP
    page_size: A4
    font_regular: NotoSans
    font_regular_file: /usr/share/fonts/noto/NotoSans-Regular.ttf
    xlsx_column_widths: [24, 30, 30, 40, 22, 90]
"""

from dataclasses import dataclass, fields, replace
from functools import lru_cache
from pathlib import Path

import yaml

from emlthread.exceptions import InvalidInputError

PAGE_SIZE_NAMES: tuple[str, ...] = ("letter", "A4")

# Settings that are lengths or sizes in points
_POSITIVE_NUMBERS: tuple[str, ...] = ("heading_size", "body_size", "label_size", "xlsx_line_height")
_NON_NEGATIVE_NUMBERS: tuple[str, ...] = (
    "margin",
    "header_height",
    "footer_height",
    "line_gap",
    "paragraph_gap",
    "card_label_width",
    "card_padding",
)
_POSITIVE_INTEGERS: tuple[str, ...] = ("xlsx_chars_per_line", "xlsx_max_row_lines")
_STRINGS: tuple[str, ...] = ("title", "brand_text", "font_regular_file", "font_bold_file")
_FONT_NAMES: tuple[str, ...] = ("font_regular", "font_bold")


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True, slots=True)
class ExportSettings:
    """Presentation settings shared by the document and grid exporters.

    Attributes:
        title: Document title, drawn in the running header of every page.
        brand_text: Footer text centered on every page.
        page_size: One of PAGE_SIZE_NAMES.
        margin: Page margin in points on all four sides.
        header_height: Space reserved for the running header, in points.
        footer_height: Space reserved for the footer, in points.
        font_regular: Font for body text and values.
        font_bold: Font for headings and labels.
        font_regular_file: TrueType file registered as ``font_regular``.
            Empty to use a built-in font.
        font_bold_file: TrueType file registered as ``font_bold``.
        heading_size: Record heading font size.
        body_size: Body text font size.
        label_size: Metadata label/value and chrome font size.
        line_gap: Extra leading between wrapped lines.
        paragraph_gap: Extra space between body paragraphs.
        card_label_width: Width of the label column in the metadata card.
        card_padding: Inner padding of the metadata card.
        xlsx_column_widths: Column widths for File Name, From, To, Subject, Date, Body.
        xlsx_chars_per_line: Estimated characters per wrapped line of the Body column.
        xlsx_line_height: Row height per estimated line, in points.
        xlsx_max_row_lines: Upper bound on estimated lines per row.
    """

    title: str = "Email Records"
    brand_text: str = "emlthread"
    page_size: str = "letter"
    margin: float = 54.0
    header_height: float = 34.0
    footer_height: float = 30.0
    font_regular: str = "Helvetica"
    font_bold: str = "Helvetica-Bold"
    font_regular_file: str = ""
    font_bold_file: str = ""
    heading_size: float = 14.0
    body_size: float = 10.0
    label_size: float = 9.0
    line_gap: float = 3.0
    paragraph_gap: float = 6.0
    card_label_width: float = 62.0
    card_padding: float = 8.0
    xlsx_column_widths: tuple[float, ...] = (28.0, 30.0, 30.0, 36.0, 24.0, 90.0)
    xlsx_chars_per_line: int = 95
    xlsx_line_height: float = 15.0
    xlsx_max_row_lines: int = 27

    def __post_init__(self) -> None:
        for name in _STRINGS:
            if not isinstance(getattr(self, name), str):
                raise InvalidInputError(message=f"{name} must be a string")
        for name in _FONT_NAMES:
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise InvalidInputError(message=f"{name} must be a non-empty font name")
        for name in _POSITIVE_NUMBERS:
            value = getattr(self, name)
            if not _is_number(value) or value <= 0:
                raise InvalidInputError(message=f"{name} must be a positive number, got {value!r}")
        for name in _NON_NEGATIVE_NUMBERS:
            value = getattr(self, name)
            if not _is_number(value) or value < 0:
                raise InvalidInputError(message=f"{name} must be a non-negative number, got {value!r}")
        for name in _POSITIVE_INTEGERS:
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise InvalidInputError(message=f"{name} must be a positive integer, got {value!r}")

        if self.page_size not in PAGE_SIZE_NAMES:
            raise InvalidInputError(message=f"Unknown page size: {self.page_size!r}")
        if len(self.xlsx_column_widths) != 6:
            raise InvalidInputError(message="xlsx_column_widths needs exactly 6 values")
        if not all(_is_number(width) and width > 0 for width in self.xlsx_column_widths):
            raise InvalidInputError(message="xlsx_column_widths must be positive numbers")


@lru_cache(maxsize=1)
def default_settings() -> ExportSettings:
    """Return the shared default settings."""
    return ExportSettings()


def load_settings(path: Path | str) -> ExportSettings:
    """Load settings from a YAML file, overriding defaults.

    Args:
        path: Path to a YAML mapping of setting names to values.

    Returns:
        ExportSettings with the file's values applied.

    Raises:
        InvalidInputError: If the file is not valid YAML, is not a mapping,
            names unknown settings, or holds values of the wrong type.
    """
    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidInputError(message=f"Settings file is not valid YAML: {path}: {e}") from e

    if data is None:
        return default_settings()
    if not isinstance(data, dict):
        raise InvalidInputError(message=f"Settings file must hold a mapping: {path}")

    known = {field.name for field in fields(ExportSettings)}
    unknown = sorted(str(key) for key in set(data) - known)
    if unknown:
        raise InvalidInputError(message=f"Unknown settings: {', '.join(unknown)}")

    if "xlsx_column_widths" in data:
        widths = data["xlsx_column_widths"]
        if not isinstance(widths, list):
            raise InvalidInputError(message="xlsx_column_widths must be a list of numbers")
        data["xlsx_column_widths"] = tuple(widths)

    return replace(default_settings(), **data)
