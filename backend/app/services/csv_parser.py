"""
Library CSV parser.

Two layouts are accepted:

- the native Libro layout (what ``export_service`` writes): semicolon
  separated authors/categories, plain ISBNs, explicit ownership and
  reading status columns;
- a Goodreads library export: one primary author plus "Additional Authors",
  ISBNs wrapped as ``="0123456789"``, a 0-5 "My Rating" and "My Review".

The layout is detected once from the header row; rows are then parsed
against the resulting ``ColumnLayout``.
"""

import csv
import io
import re
from dataclasses import dataclass
from enum import Enum

from app.schemas.user_book import (
    OWNERSHIP_STATUSES,
    READING_STATUSES,
    OwnershipStatus,
    ReadingStatus,
)
from app.services.errors import ImportRowError, ImportSchemaError

# Maximum field lengths, matching the books table
MAX_TITLE_LENGTH = 500
MAX_AUTHOR_LENGTH = 255
MAX_PUBLISHER_LENGTH = 255


class Schema(str, Enum):
    NATIVE = "libro"
    EXTERNAL_EXPORT = "goodreads"


# Header names per layout, keyed by the field they populate
NATIVE_COLUMNS = {
    "title": "Title",
    "authors": "Authors",
    "description": "Description",
    "published_date": "Published date",
    "publisher": "Publisher",
    "page_count": "Number of pages",
    "language": "Language",
    "isbn10": "ISBN-10",
    "isbn13": "ISBN-13",
    "categories": "Categories",
    "ownership_status": "Ownership Status",
    "reading_status": "Reading Status",
}

GOODREADS_COLUMNS = {
    "title": "Title",
    "author": "Author",
    "additional_authors": "Additional Authors",
    "isbn10": "ISBN",
    "isbn13": "ISBN13",
    "publisher": "Publisher",
    "page_count": "Number of Pages",
    "published_date": "Year Published",
    "rating": "My Rating",
    "review": "My Review",
    "description": "Description",
    "language": "Language",
}

GOODREADS_INDICATORS = ("Book Id", "Title", "Author")

# Leading characters spreadsheets treat as a formula
FORMULA_PREFIXES = ("=", "+", "-", "@", "\t", "\r")

DEFAULT_OWNERSHIP = OwnershipStatus.OWNED
DEFAULT_READING = ReadingStatus.COMPLETED


@dataclass(frozen=True)
class ColumnLayout:
    """Detected schema plus the column index of every field present."""

    schema: Schema
    columns: dict[str, int]

    def get(self, values: list[str], name: str) -> str:
        """Trimmed cell value for a field, or "" when the column or cell is missing."""
        index = self.columns.get(name)
        if index is None or index >= len(values):
            return ""
        return values[index].strip()


@dataclass
class ImportRow:
    """One data row of an import file, normalized across layouts."""

    title: str
    authors: list[str]
    ownership_status: OwnershipStatus
    reading_status: ReadingStatus
    isbn10: str | None = None
    isbn13: str | None = None
    publisher: str | None = None
    page_count: int | None = None
    published_date: str | None = None
    language: str | None = None
    description: str | None = None
    categories: list[str] | None = None
    rating: int = 0  # 0 = unrated
    review_text: str | None = None

    @property
    def isbn(self) -> str | None:
        """Preferred identifier for external lookups."""
        return self.isbn13 or self.isbn10

    def catalog_fields(self) -> dict:
        """Column values for creating a local catalog entry from this row."""
        return {
            "title": self.title,
            "authors": self.authors,
            "description": self.description,
            "published_date": self.published_date,
            "publisher": self.publisher,
            "page_count": self.page_count,
            "language": self.language,
            "isbn_10": self.isbn10,
            "isbn_13": self.isbn13,
            "categories": self.categories,
        }


def read_csv(csv_text: str) -> tuple[list[str], list[list[str]]]:
    """
    Split CSV text into a header and its non-empty data records.

    Quoted fields may contain commas, doubled quotes and line breaks.

    Raises:
        ImportSchemaError: if there is no header line followed by at least
            one more line.
    """
    text = csv_text.lstrip("\ufeff")
    if len(text.split("\n")) < 2 or not text.split("\n", 1)[0].strip():
        raise ImportSchemaError("CSV file is empty or invalid")

    try:
        records = list(csv.reader(io.StringIO(text, newline="")))
    except csv.Error as e:
        raise ImportSchemaError(f"CSV file could not be read: {e}") from e

    headers = [h.strip() for h in records[0]]
    rows = [record for record in records[1:] if not _is_blank(record)]
    return headers, rows


def detect_schema(headers: list[str]) -> ColumnLayout:
    """
    Decide which layout a header row belongs to.

    Raises:
        ImportSchemaError: if a native-layout file lacks both ISBN columns
            or either status column.
    """
    headers = [h.strip().lstrip("\ufeff") for h in headers]

    if all(name in headers for name in GOODREADS_INDICATORS):
        return ColumnLayout(Schema.EXTERNAL_EXPORT, _index_columns(headers, GOODREADS_COLUMNS))

    columns = _index_columns(headers, NATIVE_COLUMNS)
    if "isbn10" not in columns and "isbn13" not in columns:
        raise ImportSchemaError("CSV must contain either ISBN-10 or ISBN-13 column")
    if "ownership_status" not in columns or "reading_status" not in columns:
        raise ImportSchemaError(
            "CSV must contain Ownership Status and Reading Status columns (for Libro format)"
        )
    return ColumnLayout(Schema.NATIVE, columns)


def parse_row(values: list[str], layout: ColumnLayout) -> ImportRow:
    """
    Parse one data record.

    Raises:
        ImportRowError: for a missing title or an invalid status value.
    """
    if layout.schema is Schema.EXTERNAL_EXPORT:
        return _parse_goodreads_row(values, layout)
    return _parse_native_row(values, layout)


def _parse_native_row(values: list[str], layout: ColumnLayout) -> ImportRow:
    def text(name: str) -> str:
        return unescape_formula(layout.get(values, name))

    title = _require_title(text("title"))
    ownership_value = layout.get(values, "ownership_status")
    reading_value = layout.get(values, "reading_status")

    if not ownership_value or not reading_value:
        raise ImportRowError("Missing ownership or reading status")
    if ownership_value not in OWNERSHIP_STATUSES:
        raise ImportRowError(
            f'Invalid ownership status "{ownership_value}". '
            f"Must be one of: {', '.join(OWNERSHIP_STATUSES)}"
        )
    if reading_value not in READING_STATUSES:
        raise ImportRowError(
            f'Invalid reading status "{reading_value}". '
            f"Must be one of: {', '.join(READING_STATUSES)}"
        )

    return ImportRow(
        title=title,
        authors=_split_multi(text("authors"), ";", MAX_AUTHOR_LENGTH),
        ownership_status=OwnershipStatus(ownership_value),
        reading_status=ReadingStatus(reading_value),
        isbn10=clean_isbn(layout.get(values, "isbn10")),
        isbn13=clean_isbn(layout.get(values, "isbn13")),
        publisher=_truncate(text("publisher"), MAX_PUBLISHER_LENGTH) or None,
        page_count=_parse_int(layout.get(values, "page_count")),
        published_date=text("published_date") or None,
        language=text("language") or None,
        description=text("description") or None,
        categories=_split_multi(text("categories"), ";") or None,
    )


def _parse_goodreads_row(values: list[str], layout: ColumnLayout) -> ImportRow:
    title = _require_title(layout.get(values, "title"))

    primary = _truncate(layout.get(values, "author"), MAX_AUTHOR_LENGTH)
    additional = _split_multi(layout.get(values, "additional_authors"), ",", MAX_AUTHOR_LENGTH)
    authors = [a for a in [primary, *additional] if a]

    rating = _parse_int(layout.get(values, "rating")) or 0
    review = layout.get(values, "review") or None

    return ImportRow(
        title=title,
        authors=authors,
        ownership_status=DEFAULT_OWNERSHIP,
        reading_status=DEFAULT_READING,
        isbn10=clean_isbn(layout.get(values, "isbn10")),
        isbn13=clean_isbn(layout.get(values, "isbn13")),
        publisher=_truncate(layout.get(values, "publisher"), MAX_PUBLISHER_LENGTH) or None,
        page_count=_parse_int(layout.get(values, "page_count")),
        published_date=layout.get(values, "published_date") or None,
        language=layout.get(values, "language") or None,
        description=layout.get(values, "description") or None,
        rating=max(rating, 0),
        review_text=review if rating > 0 else None,
    )


def clean_isbn(value: str) -> str | None:
    """
    Normalize an ISBN cell.

    Goodreads exports ISBNs as ="0123456789" so spreadsheets keep leading
    zeros; hyphens and spaces are dropped as well.
    """
    if not value:
        return None
    cleaned = value.strip().removeprefix("=").strip('"')
    cleaned = re.sub(r"[^0-9Xx]", "", cleaned).upper()
    return cleaned or None


def unescape_formula(value: str) -> str:
    """
    Undo the export's formula guard.

    The exporter prefixes cells starting with a spreadsheet formula character
    with a single quote; one such quote is dropped again here.
    """
    if len(value) > 1 and value[0] == "'" and value[1] in FORMULA_PREFIXES:
        return value[1:]
    return value


def _require_title(title: str) -> str:
    if not title:
        raise ImportRowError("Title is required")
    return _truncate(title, MAX_TITLE_LENGTH)


def _index_columns(headers: list[str], names: dict[str, str]) -> dict[str, int]:
    return {key: headers.index(header) for key, header in names.items() if header in headers}


def _split_multi(value: str, separator: str, max_length: int | None = None) -> list[str]:
    items = [item.strip() for item in value.split(separator)] if value else []
    if max_length:
        items = [_truncate(item, max_length) for item in items]
    return [item for item in items if item]


def _truncate(value: str, max_length: int) -> str:
    return value[:max_length] if len(value) > max_length else value


def _parse_int(value: str) -> int | None:
    """Parse an integer, returning None for empty/invalid values."""
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        try:
            return int(float(value))
        except (ValueError, OverflowError):
            return None


def _is_blank(record: list[str]) -> bool:
    return not record or (len(record) == 1 and not record[0].strip())
