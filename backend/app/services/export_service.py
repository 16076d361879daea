"""
Library CSV export in the native Libro layout.

The output is accepted by the importer as-is.
"""

import csv
import io
from datetime import datetime

from sqlalchemy.orm import Session

from app.schemas.user_book import UserBookWithDetails
from app.services.book_service import attach_book_details
from app.services.collection_store import CollectionStore
from app.services.csv_parser import FORMULA_PREFIXES, NATIVE_COLUMNS
from app.services.external_apis import GoogleBooksClient

EXPORT_HEADERS = list(NATIVE_COLUMNS.values())


def sanitize_formula_injection(value: str) -> str:
    """
    Sanitize a string to prevent CSV/formula injection.

    Excel and other spreadsheet programs interpret cells starting with
    =, +, -, @, \\t, or \\r as formulas.
    """
    if value and value[0] in FORMULA_PREFIXES:
        return "'" + value
    return value


def export_filename(now: datetime | None = None) -> str:
    now = now or datetime.now()
    return f"libro_library_export_{now.strftime('%Y%m%d%H%M')}.csv"


def build_library_csv(entries: list[UserBookWithDetails]) -> str:
    """Render collection entries as CSV text with every field quoted."""
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)

    for entry in entries:
        book = entry.book_details
        row = [
            book.title,
            "; ".join(book.authors or []),
            book.description or "",
            book.published_date or "",
            book.publisher or "",
            str(book.page_count) if book.page_count is not None else "",
            book.language or "",
            book.isbn10 or "",
            book.isbn13 or "",
            "; ".join(book.categories or []),
            entry.ownership_status.value,
            entry.reading_status.value,
        ]
        writer.writerow([sanitize_formula_injection(value) for value in row])

    return output.getvalue()


async def export_collection(db: Session, lookup: GoogleBooksClient, user_id: int) -> str:
    entries = CollectionStore(db).list_all(user_id)
    return build_library_csv(await attach_book_details(db, lookup, entries))
