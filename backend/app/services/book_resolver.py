"""
Book resolution for imports.

Maps a parsed import row to a catalog book, creating a local catalog entry
only when neither Google Books nor the local catalog already knows it.
"""

from dataclasses import dataclass
from typing import Literal

from app.core.logging import get_logger
from app.schemas.book import CatalogBook
from app.services.catalog_store import CatalogStore
from app.services.collection_store import CollectionStore
from app.services.csv_parser import ImportRow
from app.services.external_apis import GoogleBooksClient

logger = get_logger(__name__)


@dataclass
class Resolution:
    """Result of resolving an import row to a book."""

    book: CatalogBook
    status: Literal["new", "exists"]  # "exists" = already in the user's collection
    match_method: str  # "google_isbn", "local_isbn", "local_title", "created"


class BookResolver:
    """Resolve import rows to catalog books."""

    def __init__(
        self,
        lookup: GoogleBooksClient,
        catalog: CatalogStore,
        collection: CollectionStore,
    ):
        self.lookup = lookup
        self.catalog = catalog
        self.collection = collection

    async def resolve(self, row: ImportRow, user_id: int | None = None) -> Resolution:
        """
        Find or create the book for a row.

        Matching priority:
        1. Google Books by ISBN (no local row is created)
        2. Local catalog by ISBN-10 or ISBN-13
        3. Local catalog by case-insensitive exact title
        4. New local catalog entry built from the row
        """
        book, method = await self._match_external(row)
        if book is None:
            book, method = self._match_local(row)
        if book is None:
            book = self.catalog.create(row.catalog_fields())
            method = "created"
            logger.debug(f"Created catalog book {book.id} for '{row.title}'")

        status = "new"
        if user_id is not None and self.collection.exists(user_id, book.id):
            status = "exists"

        return Resolution(book=book, status=status, match_method=method)

    async def _match_external(self, row: ImportRow) -> tuple[CatalogBook | None, str]:
        if not row.isbn:
            return None, ""

        try:
            book = await self.lookup.lookup_by_isbn(row.isbn)
        except Exception as e:
            # Lookup failures fall through to the local catalog
            logger.warning(
                f"Google Books lookup failed for ISBN {row.isbn}: {e}",
                extra={"extra_fields": {"isbn": row.isbn}},
            )
            return None, ""

        return book, "google_isbn"

    def _match_local(self, row: ImportRow) -> tuple[CatalogBook | None, str]:
        if row.isbn10 or row.isbn13:
            book = self.catalog.find_by_isbn(row.isbn10, row.isbn13)
            if book:
                return book, "local_isbn"

        book = self.catalog.find_by_title(row.title)
        if book:
            return book, "local_title"

        return None, ""
