"""
Book lookups that span both sources: the local catalog and Google Books.
"""

from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.user_book import UserBook
from app.schemas.book import AuthorBooks, BookCreate, BookSearchPage, CatalogBook
from app.schemas.user_book import CollectionPage, UserBookWithDetails
from app.services.catalog_store import CatalogStore
from app.services.collection_store import CollectionStore
from app.services.errors import BookAlreadyExistsError, CatalogLookupError
from app.services.external_apis import MAX_SEARCH_RESULTS, GoogleBooksClient

logger = get_logger(__name__)


async def search_books(
    db: Session,
    lookup: GoogleBooksClient,
    query: str,
    page: int = 1,
    page_size: int = 40,
    search_type: str = "general",
) -> BookSearchPage:
    """
    Search local books first, then fill the page from Google Books.

    Google results that share an ISBN with a local book are dropped. Within
    the page local books come before Google books, and books with a cover
    come before books without one. When Google Books is unavailable only the
    local results are returned.
    """
    page = max(1, page)
    page_size = max(1, page_size)
    offset = (page - 1) * page_size

    if search_type == "isbn":
        query = query.replace("-", "").replace(" ", "")

    catalog = CatalogStore(db)
    local_books, libro_total = catalog.search(query, search_type, offset, page_size)

    remaining = page_size - len(local_books)
    google_start = max(0, offset - libro_total)
    google_query = f"isbn:{query}" if search_type == "isbn" else query

    try:
        google_books, google_total = await lookup.search(
            google_query,
            start_index=google_start,
            max_results=remaining,
            order_by="relevance",
        )
    except CatalogLookupError as e:
        logger.warning(f"Failed to search Google books: {e}")
        return BookSearchPage(books=local_books, total=libro_total)

    google_books = [
        book for book in google_books if not catalog.isbn_exists(book.isbn10, book.isbn13)
    ]

    books = sorted(
        local_books + google_books,
        key=lambda b: (b.source != "libro", b.cover_image is None),
    )
    total = libro_total + max(0, min(google_total, MAX_SEARCH_RESULTS - libro_total))

    return BookSearchPage(books=books[:page_size], total=total)


async def get_book_by_id(
    db: Session,
    lookup: GoogleBooksClient,
    source: str,
    book_id: str,
) -> CatalogBook | None:
    if source == "libro":
        book = CatalogStore(db).get(book_id)
        if not book:
            logger.warning(f"Book not found in Libro database: {book_id}")
        return book
    return await lookup.get_volume(book_id)


async def create_book(db: Session, lookup: GoogleBooksClient, data: BookCreate) -> CatalogBook:
    """
    Create a local catalog book.

    Raises:
        BookAlreadyExistsError: if Google Books or the local catalog already
            has a book with either ISBN.
    """
    if await lookup.isbn_exists(data.isbn10, data.isbn13):
        raise BookAlreadyExistsError("This book already exists in Google Books")

    catalog = CatalogStore(db)
    if catalog.isbn_exists(data.isbn10, data.isbn13):
        raise BookAlreadyExistsError("This book already exists in the Libro database")

    fields = data.model_dump(exclude={"isbn10", "isbn13"})
    fields["isbn_10"] = data.isbn10
    fields["isbn_13"] = data.isbn13
    book = catalog.create(fields)

    logger.info(f"Created book {book.id}: {book.title}")
    return book


async def get_author_by_name(db: Session, lookup: GoogleBooksClient, name: str) -> AuthorBooks:
    """Books credited to exactly this author, local books first."""
    books = CatalogStore(db).find_by_author(name)

    try:
        google_books = await lookup.search_by_author(name)
    except CatalogLookupError as e:
        logger.warning(f"Failed to fetch Google books for author {name}: {e}")
        google_books = []

    for google_book in google_books:
        if not any(google_book.same_edition_as(book) for book in books):
            books.append(google_book)

    return AuthorBooks(name=name, books=[book for book in books if name in book.authors])


async def get_collection_with_details(
    db: Session,
    lookup: GoogleBooksClient,
    user_id: int,
    page: int = 1,
    page_size: int = 10,
) -> CollectionPage:
    """
    A page of the user's collection with each book's details.

    Entries whose book can no longer be loaded are left out of the page;
    ``total`` still counts every entry.
    """
    entries, total = CollectionStore(db).list_page(user_id, page, page_size)
    books = await attach_book_details(db, lookup, entries)
    return CollectionPage(books=books, total=total)


async def attach_book_details(
    db: Session,
    lookup: GoogleBooksClient,
    entries: list[UserBook],
) -> list[UserBookWithDetails]:
    """Pair collection entries with their book details, skipping books that cannot be loaded."""
    books = []
    for entry in entries:
        try:
            details = await get_book_by_id(db, lookup, entry.source, entry.book_id)
        except CatalogLookupError as e:
            logger.error(
                f"Error fetching book details for ID: {entry.book_id} from source: {entry.source}: {e}"
            )
            continue
        if not details:
            logger.error(
                f"Could not find book details for ID: {entry.book_id} from source: {entry.source}"
            )
            continue

        books.append(
            UserBookWithDetails(
                id=entry.id,
                book_id=entry.book_id,
                source=entry.source,
                ownership_status=entry.ownership_status,
                reading_status=entry.reading_status,
                created_at=entry.created_at,
                book_details=details,
            )
        )

    return books
