"""
Local book catalog.

The ``books`` table is the system of record for books that were created by
users or by CSV imports (the "libro" source).
"""

from typing import Any

from sqlalchemy import String, cast, func, or_
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.models.book import Book
from app.schemas.book import BookUpdate, CatalogBook
from app.services.errors import BookNotFoundError

# Columns a caller may set on create
BOOK_FIELDS = (
    "title",
    "authors",
    "description",
    "published_date",
    "publisher",
    "page_count",
    "language",
    "isbn_10",
    "isbn_13",
    "categories",
    "cover_image",
)


def get_book_cover_url(cover_image: str | None) -> str | None:
    """Turn a stored cover path into a public URL."""
    if not cover_image:
        return None
    if cover_image.startswith("http"):
        return cover_image
    base_url = get_settings().COVER_STORAGE_URL.rstrip("/")
    if not base_url:
        return cover_image
    return f"{base_url}/{cover_image.lstrip('/')}"


def to_catalog_book(book: Book) -> CatalogBook:
    return CatalogBook(
        source="libro",
        id=str(book.id),
        title=book.title,
        authors=book.authors or [],
        description=book.description,
        published_date=book.published_date,
        publisher=book.publisher,
        page_count=book.page_count,
        language=book.language,
        isbn10=book.isbn_10,
        isbn13=book.isbn_13,
        categories=book.categories,
        cover_image=get_book_cover_url(book.cover_image),
    )


class CatalogStore:
    """Reads and writes locally cataloged books."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, book_id: str) -> CatalogBook | None:
        book = self._get_row(book_id)
        return to_catalog_book(book) if book else None

    def find_by_isbn(
        self, isbn10: str | None = None, isbn13: str | None = None
    ) -> CatalogBook | None:
        """Find a book sharing either non-empty ISBN."""
        conditions = []
        if isbn10:
            conditions.append(Book.isbn_10 == isbn10)
        if isbn13:
            conditions.append(Book.isbn_13 == isbn13)
        if not conditions:
            return None

        book = self.db.query(Book).filter(or_(*conditions)).order_by(Book.id).first()
        return to_catalog_book(book) if book else None

    def find_by_title(self, title: str) -> CatalogBook | None:
        """Case-insensitive exact title match, lowercased by the database on both sides."""
        if not title:
            return None
        book = (
            self.db.query(Book)
            .filter(func.lower(Book.title) == func.lower(title.strip()))
            .order_by(Book.id)
            .first()
        )
        return to_catalog_book(book) if book else None

    def isbn_exists(self, isbn10: str | None = None, isbn13: str | None = None) -> bool:
        return self.find_by_isbn(isbn10, isbn13) is not None

    def create(self, fields: dict[str, Any]) -> CatalogBook:
        """
        Insert a book and return it with its generated id.

        Unknown keys are ignored; no field validation happens here.
        """
        values = {key: fields.get(key) for key in BOOK_FIELDS if key in fields}
        values.setdefault("authors", [])
        book = Book(**values)
        self.db.add(book)
        self.db.commit()
        self.db.refresh(book)
        return to_catalog_book(book)

    def update(self, book_id: str, data: BookUpdate) -> CatalogBook:
        book = self._get_row(book_id)
        if not book:
            raise BookNotFoundError(f"Book {book_id} not found")

        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(book, field, value)

        self.db.commit()
        self.db.refresh(book)
        return to_catalog_book(book)

    def search(
        self,
        query: str,
        search_type: str = "general",
        offset: int = 0,
        limit: int = 40,
    ) -> tuple[list[CatalogBook], int]:
        """Search by exact ISBN, or by title/author substring."""
        q = self.db.query(Book)
        if search_type == "isbn":
            q = q.filter(or_(Book.isbn_10 == query, Book.isbn_13 == query))
        else:
            term = f"%{query.lower()}%"
            q = q.filter(
                or_(
                    func.lower(Book.title).like(term),
                    func.lower(cast(Book.authors, String)).like(term),
                )
            )

        total = q.count()
        if offset >= total:
            return [], total

        books = q.order_by(Book.title, Book.id).offset(offset).limit(limit).all()
        return [to_catalog_book(book) for book in books], total

    def find_by_author(self, name: str) -> list[CatalogBook]:
        candidates = (
            self.db.query(Book)
            .filter(func.lower(cast(Book.authors, String)).like(f"%{name.lower()}%"))
            .order_by(Book.title)
            .all()
        )
        return [to_catalog_book(book) for book in candidates if name in (book.authors or [])]

    def _get_row(self, book_id: str) -> Book | None:
        try:
            pk = int(book_id)
        except (TypeError, ValueError):
            return None
        return self.db.query(Book).filter(Book.id == pk).first()
