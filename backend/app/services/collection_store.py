"""
User collection service.

A collection entry links a user to a book from either source together with
an ownership and a reading status.
"""

from sqlalchemy.orm import Session

from app.models.user_book import UserBook
from app.schemas.user_book import CollectionStatus, OwnershipStatus, ReadingStatus
from app.services.errors import AlreadyInCollectionError, BookNotFoundError


class CollectionStore:
    """Reads and writes a user's collection entries."""

    def __init__(self, db: Session):
        self.db = db

    def exists(self, user_id: int, book_id: str) -> bool:
        return self._get(user_id, book_id) is not None

    def add(
        self,
        user_id: int,
        book_id: str,
        source: str,
        ownership_status: OwnershipStatus | str,
        reading_status: ReadingStatus | str,
    ) -> UserBook:
        """
        Add a book to the collection.

        Callers are expected to check ``exists`` first; the unique constraint
        on (user_id, book_id) rejects duplicates regardless.
        """
        entry = UserBook(
            user_id=user_id,
            book_id=book_id,
            source=source,
            ownership_status=OwnershipStatus(ownership_status).value,
            reading_status=ReadingStatus(reading_status).value,
        )
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def add_unique(
        self,
        user_id: int,
        book_id: str,
        source: str,
        ownership_status: OwnershipStatus | str,
        reading_status: ReadingStatus | str,
    ) -> UserBook:
        if self.exists(user_id, book_id):
            raise AlreadyInCollectionError("This book is already in your collection")
        return self.add(user_id, book_id, source, ownership_status, reading_status)

    def update(
        self,
        user_id: int,
        book_id: str,
        ownership_status: OwnershipStatus | str,
        reading_status: ReadingStatus | str,
    ) -> UserBook:
        entry = self._get(user_id, book_id)
        if not entry:
            raise BookNotFoundError("Book is not in your collection")

        entry.ownership_status = OwnershipStatus(ownership_status).value
        entry.reading_status = ReadingStatus(reading_status).value
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def remove(self, user_id: int, book_id: str) -> None:
        entry = self._get(user_id, book_id)
        if not entry:
            raise BookNotFoundError("Book is not in your collection")
        self.db.delete(entry)
        self.db.commit()

    def get_status(self, user_id: int, book_id: str) -> CollectionStatus | None:
        entry = self._get(user_id, book_id)
        if not entry:
            return None
        return CollectionStatus(
            ownership_status=entry.ownership_status,
            reading_status=entry.reading_status,
        )

    def list_page(self, user_id: int, page: int = 1, page_size: int = 10) -> tuple[list[UserBook], int]:
        """Newest-first page of entries plus the total entry count."""
        page = max(1, page)
        page_size = max(1, page_size)

        q = self.db.query(UserBook).filter(UserBook.user_id == user_id)
        total = q.count()
        entries = (
            q.order_by(UserBook.created_at.desc(), UserBook.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return entries, total

    def list_all(self, user_id: int) -> list[UserBook]:
        return (
            self.db.query(UserBook)
            .filter(UserBook.user_id == user_id)
            .order_by(UserBook.created_at.desc(), UserBook.id.desc())
            .all()
        )

    def _get(self, user_id: int, book_id: str) -> UserBook | None:
        return (
            self.db.query(UserBook)
            .filter(UserBook.user_id == user_id, UserBook.book_id == book_id)
            .first()
        )
