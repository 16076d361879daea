from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from app.schemas.book import BookSource, CatalogBook


class OwnershipStatus(str, Enum):
    OWNED = "Owned"
    WISHLIST = "Wishlist"
    BORROWED = "Borrowed"
    LENT_OUT = "Lent Out"
    DIGITAL = "Digital"
    GIFTED = "Gifted"


class ReadingStatus(str, Enum):
    NOT_STARTED = "Not Started"
    READING = "Reading"
    PAUSED = "Paused"
    COMPLETED = "Completed"
    ABANDONED = "Abandoned"
    RE_READING = "Re-reading"


OWNERSHIP_STATUSES = [status.value for status in OwnershipStatus]
READING_STATUSES = [status.value for status in ReadingStatus]


class CollectionAdd(BaseModel):
    book_id: str
    source: BookSource
    ownership_status: OwnershipStatus
    reading_status: ReadingStatus


class CollectionUpdate(BaseModel):
    ownership_status: OwnershipStatus
    reading_status: ReadingStatus


class CollectionStatus(BaseModel):
    ownership_status: OwnershipStatus
    reading_status: ReadingStatus


class UserBookWithDetails(BaseModel):
    id: int
    book_id: str
    source: BookSource
    ownership_status: OwnershipStatus
    reading_status: ReadingStatus
    created_at: datetime
    book_details: CatalogBook


class CollectionPage(BaseModel):
    books: list[UserBookWithDetails]
    total: int
