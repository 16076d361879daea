from typing import Literal

from pydantic import BaseModel, Field

BookSource = Literal["libro", "google"]


class CatalogBook(BaseModel):
    """A book from either the local catalog or Google Books."""

    source: BookSource
    id: str
    title: str
    authors: list[str] = []
    cover_image: str | None = None
    description: str | None = None
    published_date: str | None = None
    publisher: str | None = None
    isbn10: str | None = None
    isbn13: str | None = None
    page_count: int | None = None
    categories: list[str] | None = None
    language: str | None = None
    average_rating: float | None = None

    def same_edition_as(self, other: "CatalogBook") -> bool:
        """Two books are the same edition if they share a non-empty ISBN."""
        return bool(
            (self.isbn10 and self.isbn10 == other.isbn10)
            or (self.isbn13 and self.isbn13 == other.isbn13)
        )


class BookCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    authors: list[str] = Field(..., min_length=1)
    description: str | None = None
    published_date: str | None = Field(None, max_length=32)
    publisher: str | None = Field(None, max_length=255)
    page_count: int | None = Field(None, ge=0)
    language: str | None = Field(None, max_length=32)
    isbn10: str | None = Field(None, max_length=10)
    isbn13: str | None = Field(None, max_length=13)
    categories: list[str] | None = None
    cover_image: str | None = Field(None, max_length=500)


class BookUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=500)
    authors: list[str] | None = None
    description: str | None = None
    published_date: str | None = Field(None, max_length=32)
    publisher: str | None = Field(None, max_length=255)
    page_count: int | None = Field(None, ge=0)
    language: str | None = Field(None, max_length=32)
    categories: list[str] | None = None
    cover_image: str | None = Field(None, max_length=500)


class BookSearchPage(BaseModel):
    books: list[CatalogBook]
    total: int


class AuthorBooks(BaseModel):
    name: str
    books: list[CatalogBook]
