from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.schemas.book import AuthorBooks, BookCreate, BookSearchPage, BookSource, BookUpdate, CatalogBook
from app.services import auth_service, book_service
from app.services.catalog_store import CatalogStore
from app.services.errors import BookAlreadyExistsError, BookNotFoundError, CatalogLookupError
from app.services.external_apis import GoogleBooksClient, get_google_books_client

router = APIRouter()


@router.get("/search", response_model=BookSearchPage)
async def search_books(
    q: str = Query(..., min_length=1, description="Search query"),
    page: int = Query(1, ge=1),
    page_size: int = Query(40, ge=1, le=40),
    search_type: Literal["general", "isbn"] = Query("general"),
    db: Session = Depends(get_db),
    lookup: GoogleBooksClient = Depends(get_google_books_client),
):
    """Search local books and Google Books together."""
    return await book_service.search_books(
        db, lookup, q, page=page, page_size=page_size, search_type=search_type
    )


@router.get("/authors/{name}", response_model=AuthorBooks)
async def get_author(
    name: str,
    db: Session = Depends(get_db),
    lookup: GoogleBooksClient = Depends(get_google_books_client),
):
    """Books by an author from both sources."""
    return await book_service.get_author_by_name(db, lookup, name)


@router.get("/{source}/{book_id}", response_model=CatalogBook)
async def get_book(
    source: BookSource,
    book_id: str,
    db: Session = Depends(get_db),
    lookup: GoogleBooksClient = Depends(get_google_books_client),
):
    try:
        book = await book_service.get_book_by_id(db, lookup, source, book_id)
    except CatalogLookupError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e

    if not book:
        raise HTTPException(status_code=404, detail="Book not found")
    return book


@router.post("", response_model=CatalogBook, status_code=status.HTTP_201_CREATED)
async def create_book(
    book_data: BookCreate,
    current_user=Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
    lookup: GoogleBooksClient = Depends(get_google_books_client),
):
    """Add a book to the local catalog."""
    try:
        return await book_service.create_book(db, lookup, book_data)
    except BookAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except CatalogLookupError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e


@router.patch("/{book_id}", response_model=CatalogBook)
async def update_book(
    book_id: str,
    book_data: BookUpdate,
    current_user=Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return CatalogStore(db).update(book_id, book_data)
    except BookNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
