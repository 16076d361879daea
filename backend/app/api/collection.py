from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.schemas.user_book import CollectionAdd, CollectionPage, CollectionStatus, CollectionUpdate
from app.services import auth_service, book_service, export_service
from app.services.collection_store import CollectionStore
from app.services.errors import AlreadyInCollectionError, BookNotFoundError
from app.services.external_apis import GoogleBooksClient, get_google_books_client

router = APIRouter()


@router.get("", response_model=CollectionPage)
async def list_collection(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    current_user=Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
    lookup: GoogleBooksClient = Depends(get_google_books_client),
):
    """The user's collection with book details, newest first."""
    return await book_service.get_collection_with_details(
        db, lookup, current_user.id, page=page, page_size=page_size
    )


@router.get("/export")
async def export_collection(
    current_user=Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
    lookup: GoogleBooksClient = Depends(get_google_books_client),
):
    """Download the whole collection as a Libro CSV file."""
    content = await export_service.export_collection(db, lookup, current_user.id)
    filename = export_service.export_filename()
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("", response_model=CollectionStatus, status_code=status.HTTP_201_CREATED)
async def add_to_collection(
    data: CollectionAdd,
    current_user=Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    try:
        entry = CollectionStore(db).add_unique(
            current_user.id, data.book_id, data.source, data.ownership_status, data.reading_status
        )
    except AlreadyInCollectionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    return CollectionStatus(
        ownership_status=entry.ownership_status,
        reading_status=entry.reading_status,
    )


@router.get("/{book_id}/status", response_model=CollectionStatus)
async def get_collection_status(
    book_id: str,
    current_user=Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    collection_status = CollectionStore(db).get_status(current_user.id, book_id)
    if not collection_status:
        raise HTTPException(status_code=404, detail="Book is not in your collection")
    return collection_status


@router.patch("/{book_id}", response_model=CollectionStatus)
async def update_collection_entry(
    book_id: str,
    data: CollectionUpdate,
    current_user=Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    try:
        entry = CollectionStore(db).update(
            current_user.id, book_id, data.ownership_status, data.reading_status
        )
    except BookNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return CollectionStatus(
        ownership_status=entry.ownership_status,
        reading_status=entry.reading_status,
    )


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_from_collection(
    book_id: str,
    current_user=Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    try:
        CollectionStore(db).remove(current_user.id, book_id)
    except BookNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
