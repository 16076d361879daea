from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.schemas.imports import ImportCollectionResult, ImportStatus
from app.services import auth_service, import_service
from app.services.errors import ImportSchemaError
from app.services.external_apis import GoogleBooksClient, get_google_books_client

router = APIRouter()


@router.post("/library", response_model=ImportCollectionResult)
async def import_library_csv(
    file: UploadFile = File(..., description="Library CSV (Libro export or Goodreads export)"),
    session: auth_service.SessionContext = Depends(auth_service.get_session_context),
    db: Session = Depends(get_db),
    lookup: GoogleBooksClient = Depends(get_google_books_client),
):
    """
    Import a library CSV into the current user's collection.

    Both the Libro export layout and the Goodreads export are accepted; the
    layout is detected from the header row.

    **Goodreads:**
    1. Go to goodreads.com/review/import
    2. Click "Export Library"
    3. Download the CSV file
    4. Upload it here
    """
    max_size = get_settings().MAX_IMPORT_FILE_SIZE

    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise HTTPException(
            status_code=400,
            detail="File must be a CSV file",
        )

    content = await file.read()
    if len(content) > max_size:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size is {max_size // (1024 * 1024)}MB",
        )

    # Binary files fail here; a UTF-8 BOM is dropped
    try:
        csv_text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=400,
            detail="File does not appear to be a valid text CSV file",
        ) from None

    try:
        _, result = await import_service.run_tracked_import(db, session, csv_text, lookup)
    except ImportSchemaError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return result


@router.get("/active", response_model=ImportStatus | None)
async def get_active_import(
    session: auth_service.SessionContext = Depends(auth_service.get_session_context),
):
    """Progress of the user's running import, if any."""
    return import_service.get_active_import(session.user_id)


@router.get("/history", response_model=list[ImportStatus])
async def get_import_history(
    session: auth_service.SessionContext = Depends(auth_service.get_session_context),
    limit: int = 10,
):
    """Get user's import history."""
    return import_service.get_import_history(session.user_id, limit)
