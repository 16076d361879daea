"""
Library CSV import service.

Handles the full import pipeline:
1. Read the CSV and detect its layout (Libro or Goodreads)
2. Parse each row
3. Resolve the row to a book (Google Books, local catalog, or a new entry)
4. Add the book to the user's collection
5. Record the Goodreads rating/review when present

Rows are processed one at a time in file order. A bad row is recorded in
the result and the import moves on; only a missing session or an
unreadable/unsupported file aborts the whole import.
"""

import uuid
from datetime import datetime
from typing import Callable

from sqlalchemy.orm import Session

from app.core.logging import get_context_logger, get_logger
from app.models.user import User
from app.schemas.imports import (
    ImportCollectionResult,
    ImportFailure,
    ImportProgress,
    ImportStatus,
)
from app.services.auth_service import SessionContext
from app.services.book_resolver import BookResolver
from app.services.catalog_store import CatalogStore
from app.services.collection_store import CollectionStore
from app.services.csv_parser import ColumnLayout, Schema, detect_schema, parse_row, read_csv
from app.services.errors import DuplicateReviewError, NotAuthenticatedError
from app.services.external_apis import GoogleBooksClient
from app.services.review_service import ReviewStore

logger = get_logger(__name__)

ProgressCallback = Callable[[ImportProgress], None]

# Log a progress line every N rows
PROGRESS_LOG_INTERVAL = 50

# In-memory store for import status (per process)
_import_status: dict[str, dict] = {}


class CollectionImporter:
    """Imports a library CSV into one user's collection."""

    def __init__(
        self,
        db: Session,
        resolver: BookResolver,
        collection: CollectionStore,
        reviews: ReviewStore,
    ):
        self.db = db
        self.resolver = resolver
        self.collection = collection
        self.reviews = reviews

    async def run(
        self,
        session: SessionContext | None,
        csv_text: str,
        on_progress: ProgressCallback | None = None,
    ) -> ImportCollectionResult:
        """
        Import every data row of ``csv_text``.

        ``on_progress`` is called once per row, after the row succeeded,
        was skipped or failed.

        Raises:
            NotAuthenticatedError: if there is no session.
            ImportSchemaError: if the file is empty or its header is unusable.
        """
        if session is None:
            raise NotAuthenticatedError("You must be logged in to import books to your collection")

        headers, records = read_csv(csv_text)
        layout = detect_schema(headers)

        total = len(records)
        result = ImportCollectionResult()
        processed_rows = 0

        log = get_context_logger(__name__, user_id=session.user_id, schema=layout.schema.value)
        log.info(f"Importing {total} rows ({layout.schema.value} format)")

        for values in records:
            try:
                if await self._import_row(session.user_id, values, layout):
                    result.success += 1
            except Exception as e:
                self.db.rollback()
                result.failed.append(
                    ImportFailure(row=processed_rows + 1, error=str(e) or "Unknown error occurred")
                )

            processed_rows += 1
            if on_progress:
                on_progress(ImportProgress(current=processed_rows, total=total))

        log.info(
            f"Import finished: {result.success} imported, {len(result.failed)} failed, "
            f"{total - result.success - len(result.failed)} already in collection"
        )
        return result

    async def _import_row(self, user_id: int, values: list[str], layout: ColumnLayout) -> bool:
        """Import one row. Returns False when the book was already in the collection."""
        row = parse_row(values, layout)
        resolution = await self.resolver.resolve(row, user_id)

        if resolution.status == "exists":
            return False

        self.collection.add(
            user_id,
            resolution.book.id,
            resolution.book.source,
            row.ownership_status,
            row.reading_status,
        )

        if layout.schema is Schema.EXTERNAL_EXPORT and row.rating > 0:
            self._create_review(user_id, resolution.book.id, row.rating, row.review_text)

        return True

    def _create_review(self, user_id: int, book_id: str, rating: int, text: str | None) -> None:
        try:
            self.reviews.create(book_id, user_id, rating, text)
        except DuplicateReviewError:
            pass
        except Exception as e:
            self.db.rollback()
            logger.error(
                f"Failed to create review for book {book_id}: {e}",
                extra={"extra_fields": {"user_id": user_id, "book_id": book_id}},
            )


async def import_collection_from_csv(
    session: SessionContext | None,
    csv_text: str,
    on_progress: ProgressCallback | None = None,
    *,
    db: Session,
    lookup: GoogleBooksClient,
) -> ImportCollectionResult:
    """Import a library CSV using the database-backed stores."""
    catalog = CatalogStore(db)
    collection = CollectionStore(db)
    importer = CollectionImporter(
        db=db,
        resolver=BookResolver(lookup, catalog, collection),
        collection=collection,
        reviews=ReviewStore(db),
    )
    return await importer.run(session, csv_text, on_progress)


async def run_tracked_import(
    db: Session,
    session: SessionContext,
    csv_text: str,
    lookup: GoogleBooksClient,
) -> tuple[str, ImportCollectionResult]:
    """
    Run an import while recording its progress for status polling.

    Returns the import_id and the final result. Fatal errors are recorded
    on the import and re-raised.
    """
    import_id = str(uuid.uuid4())
    _import_status[import_id] = {
        "import_id": import_id,
        "user_id": session.user_id,
        "status": "processing",
        "current": 0,
        "total": 0,
        "started_at": datetime.utcnow(),
        "result": None,
        "error": None,
    }

    def record_progress(progress: ImportProgress) -> None:
        _import_status[import_id]["current"] = progress.current
        _import_status[import_id]["total"] = progress.total
        if progress.current % PROGRESS_LOG_INTERVAL == 0:
            logger.info(f"Processing books ({progress.current}/{progress.total})...")

    try:
        result = await import_collection_from_csv(
            session, csv_text, record_progress, db=db, lookup=lookup
        )
    except Exception as e:
        _import_status[import_id]["status"] = "failed"
        _import_status[import_id]["error"] = str(e)
        _import_status[import_id]["completed_at"] = datetime.utcnow()
        raise

    _import_status[import_id]["status"] = "completed"
    _import_status[import_id]["result"] = result
    _import_status[import_id]["completed_at"] = datetime.utcnow()

    user = db.query(User).filter(User.id == session.user_id).first()
    if user:
        user.last_import_at = datetime.utcnow()
        db.commit()

    return import_id, result


def get_active_import(user_id: int) -> ImportStatus | None:
    """Most recent still-running import for a user."""
    running = [
        status
        for status in _import_status.values()
        if status["user_id"] == user_id and status["status"] == "processing"
    ]
    if not running:
        return None
    return _to_schema(max(running, key=lambda s: s["started_at"]))


def get_import_history(user_id: int, limit: int = 10) -> list[ImportStatus]:
    """User's finished imports, newest first."""
    finished = [
        _to_schema(status)
        for status in _import_status.values()
        if status["user_id"] == user_id and status["status"] in ("completed", "failed")
    ]
    finished.sort(key=lambda s: s.started_at, reverse=True)
    return finished[:limit]


def _to_schema(status: dict) -> ImportStatus:
    return ImportStatus(
        import_id=status["import_id"],
        status=status["status"],
        current=status["current"],
        total=status["total"],
        started_at=status["started_at"],
        completed_at=status.get("completed_at"),
        result=status.get("result"),
        error=status.get("error"),
    )
