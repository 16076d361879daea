from app.services import (
    auth_service,
    book_service,
    export_service,
    import_service,
    password_reset,
)
from app.services.book_resolver import BookResolver, Resolution
from app.services.catalog_store import CatalogStore
from app.services.collection_store import CollectionStore
from app.services.csv_parser import (
    ColumnLayout,
    ImportRow,
    Schema,
    detect_schema,
    parse_row,
    read_csv,
)
from app.services.external_apis import GoogleBooksClient
from app.services.import_service import CollectionImporter, import_collection_from_csv
from app.services.review_service import ReviewStore

__all__ = [
    "auth_service",
    "book_service",
    "export_service",
    "import_service",
    "password_reset",
    # Stores
    "CatalogStore",
    "CollectionStore",
    "ReviewStore",
    # CSV parsing
    "Schema",
    "ColumnLayout",
    "ImportRow",
    "read_csv",
    "detect_schema",
    "parse_row",
    # Import
    "BookResolver",
    "Resolution",
    "CollectionImporter",
    "import_collection_from_csv",
    # External APIs
    "GoogleBooksClient",
]
