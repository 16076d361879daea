from app.schemas.auth import (
    PasswordResetConfirm,
    PasswordResetRequest,
    Token,
    UserCreate,
    UserResponse,
)
from app.schemas.book import AuthorBooks, BookCreate, BookSearchPage, BookUpdate, CatalogBook
from app.schemas.imports import (
    ImportCollectionResult,
    ImportFailure,
    ImportProgress,
    ImportStatus,
)
from app.schemas.review import BookAverageRating, ReviewCreate, ReviewPage, ReviewResponse, ReviewUpdate
from app.schemas.user_book import (
    OWNERSHIP_STATUSES,
    READING_STATUSES,
    CollectionAdd,
    CollectionPage,
    CollectionStatus,
    CollectionUpdate,
    OwnershipStatus,
    ReadingStatus,
    UserBookWithDetails,
)

__all__ = [
    "Token",
    "UserCreate",
    "UserResponse",
    "PasswordResetRequest",
    "PasswordResetConfirm",
    "CatalogBook",
    "BookCreate",
    "BookUpdate",
    "BookSearchPage",
    "AuthorBooks",
    "OwnershipStatus",
    "ReadingStatus",
    "OWNERSHIP_STATUSES",
    "READING_STATUSES",
    "CollectionAdd",
    "CollectionUpdate",
    "CollectionStatus",
    "CollectionPage",
    "UserBookWithDetails",
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewResponse",
    "ReviewPage",
    "BookAverageRating",
    "ImportProgress",
    "ImportFailure",
    "ImportCollectionResult",
    "ImportStatus",
]
