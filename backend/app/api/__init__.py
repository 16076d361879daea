from fastapi import APIRouter

from app.api import auth, books, collection, imports, reviews

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(books.router, prefix="/books", tags=["books"])
router.include_router(collection.router, prefix="/collection", tags=["collection"])
router.include_router(reviews.router, prefix="/reviews", tags=["reviews"])
router.include_router(imports.router, prefix="/imports", tags=["imports"])
