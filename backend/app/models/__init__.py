from app.models.book import Book
from app.models.review import Review
from app.models.user import User
from app.models.user_book import UserBook

__all__ = [
    "User",
    "Book",
    "UserBook",
    "Review",
]
