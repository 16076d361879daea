"""
Book reviews: one rating (1-5) and optional text per user and book.
"""

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.review import Review
from app.schemas.review import BookAverageRating, ReviewUpdate
from app.services.errors import BookNotFoundError, DuplicateReviewError


class ReviewStore:
    """Reads and writes reviews."""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        book_id: str,
        user_id: int,
        rating: int,
        text: str | None = None,
    ) -> Review:
        """
        Create a review.

        Raises:
            DuplicateReviewError: if the user already reviewed this book.
        """
        if not 1 <= rating <= 5:
            raise ValueError(f"Rating must be between 1 and 5, got {rating}")

        review = Review(book_id=book_id, user_id=user_id, rating=rating, review_text=text or None)
        self.db.add(review)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateReviewError("You have already reviewed this book") from e

        self.db.refresh(review)
        return review

    def update(self, review_id: int, user_id: int, data: ReviewUpdate) -> Review:
        review = self._get_own(review_id, user_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(review, field, value)
        self.db.commit()
        self.db.refresh(review)
        return review

    def delete(self, review_id: int, user_id: int) -> None:
        review = self._get_own(review_id, user_id)
        self.db.delete(review)
        self.db.commit()

    def get_user_review_for_book(self, user_id: int, book_id: str) -> Review | None:
        return (
            self.db.query(Review)
            .filter(Review.user_id == user_id, Review.book_id == book_id)
            .first()
        )

    def get_book_reviews(
        self, book_id: str, page: int = 1, page_size: int = 10
    ) -> tuple[list[Review], int]:
        return self._page(self.db.query(Review).filter(Review.book_id == book_id), page, page_size)

    def get_reviews_by_user(
        self, user_id: int, page: int = 1, page_size: int = 10
    ) -> tuple[list[Review], int]:
        return self._page(self.db.query(Review).filter(Review.user_id == user_id), page, page_size)

    def get_book_average_rating(self, book_id: str) -> BookAverageRating:
        average, count = (
            self.db.query(func.avg(Review.rating), func.count(Review.id))
            .filter(Review.book_id == book_id)
            .one()
        )
        return BookAverageRating(
            average_rating=round(float(average), 2) if average is not None else 0.0,
            total_reviews=count or 0,
        )

    def _get_own(self, review_id: int, user_id: int) -> Review:
        review = (
            self.db.query(Review)
            .filter(Review.id == review_id, Review.user_id == user_id)
            .first()
        )
        if not review:
            raise BookNotFoundError("Review not found")
        return review

    @staticmethod
    def _page(q, page: int, page_size: int) -> tuple[list[Review], int]:
        page = max(1, page)
        page_size = max(1, page_size)
        total = q.count()
        reviews = (
            q.order_by(Review.created_at.desc(), Review.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return reviews, total
