from datetime import datetime

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    book_id: str = Field(..., max_length=64)
    rating: int = Field(..., ge=1, le=5)
    review_text: str | None = None


class ReviewUpdate(BaseModel):
    rating: int | None = Field(None, ge=1, le=5)
    review_text: str | None = None


class ReviewResponse(BaseModel):
    id: int
    book_id: str
    user_id: int
    rating: int
    review_text: str | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ReviewPage(BaseModel):
    reviews: list[ReviewResponse]
    total: int


class BookAverageRating(BaseModel):
    average_rating: float
    total_reviews: int
