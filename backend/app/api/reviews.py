from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.schemas.review import (
    BookAverageRating,
    ReviewCreate,
    ReviewPage,
    ReviewResponse,
    ReviewUpdate,
)
from app.services import auth_service
from app.services.errors import BookNotFoundError, DuplicateReviewError
from app.services.review_service import ReviewStore

router = APIRouter()


@router.get("/book/{book_id}", response_model=ReviewPage)
async def get_book_reviews(
    book_id: str,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    reviews, total = ReviewStore(db).get_book_reviews(book_id, page, page_size)
    return {"reviews": reviews, "total": total}


@router.get("/book/{book_id}/average", response_model=BookAverageRating)
async def get_book_average_rating(book_id: str, db: Session = Depends(get_db)):
    return ReviewStore(db).get_book_average_rating(book_id)


@router.get("/book/{book_id}/mine", response_model=ReviewResponse)
async def get_my_review(
    book_id: str,
    current_user=Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    review = ReviewStore(db).get_user_review_for_book(current_user.id, book_id)
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")
    return review


@router.get("/user/{user_id}", response_model=ReviewPage)
async def get_user_reviews(
    user_id: int,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    reviews, total = ReviewStore(db).get_reviews_by_user(user_id, page, page_size)
    return {"reviews": reviews, "total": total}


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    data: ReviewCreate,
    current_user=Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return ReviewStore(db).create(data.book_id, current_user.id, data.rating, data.review_text)
    except DuplicateReviewError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e


@router.patch("/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: int,
    data: ReviewUpdate,
    current_user=Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return ReviewStore(db).update(review_id, current_user.id, data)
    except BookNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(
    review_id: int,
    current_user=Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    try:
        ReviewStore(db).delete(review_id, current_user.id)
    except BookNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
