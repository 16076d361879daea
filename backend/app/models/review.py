from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


class Review(Base):
    """User rating and review text for a book."""

    __tablename__ = "reviews"
    __table_args__ = (UniqueConstraint("user_id", "book_id", name="unique_user_book_review"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    book_id: Mapped[str] = mapped_column(String(64), index=True)

    rating: Mapped[int] = mapped_column(Integer)  # 1-5 scale
    review_text: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    user: Mapped["User"] = relationship(back_populates="reviews")


from app.models.user import User  # noqa: E402, F811
