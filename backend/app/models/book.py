from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class Book(Base):
    """Locally cataloged book (the "libro" source)."""

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(primary_key=True)

    title: Mapped[str] = mapped_column(String(500), index=True)
    authors: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Not unique: imports may create rows without any ISBN
    isbn_10: Mapped[str | None] = mapped_column(String(10), index=True)
    isbn_13: Mapped[str | None] = mapped_column(String(13), index=True)

    description: Mapped[str | None] = mapped_column(Text)
    published_date: Mapped[str | None] = mapped_column(String(32))  # "2015" or "2015-05-05"
    publisher: Mapped[str | None] = mapped_column(String(255))
    page_count: Mapped[int | None] = mapped_column(Integer)
    language: Mapped[str | None] = mapped_column(String(32))
    categories: Mapped[list[str] | None] = mapped_column(JSON)

    # Storage object path or absolute URL
    cover_image: Mapped[str | None] = mapped_column(String(500))

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
