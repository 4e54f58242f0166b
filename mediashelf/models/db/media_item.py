"""Media item model for books and movies."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from sqlalchemy import JSON, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from mediashelf.models.db.base import Base, TimestampMixin

__all__ = [
    "ItemStatus",
    "MediaItem",
    "MediaType",
]


class MediaType(StrEnum):
    """Kinds of media an item or list can hold."""

    BOOK = "Book"
    MOVIE = "Movie"


class ItemStatus(StrEnum):
    """Consumption status of a media item."""

    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class MediaItem(TimestampMixin, Base):
    """A book or movie tracked in a user's library.

    ``lists`` holds the ids of every list containing this item; it is the
    inverse of ``MediaList.items`` and is kept in sync by the importer.
    """

    __tablename__ = "media_item"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String, index=True)
    media_type: Mapped[str] = mapped_column(String)

    categories: Mapped[list[str]] = mapped_column(JSON, default=list)
    author: Mapped[str | None] = mapped_column(String, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    cover_photo: Mapped[str | None] = mapped_column(String, nullable=True)
    language: Mapped[str | None] = mapped_column(String, nullable=True)
    published_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    ratings: Mapped[list[dict[str, str]] | None] = mapped_column(JSON, nullable=True)
    rating_count: Mapped[float | None] = mapped_column(Float, nullable=True)

    status: Mapped[str] = mapped_column(String, default=ItemStatus.PLANNED.value)
    my_rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    progress: Mapped[float] = mapped_column(Float, default=0)
    personal_notes: Mapped[str] = mapped_column(Text, default="")

    lists: Mapped[list[int]] = mapped_column(JSON, default=list)

    # Book
    isbn: Mapped[str | None] = mapped_column(String, nullable=True)
    page_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    publisher: Mapped[str | None] = mapped_column(String, nullable=True)

    # Movie
    actors: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    awards: Mapped[str | None] = mapped_column(String, nullable=True)
    runtime: Mapped[float | None] = mapped_column(Float, nullable=True)
    director: Mapped[str | None] = mapped_column(String, nullable=True)
    imdb_id: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (Index("ix_media_item_media_type", "media_type"),)

    def __repr__(self) -> str:
        """Return a short representation for logs."""
        return f"<MediaItem id={self.id} {self.media_type} {self.title!r}>"
