"""Media list model."""

import re

from sqlalchemy import JSON, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from mediashelf.models.db.base import Base, TimestampMixin
from mediashelf.models.db.media_item import MediaType

__all__ = ["DEFAULT_LIST_COLOR", "DEFAULT_MEDIA_LISTS", "HEX_COLOR_REGEX", "MediaList"]

HEX_COLOR_REGEX = re.compile(r"^#([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$")
DEFAULT_LIST_COLOR = "#FFFFFF"

DEFAULT_MEDIA_LISTS: tuple[tuple[str, MediaType], ...] = (
    ("Want to Read", MediaType.BOOK),
    ("Currently Reading", MediaType.BOOK),
    ("Finished Books", MediaType.BOOK),
    ("Want to Watch", MediaType.MOVIE),
    ("Finished Movies", MediaType.MOVIE),
)


class MediaList(TimestampMixin, Base):
    """A user-owned, single media type collection of items."""

    __tablename__ = "media_list"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user.id", ondelete="CASCADE"), index=True
    )
    title: Mapped[str] = mapped_column(String)
    color: Mapped[str] = mapped_column(String, default=DEFAULT_LIST_COLOR)
    media_type: Mapped[str] = mapped_column(String)
    # Ordered, duplicate free item ids
    items: Mapped[list[int]] = mapped_column(JSON, default=list)

    __table_args__ = (Index("ix_media_list_media_type", "media_type"),)

    def __repr__(self) -> str:
        """Return a short representation for logs."""
        return f"<MediaList id={self.id} {self.media_type} {self.title!r}>"
