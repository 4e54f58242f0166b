"""User model, the owner aggregate of a library."""

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from mediashelf.models.db.base import Base, TimestampMixin

__all__ = ["User"]


class User(TimestampMixin, Base):
    """A library owner.

    ``media_items`` and ``lists`` are the ids of everything the user owns and
    bound what an import for this user may read or change.
    """

    __tablename__ = "user"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String)
    email: Mapped[str | None] = mapped_column(String, nullable=True)

    media_items: Mapped[list[int]] = mapped_column(JSON, default=list)
    lists: Mapped[list[int]] = mapped_column(JSON, default=list)
