"""Models for MediaShelf."""

from mediashelf.models.db import Base, MediaItem, MediaList, User

__all__ = ["Base", "MediaItem", "MediaList", "User"]
