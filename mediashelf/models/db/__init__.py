"""Models for MediaShelf database tables."""

from mediashelf.models.db.base import Base
from mediashelf.models.db.media_item import (
    ItemStatus,
    MediaItem,
    MediaType,
)
from mediashelf.models.db.media_list import DEFAULT_MEDIA_LISTS, MediaList
from mediashelf.models.db.user import User

__all__ = [
    "DEFAULT_MEDIA_LISTS",
    "Base",
    "ItemStatus",
    "MediaItem",
    "MediaList",
    "MediaType",
    "User",
]
