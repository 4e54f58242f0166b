"""Library snapshot schemas.

A snapshot is the portable form of a user's library: every media item and
every list, cross-referenced by identifiers that are only meaningful inside
the snapshot. Keys are camelCase on the wire.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mediashelf.models.db import MediaItem, MediaList

__all__ = [
    "BOOK_FIELD_MAP",
    "ITEM_FIELD_MAP",
    "LIST_FIELD_MAP",
    "MOVIE_FIELD_MAP",
    "SNAPSHOT_ID_KEYS",
    "LibrarySnapshot",
    "SnapshotList",
    "SnapshotMediaItem",
    "SnapshotRating",
    "parse_snapshot_date",
    "snapshot_id",
]

# Keys accepted for the snapshot-local identifier, in lookup order
SNAPSHOT_ID_KEYS: tuple[str, ...] = ("id", "localId", "_id")

_PARTIAL_DATE_REGEX = re.compile(r"^(\d{4})(?:-(\d{2}))?$")

# Snapshot key -> column, for fields every media item carries. ``lists`` is
# absent on purpose: back-references are rebuilt by the importer.
ITEM_FIELD_MAP: dict[str, str] = {
    "title": "title",
    "categories": "categories",
    "author": "author",
    "description": "description",
    "coverPhoto": "cover_photo",
    "language": "language",
    "publishedDate": "published_date",
    "ratings": "ratings",
    "ratingCount": "rating_count",
    "status": "status",
    "myRating": "my_rating",
    "progress": "progress",
    "personalNotes": "personal_notes",
}
BOOK_FIELD_MAP: dict[str, str] = {
    "ISBN": "isbn",
    "pageCount": "page_count",
    "publisher": "publisher",
}
MOVIE_FIELD_MAP: dict[str, str] = {
    "actors": "actors",
    "awards": "awards",
    "runtime": "runtime",
    "director": "director",
    "imdbID": "imdb_id",
}
LIST_FIELD_MAP: dict[str, str] = {"title": "title", "color": "color"}


def snapshot_id(record: dict[str, Any]) -> str | None:
    """Return the snapshot-local identifier of a record as a string."""
    for key in SNAPSHOT_ID_KEYS:
        value = record.get(key)
        if value is not None and not isinstance(value, bool):
            return str(value).strip()
    return None


def parse_snapshot_date(value: str) -> datetime:
    """Parse a snapshot date string.

    Besides full ISO 8601 dates and timestamps, reduced precision dates
    (``YYYY`` and ``YYYY-MM``, as published dates often are) are accepted and
    resolve to the first day of the period.

    Raises:
        ValueError: If the string is not a recognizable date.
    """
    text = value.strip()
    match = _PARTIAL_DATE_REGEX.match(text)
    if match:
        year, month = match.groups()
        return datetime(int(year), int(month or 1), 1, tzinfo=UTC)
    return datetime.fromisoformat(text)


def _as_utc(value: datetime | None) -> datetime | None:
    """SQLite drops the offset of stored timestamps, which are always UTC."""
    if value is None:
        return None
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


class SnapshotRating(BaseModel):
    """A third-party rating, e.g. ``{"source": "IMDb", "value": "8.1/10"}``."""

    source: str
    value: str


class SnapshotMediaItem(BaseModel):
    """Exported media item."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    media_type: str = Field(alias="mediaType")
    categories: list[str] = Field(default_factory=list)
    author: str | None = None
    description: str | None = None
    cover_photo: str | None = Field(default=None, alias="coverPhoto")
    language: str | None = None
    published_date: datetime | None = Field(default=None, alias="publishedDate")
    ratings: list[SnapshotRating] | None = None
    rating_count: float | None = Field(default=None, alias="ratingCount")
    status: str
    my_rating: float | None = Field(default=None, alias="myRating")
    progress: float | None = None
    personal_notes: str | None = Field(default=None, alias="personalNotes")
    lists: list[int] = Field(default_factory=list)

    isbn: str | None = Field(default=None, alias="ISBN")
    page_count: int | None = Field(default=None, alias="pageCount")
    publisher: str | None = None

    actors: list[str] | None = None
    awards: str | None = None
    runtime: float | None = None
    director: str | None = None
    imdb_id: str | None = Field(default=None, alias="imdbID")

    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    normalize_dates = field_validator(
        "published_date", "created_at", "updated_at"
    )(_as_utc)

    @classmethod
    def from_model(cls, item: MediaItem) -> SnapshotMediaItem:
        """Project a persisted item into its snapshot form."""
        return cls(**{name: getattr(item, name) for name in cls.model_fields})


class SnapshotList(BaseModel):
    """Exported list. The owning user is never part of a snapshot."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    color: str
    media_type: str = Field(alias="mediaType")
    items: list[int] = Field(default_factory=list)

    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    normalize_dates = field_validator("created_at", "updated_at")(_as_utc)

    @classmethod
    def from_model(cls, media_list: MediaList) -> SnapshotList:
        """Project a persisted list into its snapshot form."""
        return cls(
            **{name: getattr(media_list, name) for name in cls.model_fields}
        )


class LibrarySnapshot(BaseModel):
    """A user's complete library in portable form."""

    model_config = ConfigDict(populate_by_name=True)

    media_items: list[SnapshotMediaItem] = Field(
        default_factory=list, alias="mediaItems"
    )
    lists: list[SnapshotList] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Dump to the JSON shape accepted by the importer."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
