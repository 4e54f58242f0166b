"""Create-or-update of snapshot entities driven by reconciliation results."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any

from mediashelf.core.library.reconciler import Reconciliation, normalize_title
from mediashelf.core.library.store import LibraryStore
from mediashelf.models.db import ItemStatus, MediaItem, MediaList, MediaType, User
from mediashelf.models.db.media_list import DEFAULT_LIST_COLOR
from mediashelf.models.schemas.library import (
    BOOK_FIELD_MAP,
    ITEM_FIELD_MAP,
    LIST_FIELD_MAP,
    MOVIE_FIELD_MAP,
    parse_snapshot_date,
    snapshot_id,
)
from mediashelf.utils.logging import get_logger

__all__ = [
    "MergeExecutor",
    "MergeStats",
    "item_columns",
    "list_columns",
    "union_ids",
]

log = get_logger()

_TYPE_FIELD_MAPS: dict[str, dict[str, str]] = {
    MediaType.BOOK.value: BOOK_FIELD_MAP,
    MediaType.MOVIE.value: MOVIE_FIELD_MAP,
}


def _strip(value: str | None) -> str | None:
    return value.strip() if isinstance(value, str) else value


def _parse_date(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    return parse_snapshot_date(str(value))


# Column -> conversion applied to incoming snapshot values
_CONVERTERS: dict[str, Callable[[Any], Any]] = {
    "title": _strip,
    "author": _strip,
    "language": lambda v: v.strip().upper() if isinstance(v, str) else v,
    "categories": lambda v: [c.strip() for c in v],
    "published_date": _parse_date,
    "ratings": lambda v: (
        [{"source": r["source"].strip(), "value": r["value"].strip()} for r in v]
        if v is not None
        else None
    ),
    "personal_notes": lambda v: v.strip() if isinstance(v, str) else "",
    "progress": lambda v: v if v is not None else 0,
    "status": lambda v: v if v is not None else ItemStatus.PLANNED.value,
    "page_count": lambda v: int(v) if v is not None else None,
    "actors": lambda v: [a.strip() for a in v] if v is not None else None,
    "isbn": _strip,
    "publisher": _strip,
    "director": _strip,
    "imdb_id": _strip,
    "color": lambda v: (
        v.strip().upper() if isinstance(v, str) else DEFAULT_LIST_COLOR
    ),
}


def _columns(record: dict[str, Any], field_map: dict[str, str]) -> dict[str, Any]:
    columns: dict[str, Any] = {}
    for key, column in field_map.items():
        if key not in record:
            continue
        convert = _CONVERTERS.get(column)
        value = record[key]
        columns[column] = convert(value) if convert else value
    return columns


def item_columns(record: dict[str, Any]) -> dict[str, Any]:
    """Translate a snapshot media item into column values.

    Only keys present in the record are returned, and only the type-specific
    keys of the record's own media type. ``id`` and ``lists`` never are.
    """
    columns = _columns(record, ITEM_FIELD_MAP)
    columns.update(_columns(record, _TYPE_FIELD_MAPS[record["mediaType"]]))
    return columns


def list_columns(record: dict[str, Any]) -> dict[str, Any]:
    """Translate a snapshot list into column values, excluding ``items``."""
    return _columns(record, LIST_FIELD_MAP)


def union_ids(existing: Sequence[int], incoming: Sequence[int]) -> list[int]:
    """Order-preserving union of two id sequences, existing ids first."""
    seen: set[int] = set()
    merged: list[int] = []
    for value in (*existing, *incoming):
        if value not in seen:
            seen.add(value)
            merged.append(value)
    return merged


@dataclass
class MergeStats:
    """Counts of what a merge did."""

    items_created: int = 0
    items_updated: int = 0
    lists_created: int = 0
    lists_updated: int = 0

    def __str__(self) -> str:
        """Summary used in log messages."""
        return (
            f"items created={self.items_created} updated={self.items_updated}, "
            f"lists created={self.lists_created} updated={self.lists_updated}"
        )


@dataclass
class MergeExecutor:
    """Applies a validated snapshot to an owner's library.

    The item pass runs before the list pass so that list memberships can be
    rewritten to persisted item ids. Entities are only ever created or
    updated, never deleted.
    """

    store: LibraryStore
    owner: User
    stats: MergeStats = field(default_factory=MergeStats)
    # Persisted id -> entity, for everything touched by this merge
    items: dict[int, MediaItem] = field(default_factory=dict)
    lists: dict[int, MediaList] = field(default_factory=dict)
    # Persisted id of each snapshot list, by position
    list_ids: list[int] = field(default_factory=list)

    def merge_items(
        self,
        records: Sequence[dict[str, Any]],
        reconciliation: Reconciliation,
        existing: dict[int, MediaItem],
    ) -> None:
        """Run the item pass.

        Matched records update their item in place. New records create an item
        with no list memberships; its id is recorded in the translation table
        right away, and a later record with the same title updates it instead
        of creating another one.
        """
        log.debug(f"Merging $${{items: {len(records)}}}$$ for owner {self.owner.id}")
        created_by_title: dict[str, int] = {}

        for position, record in enumerate(records):
            persisted_id = reconciliation.matches[position]
            title_key = normalize_title(record["title"])
            if persisted_id is None:
                persisted_id = created_by_title.get(title_key)

            columns = item_columns(record)
            if persisted_id is not None:
                item = self.items.get(persisted_id) or existing[persisted_id]
                self.store.update_item(item, **columns)
                self.stats.items_updated += 1
            else:
                columns.setdefault("categories", [])
                item = self.store.create_item(
                    media_type=record["mediaType"], lists=[], **columns
                )
                persisted_id = item.id
                created_by_title[title_key] = persisted_id
                self.stats.items_created += 1
                log.debug(f"Created item $$'{item.title}'$$ $${{id: {item.id}}}$$")

            self.items[persisted_id] = item
            local_id = snapshot_id(record)
            if local_id is not None:
                reconciliation.table[local_id] = persisted_id

    def merge_lists(
        self,
        records: Sequence[dict[str, Any]],
        reconciliation: Reconciliation,
        item_table: dict[str, int],
        existing: dict[int, MediaList],
    ) -> None:
        """Run the list pass.

        Item references are rewritten through ``item_table`` first. A matched
        list keeps all of its current items and gains the incoming ones; a new
        list is created with the incoming ones.
        """
        log.debug(f"Merging $${{lists: {len(records)}}}$$ for owner {self.owner.id}")
        created_by_title: dict[str, int] = {}

        for position, record in enumerate(records):
            incoming = [
                item_table[str(ref).strip()]
                for ref in record.get("items", [])
                if str(ref).strip() in item_table
            ]
            persisted_id = reconciliation.matches[position]
            title_key = normalize_title(record["title"])
            if persisted_id is None:
                persisted_id = created_by_title.get(title_key)

            columns = list_columns(record)
            if persisted_id is not None:
                media_list = self.lists.get(persisted_id) or existing[persisted_id]
                self.store.update_list(
                    media_list,
                    items=union_ids(media_list.items or [], incoming),
                    **columns,
                )
                self.stats.lists_updated += 1
            else:
                media_list = self.store.create_list(
                    self.owner.id,
                    media_type=record["mediaType"],
                    items=union_ids([], incoming),
                    **columns,
                )
                persisted_id = media_list.id
                created_by_title[title_key] = persisted_id
                self.stats.lists_created += 1
                log.debug(
                    f"Created list $$'{media_list.title}'$$ "
                    f"$${{id: {media_list.id}}}$$"
                )

            self.lists[persisted_id] = media_list
            self.list_ids.append(persisted_id)
            local_id = snapshot_id(record)
            if local_id is not None:
                reconciliation.table[local_id] = persisted_id

    def save_owner(self) -> None:
        """Add every touched entity to the owner's owned sets and persist them."""
        self.store.save_owner(
            self.owner,
            media_items=union_ids(self.owner.media_items or [], list(self.items)),
            lists=union_ids(self.owner.lists or [], list(self.lists)),
        )
