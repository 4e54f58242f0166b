"""Snapshot export of an owner's library."""

from mediashelf.core.library.store import LibraryStore
from mediashelf.models.db import User
from mediashelf.models.schemas.library import (
    LibrarySnapshot,
    SnapshotList,
    SnapshotMediaItem,
)

__all__ = ["export_library"]


def export_library(store: LibraryStore, owner: User) -> LibrarySnapshot:
    """Read everything ``owner`` owns into a snapshot with persisted ids."""
    items = store.find_items(owner.media_items or [])
    lists = store.find_lists(owner.lists or [])
    return LibrarySnapshot(
        media_items=[SnapshotMediaItem.from_model(item) for item in items],
        lists=[SnapshotList.from_model(media_list) for media_list in lists],
    )
