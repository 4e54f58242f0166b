"""Back-reference synchronization between lists and media items.

Lists point at items and items point back at lists. After the list pass has
settled every imported list's contents, each membership is made to hold in
both directions. Memberships are only ever added.
"""

from collections.abc import Sequence
from typing import Any

from mediashelf.core.library.merge import MergeExecutor, union_ids
from mediashelf.models.db import MediaItem
from mediashelf.models.schemas.library import snapshot_id
from mediashelf.utils.logging import get_logger

__all__ = ["collect_memberships", "sync_back_references"]

log = get_logger()


def collect_memberships(
    merge: MergeExecutor,
    item_records: Sequence[dict[str, Any]],
    item_table: dict[str, int],
    list_table: dict[str, int],
) -> list[tuple[int, int]]:
    """Gather ``(item id, list id)`` pairs that must hold after the import.

    Pairs come from the final contents of every imported list and from each
    snapshot item's ``lists``, rewritten to persisted ids. References that did
    not resolve are dropped.
    """
    pairs: dict[tuple[int, int], None] = {}

    for list_id in merge.list_ids:
        for item_id in merge.lists[list_id].items or []:
            pairs[(item_id, list_id)] = None

    for record in item_records:
        local_id = snapshot_id(record)
        item_id = item_table.get(local_id) if local_id is not None else None
        if item_id is None:
            continue
        for ref in record.get("lists") or []:
            list_id = list_table.get(str(ref).strip())
            if list_id is not None:
                pairs[(item_id, list_id)] = None

    return list(pairs)


def sync_back_references(
    merge: MergeExecutor,
    item_records: Sequence[dict[str, Any]],
    item_table: dict[str, int],
    list_table: dict[str, int],
) -> int:
    """Make every membership bidirectional.

    Args:
        merge (MergeExecutor): Merge whose item and list passes have completed
        item_records (Sequence[dict[str, Any]]): Snapshot media items
        item_table (dict[str, int]): Item translation table
        list_table (dict[str, int]): List translation table

    Returns:
        int: Number of memberships added in either direction
    """
    pairs = collect_memberships(merge, item_records, item_table, list_table)

    lists_to_add: dict[int, list[int]] = {}
    items_to_add: dict[int, list[int]] = {}
    for item_id, list_id in pairs:
        lists_to_add.setdefault(item_id, []).append(list_id)
        items_to_add.setdefault(list_id, []).append(item_id)

    # Lists may contain items that this import never touched. Only the owner's
    # own items are ever loaded or written.
    owned = set(merge.owner.media_items or [])
    untouched = [i for i in lists_to_add if i not in merge.items and i in owned]
    known: dict[int, MediaItem] = {
        item.id: item for item in merge.store.find_items(untouched)
    }
    known.update(merge.items)

    added = 0
    for item_id, list_ids in lists_to_add.items():
        item = known.get(item_id)
        if item is None:
            log.warning(
                f"List membership references item $${{id: {item_id}}}$$ outside "
                "the owner's library, skipping"
            )
            continue
        current = item.lists or []
        merged = union_ids(current, list_ids)
        if len(merged) != len(current):
            added += len(merged) - len(current)
            merge.store.update_item(item, lists=merged)

    for list_id, item_ids in items_to_add.items():
        media_list = merge.lists[list_id]
        current = media_list.items or []
        merged = union_ids(current, [i for i in item_ids if i in known])
        if len(merged) != len(current):
            added += len(merged) - len(current)
            merge.store.update_list(media_list, items=merged)

    log.debug(f"Synchronized back-references $${{added: {added}}}$$")
    return added
