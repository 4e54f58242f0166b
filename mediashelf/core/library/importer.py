"""Library snapshot import.

An import runs as a fixed sequence: validate, reconcile identities, merge
items, merge lists, persist the owner's sets, synchronize back-references and
finally read the library back. Each stage depends on the one before it.
"""

import time
from dataclasses import dataclass, field
from typing import Any

from mediashelf.core.library.backrefs import sync_back_references
from mediashelf.core.library.exporter import export_library
from mediashelf.core.library.merge import MergeExecutor, MergeStats
from mediashelf.core.library.reconciler import find_media_type_conflicts, reconcile
from mediashelf.core.library.store import LibraryStore
from mediashelf.core.library.validator import validate_library_data
from mediashelf.exceptions import ImportTimeoutError
from mediashelf.models.db import User
from mediashelf.models.schemas.library import LibrarySnapshot
from mediashelf.utils.logging import get_logger

__all__ = ["ImportResult", "LibraryImporter"]

log = get_logger()


@dataclass
class ImportResult:
    """Outcome of an import: the reconciled library or the reasons it was refused."""

    library: LibrarySnapshot | None = None
    errors: list[str] = field(default_factory=list)
    stats: MergeStats = field(default_factory=MergeStats)

    @property
    def ok(self) -> bool:
        """Whether the snapshot was applied."""
        return not self.errors


class LibraryImporter:
    """Reconciles a snapshot into one owner's library through a LibraryStore.

    The importer performs no commit. When it returns errors nothing has been
    written; when it raises, the caller is expected to roll back.
    """

    def __init__(
        self, store: LibraryStore, max_items: int = 0, timeout: float = 0
    ) -> None:
        """Initialize the importer.

        Args:
            store (LibraryStore): Store bound to the session to write through
            max_items (int): Maximum media items per snapshot, 0 for no limit
            timeout (float): Seconds the import may take, 0 for no deadline
        """
        self.store = store
        self.max_items = max_items
        self.timeout = timeout
        self._deadline: float | None = None

    def _check_deadline(self, stage: str) -> None:
        if self._deadline is not None and time.monotonic() > self._deadline:
            raise ImportTimeoutError(
                f"Library import exceeded its {self.timeout}s deadline after {stage}"
            )

    def run(self, owner: User, data: Any) -> ImportResult:
        """Import ``data`` into ``owner``'s library.

        Args:
            owner (User): The importing user
            data (Any): Decoded snapshot payload

        Returns:
            ImportResult: The reconciled library, or validation errors when the
                snapshot was refused without any write

        Raises:
            ImportTimeoutError: If the deadline passed between two stages
        """
        self._deadline = time.monotonic() + self.timeout if self.timeout else None

        errors = validate_library_data(data, max_items=self.max_items)
        if errors:
            log.warning(
                f"Rejected library import for owner {owner.id}: "
                f"$${{errors: {len(errors)}}}$$"
            )
            return ImportResult(errors=errors)

        item_records: list[dict[str, Any]] = data["mediaItems"]
        list_records: list[dict[str, Any]] = data["lists"]

        existing_items = {i.id: i for i in self.store.find_items(owner.media_items)}
        existing_lists = {m.id: m for m in self.store.find_lists(owner.lists)}

        conflicts = find_media_type_conflicts(
            existing_items.values(), item_records, "Media item"
        ) + find_media_type_conflicts(existing_lists.values(), list_records, "List")
        if conflicts:
            log.warning(
                f"Rejected library import for owner {owner.id}: "
                f"$${{media type conflicts: {len(conflicts)}}}$$"
            )
            return ImportResult(errors=conflicts)

        item_rec = reconcile(existing_items.values(), item_records)
        list_rec = reconcile(existing_lists.values(), list_records)
        log.debug(
            f"Reconciled owner {owner.id}: $${{items matched: {item_rec.matched}, "
            f"lists matched: {list_rec.matched}}}$$"
        )
        self._check_deadline("reconciliation")

        merge = MergeExecutor(self.store, owner)
        merge.merge_items(item_records, item_rec, existing_items)
        self._check_deadline("the item pass")

        merge.merge_lists(list_records, list_rec, item_rec.table, existing_lists)
        merge.save_owner()
        self._check_deadline("the list pass")

        sync_back_references(merge, item_records, item_rec.table, list_rec.table)
        self._check_deadline("back-reference synchronization")

        library = export_library(self.store, owner)
        log.info(f"Imported library for owner {owner.id}: {merge.stats}")
        return ImportResult(library=library, stats=merge.stats)
