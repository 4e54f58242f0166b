"""Service for exporting and importing whole user libraries."""

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from mediashelf.config.database import MediaShelfDB, get_db
from mediashelf.config.settings import MediaShelfConfig, get_config
from mediashelf.core.library import (
    ImportResult,
    LibraryImporter,
    LibraryStore,
    export_library,
)
from mediashelf.exceptions import LibraryImportError
from mediashelf.models.schemas.library import LibrarySnapshot
from mediashelf.utils.logging import get_logger

__all__ = ["LibraryService", "get_library_service"]

log = get_logger()


@dataclass
class LibraryService:
    """Runs library exports and imports against the application database.

    Every import is applied as a single transaction and imports for the same
    owner are serialized.
    """

    database: Callable[[], MediaShelfDB] = get_db
    config: Callable[[], MediaShelfConfig] = get_config
    # owner id -> (lock, number of holders and waiters); idle entries are dropped
    _locks: dict[int, tuple[threading.Lock, int]] = field(
        default_factory=dict, repr=False
    )
    _locks_guard: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @contextmanager
    def _owner_lock(self, owner_id: int) -> Iterator[None]:
        with self._locks_guard:
            lock, users = self._locks.get(owner_id, (threading.Lock(), 0))
            self._locks[owner_id] = (lock, users + 1)
        try:
            with lock:
                yield
        finally:
            with self._locks_guard:
                lock, users = self._locks[owner_id]
                if users == 1:
                    del self._locks[owner_id]
                else:
                    self._locks[owner_id] = (lock, users - 1)

    def create_owner(self, name: str, email: str | None = None) -> int:
        """Create a library owner and return its id.

        Default lists are seeded when ``seed_default_lists`` is enabled.
        """
        with self.database()() as ctx:
            owner = LibraryStore(ctx.session).create_owner(
                name, email, seed_default_lists=self.config().seed_default_lists
            )
            ctx.session.commit()
            log.info(f"Created owner $$'{name}'$$ $${{id: {owner.id}}}$$")
            return owner.id

    def export_library(self, owner_id: int) -> LibrarySnapshot:
        """Return the snapshot of an owner's library.

        Raises:
            OwnerNotFoundError: If the owner does not exist
        """
        with self.database()() as ctx:
            store = LibraryStore(ctx.session)
            snapshot = export_library(store, store.get_owner(owner_id))
        log.debug(
            f"Exported library for owner {owner_id}: "
            f"$${{items: {len(snapshot.media_items)}, lists: {len(snapshot.lists)}}}$$"
        )
        return snapshot

    def import_library(self, owner_id: int, data: Any) -> ImportResult:
        """Import a snapshot into an owner's library.

        Validation errors are returned on the result and leave the library
        untouched. Any failure while the snapshot is being applied rolls the
        whole import back.

        Args:
            owner_id (int): Id of the importing user
            data (Any): Decoded snapshot payload

        Returns:
            ImportResult: The reconciled library or the validation errors

        Raises:
            OwnerNotFoundError: If the owner does not exist
            ImportTimeoutError: If the import exceeded ``import_timeout``
            LibraryImportError: If the database failed during the import
        """
        config = self.config()
        with self._owner_lock(owner_id), self.database()() as ctx:
            store = LibraryStore(ctx.session)
            owner = store.get_owner(owner_id)
            importer = LibraryImporter(
                store,
                max_items=config.max_import_items,
                timeout=config.import_timeout,
            )
            try:
                result = importer.run(owner, data)
            except SQLAlchemyError as e:
                ctx.session.rollback()
                log.error(
                    f"Library import for owner {owner_id} failed, rolled back: {e}"
                )
                raise LibraryImportError(
                    f"Failed to import library for owner {owner_id}"
                ) from e

            if not result.ok:
                ctx.session.rollback()
                return result

            try:
                ctx.session.commit()
            except SQLAlchemyError as e:
                ctx.session.rollback()
                raise LibraryImportError(
                    f"Failed to commit library import for owner {owner_id}"
                ) from e

        log.success(f"Library import for owner {owner_id} committed")
        return result


@lru_cache(maxsize=1)
def get_library_service() -> LibraryService:
    """Return cached library service instance."""
    return LibraryService()
