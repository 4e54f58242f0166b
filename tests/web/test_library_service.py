"""Unit tests for the library service."""

from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

import mediashelf.core.library.importer as importer_module
from mediashelf.config.settings import MediaShelfConfig
from mediashelf.exceptions import (
    ImportTimeoutError,
    LibraryImportError,
    OwnerNotFoundError,
)
from mediashelf.models.db import MediaItem, MediaList
from mediashelf.web.services.library_service import LibraryService
from tests.core.library.snapshots import book, dune_snapshot, snapshot


def _count(database, model) -> int:
    with database() as ctx:
        return ctx.session.scalar(select(func.count()).select_from(model))


def test_create_owner_seeds_default_lists(database):
    """New owners get the default lists when seeding is enabled."""
    config = MediaShelfConfig(seed_default_lists=True)
    service = LibraryService(database=lambda: database, config=lambda: config)

    owner_id = service.create_owner("reader", "reader@example.com")

    titles = [m.title for m in service.export_library(owner_id).lists]
    assert titles == [
        "Want to Read",
        "Currently Reading",
        "Finished Books",
        "Want to Watch",
        "Finished Movies",
    ]


def test_export_unknown_owner(library_service: LibraryService):
    """Exporting a missing owner raises OwnerNotFoundError."""
    with pytest.raises(OwnerNotFoundError, match="User 404 not found"):
        library_service.export_library(404)


def test_import_unknown_owner_is_checked_first(library_service: LibraryService):
    """The owner lookup happens before the snapshot is even validated."""
    with pytest.raises(OwnerNotFoundError):
        library_service.import_library(404, "not a snapshot")


def test_import_commits(library_service: LibraryService, database):
    """A successful import is visible from a fresh session."""
    owner_id = library_service.create_owner("reader")

    result = library_service.import_library(owner_id, dune_snapshot())

    assert result.ok
    exported = library_service.export_library(owner_id)
    assert [i.title for i in exported.media_items] == ["Dune"]
    assert _count(database, MediaList) == 1


def test_validation_failure_returns_errors(library_service: LibraryService, database):
    """Refused snapshots come back as data and write nothing."""
    owner_id = library_service.create_owner("reader")

    result = library_service.import_library(owner_id, {"mediaItems": []})

    assert result.errors == ["Lists must be an array."]
    assert _count(database, MediaItem) == 0


def test_store_failure_rolls_back_everything(
    library_service: LibraryService, database, monkeypatch: pytest.MonkeyPatch
):
    """A failure after the item pass leaves no partial import behind."""
    owner_id = library_service.create_owner("reader")

    def _fail(*_args, **_kwargs):
        raise OperationalError("UPDATE media_item", {}, Exception("disk I/O error"))

    monkeypatch.setattr(importer_module, "sync_back_references", _fail)

    with pytest.raises(LibraryImportError):
        library_service.import_library(owner_id, dune_snapshot())

    assert _count(database, MediaItem) == 0
    assert _count(database, MediaList) == 0
    assert library_service.export_library(owner_id).media_items == []


def test_failed_import_can_be_retried(
    library_service: LibraryService, database, monkeypatch: pytest.MonkeyPatch
):
    """After a rolled back import the same snapshot imports cleanly."""
    owner_id = library_service.create_owner("reader")
    original = importer_module.sync_back_references

    def _fail(*_args, **_kwargs):
        raise OperationalError("UPDATE media_list", {}, Exception("locked"))

    monkeypatch.setattr(importer_module, "sync_back_references", _fail)
    with pytest.raises(LibraryImportError):
        library_service.import_library(owner_id, dune_snapshot())

    monkeypatch.setattr(importer_module, "sync_back_references", original)
    result = library_service.import_library(owner_id, dune_snapshot())

    assert result.stats.items_created == 1
    assert _count(database, MediaItem) == 1


def test_timeout_rolls_back(database, monkeypatch: pytest.MonkeyPatch):
    """Imports past their deadline raise and persist nothing."""
    config = MediaShelfConfig(import_timeout=5, seed_default_lists=False)
    service = LibraryService(database=lambda: database, config=lambda: config)
    owner_id = service.create_owner("reader")

    def _expired(self, stage):
        if stage != "reconciliation":
            raise ImportTimeoutError(f"deadline passed after {stage}")

    monkeypatch.setattr(importer_module.LibraryImporter, "_check_deadline", _expired)

    with pytest.raises(ImportTimeoutError):
        service.import_library(owner_id, dune_snapshot())

    assert _count(database, MediaItem) == 0


def test_concurrent_imports_for_one_owner_do_not_duplicate(
    library_service: LibraryService, database
):
    """Imports for the same owner are serialized."""
    owner_id = library_service.create_owner("reader")
    data = snapshot(items=[book(str(i), f"Book {i}") for i in range(20)])

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(
            pool.map(lambda _: library_service.import_library(owner_id, data), range(4))
        )

    assert all(r.ok for r in results)
    assert sum(r.stats.items_created for r in results) == 20
    assert _count(database, MediaItem) == 20
    assert library_service._locks == {}


def test_owner_locks_are_dropped_when_idle(
    library_service: LibraryService, monkeypatch: pytest.MonkeyPatch
):
    """Per-owner locks do not outlive the imports that use them."""
    first = library_service.create_owner("reader")
    second = library_service.create_owner("writer")
    library_service.import_library(first, dune_snapshot())

    def _fail(*_args, **_kwargs):
        raise OperationalError("UPDATE media_list", {}, Exception("locked"))

    monkeypatch.setattr(importer_module, "sync_back_references", _fail)
    with pytest.raises(LibraryImportError):
        library_service.import_library(second, dune_snapshot())

    assert library_service._locks == {}
