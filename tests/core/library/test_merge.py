"""Tests for the item and list merge passes."""

from datetime import datetime

from mediashelf.core.library.merge import (
    MergeExecutor,
    item_columns,
    list_columns,
    union_ids,
)
from mediashelf.core.library.reconciler import reconcile
from tests.core.library.snapshots import book, media_list, movie


def test_union_ids_keeps_existing_order_first():
    """Existing ids come first and nothing is duplicated."""
    assert union_ids([3, 1], [1, 2, 3, 4, 2]) == [3, 1, 2, 4]
    assert union_ids([], []) == []


def test_item_columns_only_carry_present_and_own_type_fields():
    """Absent keys are left alone and foreign type fields are ignored."""
    record = book(
        "i1",
        "  Dune ",
        language="en",
        publishedDate="1965-08-01",
        ISBN=" 9780441013593 ",
        runtime=120,
        personalNotes=None,
    )

    columns = item_columns(record)

    assert columns["title"] == "Dune"
    assert columns["language"] == "EN"
    assert columns["published_date"] == datetime(1965, 8, 1)
    assert columns["isbn"] == "9780441013593"
    assert columns["personal_notes"] == ""
    assert "runtime" not in columns
    assert "lists" not in columns
    assert "author" not in columns


def test_movie_columns_map_camel_case_keys():
    """Movie specific keys are translated to their columns."""
    columns = item_columns(movie("m1", "Alien", imdbID="tt0078748", actors=[" A "]))

    assert columns["imdb_id"] == "tt0078748"
    assert columns["actors"] == ["A"]


def test_list_columns_upper_case_color():
    """List colors are normalized and items are never copied as columns."""
    columns = list_columns(media_list("l1", "Sci-Fi", items=["i1"], color="#abc"))

    assert columns == {"title": "Sci-Fi", "color": "#ABC"}


def test_merge_items_creates_and_updates(store):
    """Unmatched records create items and matched ones update in place."""
    owner = store.create_owner("reader")
    existing = store.create_item(
        title="Dune", media_type="Book", categories=[], lists=[], progress=10
    )
    records = [book("i1", "dune", progress=50), book("i2", "Emma")]
    rec = reconcile([existing], records)

    merge = MergeExecutor(store, owner)
    merge.merge_items(records, rec, {existing.id: existing})

    assert merge.stats.items_updated == 1
    assert merge.stats.items_created == 1
    assert existing.progress == 50
    assert existing.title == "dune"
    assert rec.table["i1"] == existing.id
    emma = merge.items[rec.table["i2"]]
    assert emma.title == "Emma"
    assert emma.lists == []
    assert emma.status == "PLANNED"


def test_merge_items_never_touches_lists(store):
    """Back-references are not copied from the snapshot by the item pass."""
    owner = store.create_owner("reader")
    existing = store.create_item(
        title="Dune", media_type="Book", categories=[], lists=[99]
    )
    records = [book("i1", "Dune", lists=["l1"])]

    merge = MergeExecutor(store, owner)
    merge.merge_items(records, reconcile([existing], records), {existing.id: existing})

    assert existing.lists == [99]


def test_merge_items_creates_one_item_per_title(store):
    """Same-title records within one snapshot resolve to a single item."""
    owner = store.create_owner("reader")
    records = [book("a", "Dune"), book("b", " DUNE ", progress=3)]
    rec = reconcile([], records)

    merge = MergeExecutor(store, owner)
    merge.merge_items(records, rec, {})

    assert merge.stats.items_created == 1
    assert rec.table["a"] == rec.table["b"]
    assert merge.items[rec.table["a"]].progress == 3


def test_merge_lists_unions_existing_items(store):
    """A matched list keeps its items and gains the incoming ones."""
    owner = store.create_owner("reader")
    a, b, c = (
        store.create_item(title=t, media_type="Book", categories=[], lists=[])
        for t in ("A", "B", "C")
    )
    existing = store.create_list(owner.id, title="Sci-Fi", media_type="Book")
    store.update_list(existing, items=[a.id, b.id])
    records = [media_list("l1", "sci-fi", items=["x", "y"])]

    merge = MergeExecutor(store, owner)
    merge.merge_lists(
        records,
        reconcile([existing], records),
        {"x": b.id, "y": c.id},
        {existing.id: existing},
    )

    assert existing.items == [a.id, b.id, c.id]
    assert merge.stats.lists_updated == 1
    assert merge.list_ids == [existing.id]


def test_merge_lists_creates_owned_list(store):
    """Unmatched lists are created for the owner with rewritten items."""
    owner = store.create_owner("reader")
    item = store.create_item(title="Dune", media_type="Book", categories=[], lists=[])
    records = [media_list("l1", "Sci-Fi", items=["i1", "unknown"])]
    rec = reconcile([], records)

    merge = MergeExecutor(store, owner)
    merge.merge_lists(records, rec, {"i1": item.id}, {})
    merge.save_owner()

    created = merge.lists[rec.table["l1"]]
    assert created.owner_id == owner.id
    assert created.items == [item.id]
    assert created.color == "#FFFFFF"
    assert owner.lists == [created.id]


def test_save_owner_adds_without_removing(store):
    """Owned id sets only grow."""
    owner = store.create_owner("reader")
    store.save_owner(owner, media_items=[500], lists=[600])
    records = [book("i1", "Dune")]

    merge = MergeExecutor(store, owner)
    merge.merge_items(records, reconcile([], records), {})
    merge.save_owner()

    assert owner.media_items[0] == 500
    assert len(owner.media_items) == 2
    assert owner.lists == [600]
