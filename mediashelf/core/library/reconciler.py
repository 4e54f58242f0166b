"""Identity reconciliation between snapshot records and persisted entities.

Snapshot entities are matched to the owner's existing ones by their natural
key, the normalized title. The result is a translation table from
snapshot-local identifier to persisted identifier; records without a match are
left out of it and will be created.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from mediashelf.models.schemas.library import snapshot_id

__all__ = [
    "Reconciliation",
    "TranslationTable",
    "find_media_type_conflicts",
    "normalize_title",
    "reconcile",
]

TranslationTable = dict[str, int]


class Titled(Protocol):
    """Anything with an id, a title and a media type."""

    id: int
    title: str
    media_type: str


def normalize_title(title: str) -> str:
    """Return the natural key of a title: trimmed and case-folded."""
    return title.strip().casefold()


def title_index(existing: Iterable[Titled]) -> dict[str, Titled]:
    """Index entities by normalized title.

    Entities are visited by ascending id so that, when titles collide, the
    earliest created entity wins.
    """
    index: dict[str, Titled] = {}
    for entity in sorted(existing, key=lambda e: e.id):
        index.setdefault(normalize_title(entity.title), entity)
    return index


@dataclass
class Reconciliation:
    """Matches of one kind of snapshot record against existing entities."""

    # Persisted id per record position, None when the record is new
    matches: list[int | None] = field(default_factory=list)
    # Snapshot-local id -> persisted id, grown by the merge as entities are made
    table: TranslationTable = field(default_factory=dict)

    @property
    def matched(self) -> int:
        """Number of records that matched an existing entity."""
        return sum(1 for m in self.matches if m is not None)


def reconcile(
    existing: Iterable[Titled], records: Sequence[dict[str, Any]]
) -> Reconciliation:
    """Match validated snapshot records to existing entities by title.

    Args:
        existing (Iterable[Titled]): Entities currently owned by the importer
        records (Sequence[dict[str, Any]]): Validated snapshot records

    Returns:
        Reconciliation: Positional matches and the initial translation table
    """
    index = title_index(existing)
    result = Reconciliation()
    for record in records:
        match = index.get(normalize_title(record["title"]))
        persisted_id = match.id if match is not None else None
        result.matches.append(persisted_id)

        local_id = snapshot_id(record)
        if persisted_id is not None and local_id is not None:
            result.table[local_id] = persisted_id
    return result


def find_media_type_conflicts(
    existing: Iterable[Titled],
    records: Sequence[dict[str, Any]],
    label: str,
) -> list[str]:
    """Report records that would be merged into an entity of another media type.

    A record conflicts when its title matches an existing entity, or an earlier
    record of the same snapshot, with a different media type. Media types are
    never changed by an import, so these are reported before anything is
    written.
    """
    index = title_index(existing)
    seen: dict[str, str] = {}
    errors: list[str] = []
    for position, record in enumerate(records):
        key = normalize_title(record["title"])
        media_type = record["mediaType"]
        match = index.get(key)
        if match is not None:
            if match.media_type != media_type:
                errors.append(
                    f"{label} at index {position} ({record['title'].strip()!r}, "
                    f"mediaType: {media_type}) matches an existing entry with "
                    f"mediaType: {match.media_type}."
                )
            continue
        previous = seen.setdefault(key, media_type)
        if previous != media_type:
            errors.append(
                f"{label} at index {position} ({record['title'].strip()!r}, "
                f"mediaType: {media_type}) shares its title with an earlier entry "
                f"with mediaType: {previous}."
            )
    return errors
