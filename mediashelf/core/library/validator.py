"""Structural and referential validation of library snapshots.

Validation never stops at the first problem. Every violation is collected so a
caller can report all of them at once, and nothing may be written when any
exist.
"""

import math
import re
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

from mediashelf.models.db import ItemStatus, MediaType
from mediashelf.models.db.media_list import HEX_COLOR_REGEX
from mediashelf.models.schemas.library import SNAPSHOT_ID_KEYS, parse_snapshot_date

__all__ = ["validate_library_data"]

_MEDIA_TYPES = frozenset(m.value for m in MediaType)
_ITEM_STATUSES = frozenset(s.value for s in ItemStatus)
_URL_REGEX = re.compile(r"^https?://.+$")


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, int | float)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _is_url(value: Any) -> bool:
    return isinstance(value, str) and _URL_REGEX.match(value) is not None


def _is_media_type(value: Any) -> bool:
    return isinstance(value, str) and value in _MEDIA_TYPES


def _is_date(value: Any) -> bool:
    if isinstance(value, datetime | date):
        return True
    if not isinstance(value, str):
        return False
    try:
        parse_snapshot_date(value)
    except ValueError:
        return False
    return True


def _is_identifier(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return _is_non_empty_string(value)


def _is_identifier_array(value: Any) -> bool:
    return isinstance(value, list) and all(_is_identifier(v) for v in value)


def _is_rating_array(value: Any) -> bool:
    return isinstance(value, list) and all(
        isinstance(rating, dict)
        and _is_non_empty_string(rating.get("source"))
        and _is_non_empty_string(rating.get("value"))
        for rating in value
    )


def _record_id(record: dict[str, Any]) -> tuple[str | None, Any]:
    """Return ``(key, value)`` of the first identifier key present."""
    for key in SNAPSHOT_ID_KEYS:
        if record.get(key) is not None:
            return key, record[key]
    return None, None


def _validate_optional_strings(
    item: dict[str, Any], fields: dict[str, str], prefix: str
) -> list[str]:
    errors: list[str] = []
    for key, label in fields.items():
        if item.get(key) is not None and not isinstance(item[key], str):
            errors.append(f"{prefix} has an invalid {label}.")
    return errors


def _validate_media_item_fields(item: dict[str, Any], index: int) -> list[str]:
    prefix = f"Media item at index {index}"
    errors: list[str] = []

    if not _is_non_empty_string(item.get("title")):
        errors.append(f"{prefix} has an invalid title.")
    if not _is_media_type(item.get("mediaType")):
        errors.append(f"{prefix} has an invalid media type.")

    categories = item.get("categories")
    if not isinstance(categories, list):
        errors.append(f"{prefix} has invalid categories - must be an array.")
    elif not all(isinstance(cat, str) for cat in categories):
        errors.append(f"{prefix} has invalid categories - all items must be strings.")

    errors.extend(
        _validate_optional_strings(
            item,
            {
                "author": "author",
                "description": "description",
                "language": "language",
                "personalNotes": "personal notes",
            },
            prefix,
        )
    )

    if item.get("coverPhoto") is not None and not _is_url(item["coverPhoto"]):
        errors.append(f"{prefix} has an invalid cover photo.")
    if item.get("publishedDate") is not None and not _is_date(item["publishedDate"]):
        errors.append(f"{prefix} has an invalid published date.")
    if item.get("ratings") is not None and not _is_rating_array(item["ratings"]):
        errors.append(f"{prefix} has invalid ratings.")
    if item.get("ratingCount") is not None and not (
        _is_number(item["ratingCount"]) and item["ratingCount"] >= 0
    ):
        errors.append(f"{prefix} has an invalid rating count.")
    status = item.get("status")
    if status is not None and not (
        isinstance(status, str) and status in _ITEM_STATUSES
    ):
        errors.append(f"{prefix} has an invalid status.")
    if item.get("myRating") is not None and not (
        _is_number(item["myRating"]) and 0 <= item["myRating"] <= 5
    ):
        errors.append(f"{prefix} has an invalid my rating.")
    if item.get("progress") is not None and not (
        _is_number(item["progress"]) and item["progress"] >= 0
    ):
        errors.append(f"{prefix} has an invalid progress.")
    if item.get("lists") is not None and not _is_identifier_array(item["lists"]):
        errors.append(f"{prefix} has invalid lists.")

    key, value = _record_id(item)
    if key is not None and not _is_identifier(value):
        errors.append(f"{prefix} has an invalid {key}.")

    return errors


def _validate_book_fields(item: dict[str, Any], index: int) -> list[str]:
    prefix = f"Media item at index {index}"
    errors: list[str] = []
    if item.get("ISBN") is not None and not _is_non_empty_string(item["ISBN"]):
        errors.append(f"{prefix} has an invalid ISBN.")
    if item.get("pageCount") is not None and not (
        _is_number(item["pageCount"])
        and (isinstance(item["pageCount"], int) or item["pageCount"].is_integer())
        and item["pageCount"] > 0
    ):
        errors.append(f"{prefix} has an invalid page count.")
    errors.extend(_validate_optional_strings(item, {"publisher": "publisher"}, prefix))
    return errors


def _validate_movie_fields(item: dict[str, Any], index: int) -> list[str]:
    prefix = f"Media item at index {index}"
    errors: list[str] = []
    actors = item.get("actors")
    if actors is not None and not (
        isinstance(actors, list) and all(_is_non_empty_string(a) for a in actors)
    ):
        errors.append(f"{prefix} has invalid actors.")
    if item.get("runtime") is not None and not (
        _is_number(item["runtime"]) and item["runtime"] >= 0
    ):
        errors.append(f"{prefix} has an invalid runtime.")
    errors.extend(
        _validate_optional_strings(
            item,
            {"awards": "awards", "director": "director", "imdbID": "imdbID"},
            prefix,
        )
    )
    return errors


_MEDIA_TYPE_VALIDATORS: dict[str, Callable[[dict[str, Any], int], list[str]]] = {
    MediaType.BOOK.value: _validate_book_fields,
    MediaType.MOVIE.value: _validate_movie_fields,
}


def _validate_media_item(item: Any, index: int) -> list[str]:
    if not isinstance(item, dict):
        return [f"Media item at index {index} is not an object."]

    errors = _validate_media_item_fields(item, index)
    media_type = item.get("mediaType")
    if _is_media_type(media_type):
        errors.extend(_MEDIA_TYPE_VALIDATORS[media_type](item, index))
    return errors


def _validate_list(media_list: Any, index: int) -> list[str]:
    prefix = f"List at index {index}"
    if not isinstance(media_list, dict):
        return [f"{prefix} is not an object."]

    errors: list[str] = []
    if not _is_non_empty_string(media_list.get("title")):
        errors.append(f"{prefix} has an invalid title.")
    color = media_list.get("color")
    if color is not None and not (
        isinstance(color, str) and HEX_COLOR_REGEX.match(color.strip())
    ):
        errors.append(f"{prefix} has an invalid color.")
    if not _is_media_type(media_list.get("mediaType")):
        errors.append(f"{prefix} has an invalid media type.")
    if not _is_identifier_array(media_list.get("items")):
        errors.append(f"{prefix} has invalid items.")

    key, value = _record_id(media_list)
    if key is not None and not _is_identifier(value):
        errors.append(f"{prefix} has an invalid {key}.")
    return errors


def _index_records(records: list[Any], label: str) -> tuple[dict[str, Any], list[str]]:
    """Map identifier strings to records, reporting duplicates."""
    index: dict[str, Any] = {}
    errors: list[str] = []
    for position, record in enumerate(records):
        if not isinstance(record, dict):
            continue
        _, value = _record_id(record)
        if not _is_identifier(value):
            continue
        key = str(value).strip()
        if key in index:
            errors.append(
                f"{label} at index {position} reuses identifier ({key}) that is "
                "already used by another entry."
            )
            continue
        index[key] = record
    return index, errors


def _validate_media_item_list_references(
    items: list[Any], lists_by_id: dict[str, Any]
) -> list[str]:
    errors: list[str] = []
    for item_index, item in enumerate(items):
        if not isinstance(item, dict) or not isinstance(item.get("lists"), list):
            continue
        for ref_index, list_id in enumerate(item["lists"]):
            if not _is_identifier(list_id):
                continue
            id_string = str(list_id).strip()
            target = lists_by_id.get(id_string)
            if target is None:
                errors.append(
                    f"Media item at index {item_index} contains list reference at "
                    f"index {ref_index} ({id_string}) that does not exist in lists "
                    "array."
                )
            elif target.get("mediaType") != item.get("mediaType"):
                errors.append(
                    f"Media item at index {item_index} (mediaType: "
                    f"{item.get('mediaType')}) references list at index {ref_index} "
                    f"with mismatched mediaType: {target.get('mediaType')}."
                )
    return errors


def _validate_list_item_references(
    lists: list[Any], items_by_id: dict[str, Any]
) -> list[str]:
    errors: list[str] = []
    for list_index, media_list in enumerate(lists):
        if not isinstance(media_list, dict) or not isinstance(
            media_list.get("items"), list
        ):
            continue
        for ref_index, item_id in enumerate(media_list["items"]):
            if not _is_identifier(item_id):
                continue
            id_string = str(item_id).strip()
            target = items_by_id.get(id_string)
            if target is None:
                errors.append(
                    f"List at index {list_index} contains item reference at index "
                    f"{ref_index} ({id_string}) that does not exist in mediaItems "
                    "array."
                )
            elif target.get("mediaType") != media_list.get("mediaType"):
                errors.append(
                    f"List at index {list_index} (mediaType: "
                    f"{media_list.get('mediaType')}) contains item at index "
                    f"{ref_index} with mismatched mediaType: "
                    f"{target.get('mediaType')}."
                )
    return errors


def validate_library_data(data: Any, max_items: int = 0) -> list[str] | None:
    """Validate a library snapshot before anything is written.

    Args:
        data (Any): Decoded snapshot, expected to be a mapping with
            ``mediaItems`` and ``lists`` arrays
        max_items (int): Maximum accepted number of media items, 0 for no limit

    Returns:
        list[str] | None: Every violation found in order, or None when valid
    """
    if not isinstance(data, dict):
        return ["Library data must be an object."]

    errors: list[str] = []
    items = data.get("mediaItems")
    lists = data.get("lists")

    if not isinstance(items, list):
        errors.append("Media items must be an array.")
        items = []
    else:
        if max_items and len(items) > max_items:
            errors.append(
                f"Library data contains {len(items)} media items, more than the "
                f"allowed {max_items}."
            )
        for index, item in enumerate(items):
            errors.extend(_validate_media_item(item, index))

    if not isinstance(lists, list):
        errors.append("Lists must be an array.")
        lists = []
    else:
        for index, media_list in enumerate(lists):
            errors.extend(_validate_list(media_list, index))

    items_by_id, duplicate_items = _index_records(items, "Media item")
    lists_by_id, duplicate_lists = _index_records(lists, "List")
    errors.extend(duplicate_items)
    errors.extend(duplicate_lists)

    errors.extend(_validate_media_item_list_references(items, lists_by_id))
    errors.extend(_validate_list_item_references(lists, items_by_id))

    return errors or None
