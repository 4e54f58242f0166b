"""Keyed entity store backing library imports and exports."""

from collections.abc import Iterable
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from mediashelf.exceptions import OwnerNotFoundError
from mediashelf.models.db import DEFAULT_MEDIA_LISTS, MediaItem, MediaList, User

__all__ = ["LibraryStore"]


class LibraryStore:
    """Create, read and update users, media items and lists within a session.

    The store only flushes. Committing or rolling back is left to whoever owns
    the session, so a whole import can be applied as one unit of work.
    """

    def __init__(self, session: Session) -> None:
        """Bind the store to an open session."""
        self.session = session

    def get_owner(self, owner_id: int) -> User:
        """Return the user with the given id.

        Raises:
            OwnerNotFoundError: If no such user exists.
        """
        owner = self.session.get(User, owner_id)
        if owner is None:
            raise OwnerNotFoundError(f"User {owner_id} not found")
        return owner

    def create_owner(
        self, name: str, email: str | None = None, seed_default_lists: bool = False
    ) -> User:
        """Create a user, optionally with the default set of empty lists."""
        owner = User(name=name, email=email, media_items=[], lists=[])
        self.session.add(owner)
        self.session.flush()

        if seed_default_lists:
            created = [
                self.create_list(owner.id, title=title, media_type=media_type.value)
                for title, media_type in DEFAULT_MEDIA_LISTS
            ]
            owner.lists = [media_list.id for media_list in created]
            self.session.flush()
        return owner

    def find_items(self, ids: Iterable[int]) -> list[MediaItem]:
        """Return the items with the given ids, ordered by id."""
        ids = list(ids)
        if not ids:
            return []
        stmt = select(MediaItem).where(MediaItem.id.in_(ids)).order_by(MediaItem.id)
        return list(self.session.scalars(stmt))

    def find_lists(self, ids: Iterable[int]) -> list[MediaList]:
        """Return the lists with the given ids, ordered by id."""
        ids = list(ids)
        if not ids:
            return []
        stmt = select(MediaList).where(MediaList.id.in_(ids)).order_by(MediaList.id)
        return list(self.session.scalars(stmt))

    def create_item(self, **fields: Any) -> MediaItem:
        """Create a media item and assign its id."""
        item = MediaItem(**fields)
        self.session.add(item)
        self.session.flush()
        return item

    def update_item(self, item: MediaItem, **fields: Any) -> MediaItem:
        """Set the given fields on an existing media item."""
        for name, value in fields.items():
            setattr(item, name, value)
        self.session.flush()
        return item

    def create_list(self, owner_id: int, **fields: Any) -> MediaList:
        """Create a list owned by ``owner_id`` and assign its id."""
        fields.setdefault("items", [])
        media_list = MediaList(owner_id=owner_id, **fields)
        self.session.add(media_list)
        self.session.flush()
        return media_list

    def update_list(self, media_list: MediaList, **fields: Any) -> MediaList:
        """Set the given fields on an existing list."""
        for name, value in fields.items():
            setattr(media_list, name, value)
        self.session.flush()
        return media_list

    def save_owner(
        self, owner: User, media_items: list[int], lists: list[int]
    ) -> User:
        """Replace the owner's owned id sets."""
        owner.media_items = list(media_items)
        owner.lists = list(lists)
        self.session.flush()
        return owner
