from __future__ import annotations

import logging
from typing import Callable, Generic, List, Optional, TypeVar

from ..core.exceptions import ValidationError
from .repository import Record, RecordStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SnapshotCollection(Generic[T]):
    """In-memory snapshot of one store collection.

    Writes go to the store first; the snapshot changes only after the store call
    returns, so a failed write leaves the snapshot as it was.
    """

    def __init__(
        self,
        store: RecordStore,
        collection: str,
        *,
        decode: Callable[[Record], T],
        encode: Callable[[T], Record],
        key: Callable[[T], str],
    ):
        self._store = store
        self._collection = collection
        self._decode = decode
        self._encode = encode
        self._key = key
        self._items: Optional[List[T]] = None

    @property
    def collection(self) -> str:
        return self._collection

    def refresh(self) -> List[T]:
        rows = self._store.list_all(self._collection)
        items: List[T] = []
        for row in rows:
            try:
                items.append(self._decode(row))
            except (KeyError, TypeError, ValueError, ValidationError) as e:
                logger.warning("Skipping malformed %s record %r: %s", self._collection, row.get("id"), e)
        self._items = items
        return list(items)

    def all(self) -> List[T]:
        if self._items is None:
            self.refresh()
        return list(self._items or [])

    def get(self, item_id: str) -> Optional[T]:
        return next((i for i in self.all() if self._key(i) == item_id), None)

    def save(self, item: T) -> T:
        items = self.all()
        self._store.upsert(self._collection, self._encode(item))

        item_id = self._key(item)
        for idx, existing in enumerate(items):
            if self._key(existing) == item_id:
                items[idx] = item
                break
        else:
            items.append(item)
        self._items = items
        return item

    def remove(self, item_id: str) -> None:
        items = self.all()
        self._store.delete(self._collection, item_id)
        self._items = [i for i in items if self._key(i) != item_id]
