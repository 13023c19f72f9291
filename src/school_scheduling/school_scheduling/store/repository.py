from __future__ import annotations

from typing import Any, Dict, Protocol, Sequence

Record = Dict[str, Any]


class RecordStore(Protocol):
    """Generic id-keyed record store.

    Records are flat dicts with snake_case keys and a string ``id``. Filtering,
    joins and transactions are not part of the contract; callers filter after
    ``list_all``.
    """

    def upsert(self, collection: str, record: Record) -> None:
        """Insert or merge a record by id (last write wins)."""

        raise NotImplementedError

    def delete(self, collection: str, record_id: str) -> None:
        raise NotImplementedError

    def list_all(self, collection: str) -> Sequence[Record]:
        raise NotImplementedError
