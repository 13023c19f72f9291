from __future__ import annotations

import copy
from typing import Dict, Mapping, Optional, Sequence

from ..core.exceptions import StoreError
from .repository import Record


class InMemoryRecordStore:
    """Process-local record store used for development and tests.

    Collections keep insertion order, so ``list_all`` reflects the order records
    were first written.
    """

    def __init__(self, seed: Optional[Mapping[str, Sequence[Record]]] = None):
        self._collections: Dict[str, Dict[str, Record]] = {}
        for collection, records in (seed or {}).items():
            for record in records:
                self.upsert(collection, record)

    def upsert(self, collection: str, record: Record) -> None:
        record_id = record.get("id")
        if record_id is None or str(record_id) == "":
            raise StoreError("Record has no id", collection=collection)

        rows = self._collections.setdefault(collection, {})
        merged = dict(rows.get(str(record_id), {}))
        merged.update(copy.deepcopy(dict(record)))
        rows[str(record_id)] = merged

    def delete(self, collection: str, record_id: str) -> None:
        self._collections.get(collection, {}).pop(str(record_id), None)

    def list_all(self, collection: str) -> Sequence[Record]:
        return [copy.deepcopy(r) for r in self._collections.get(collection, {}).values()]
