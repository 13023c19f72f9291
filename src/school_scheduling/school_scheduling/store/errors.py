from __future__ import annotations

import re
from typing import Optional

from ..core.constants import SCHEMA_PATCHES
from ..core.enums import SchemaDrift
from ..core.exceptions import StoreError

# PostgREST: "Could not find the 'start_date' column of 'shift_assignments' in the schema cache"
# MySQL:     "Unknown column 'start_date' in 'field list'"
_COLUMN_PATTERNS = (
    re.compile(r"could not find the '(?P<column>\w+)' column", re.IGNORECASE),
    re.compile(r"unknown column '(?:\w+\.)?(?P<column>\w+)'", re.IGNORECASE),
    re.compile(r'column "?(?P<column>\w+)"? (?:of relation \S+ )?does not exist', re.IGNORECASE),
)
_TABLE_MARKERS = ("PGRST205", "42P01", "could not find the table", "doesn't exist", "does not exist")


def missing_column(message: str) -> Optional[str]:
    for pattern in _COLUMN_PATTERNS:
        m = pattern.search(message)
        if m:
            return m.group("column")
    return None


def classify(collection: str, message: str) -> StoreError:
    """Turn a raw store failure message into a StoreError, recognizing schema drift."""

    column = missing_column(message)
    if column or "PGRST204" in message:
        return StoreError(
            message,
            collection=collection,
            drift=SchemaDrift.MISSING_COLUMN,
            schema_patch=SCHEMA_PATCHES.get((collection, column or "")),
        )

    lowered = message.lower()
    if any(marker.lower() in lowered for marker in _TABLE_MARKERS):
        return StoreError(
            message,
            collection=collection,
            drift=SchemaDrift.MISSING_TABLE,
            schema_patch=f"-- run database/schema.sql to create `{collection}`",
        )

    return StoreError(message, collection=collection)
