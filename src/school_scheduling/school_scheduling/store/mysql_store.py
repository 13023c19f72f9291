from __future__ import annotations

import logging
import re
from typing import Sequence

import mysql.connector

from ..core.enums import SchemaDrift
from ..core.exceptions import StoreError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, to_plain
from .errors import classify
from .repository import Record

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

ER_NO_SUCH_TABLE = 1146
ER_BAD_FIELD_ERROR = 1054

# Bookkeeping columns that are not part of the record shape.
_INTERNAL_COLUMNS = ("created_at",)


def _quote(identifier: str) -> str:
    if not _IDENTIFIER.match(identifier):
        raise StoreError(f"Invalid identifier: {identifier!r}")
    return f"`{identifier}`"


class MySQLRecordStore:
    """Record store backed by one MySQL table per collection."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _fail(self, collection: str, err: mysql.connector.Error) -> StoreError:
        logger.error("MySQL error on %s: %s", collection, err)
        error = classify(collection, str(err))
        if error.drift is None and getattr(err, "errno", None) == ER_NO_SUCH_TABLE:
            error.drift = SchemaDrift.MISSING_TABLE
        elif error.drift is None and getattr(err, "errno", None) == ER_BAD_FIELD_ERROR:
            error.drift = SchemaDrift.MISSING_COLUMN
        return error

    def upsert(self, collection: str, record: Record) -> None:
        if not record.get("id"):
            raise StoreError("Record has no id", collection=collection)

        columns = list(record.keys())
        column_sql = ", ".join(_quote(c) for c in columns)
        placeholders = ", ".join(["%s"] * len(columns))
        updates = ", ".join(f"{_quote(c)}=VALUES({_quote(c)})" for c in columns if c != "id")
        sql = f"INSERT INTO {_quote(collection)} ({column_sql}) VALUES ({placeholders})"
        if updates:
            sql += f" ON DUPLICATE KEY UPDATE {updates}"

        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(sql, tuple(record[c] for c in columns))
        except mysql.connector.Error as e:
            raise self._fail(collection, e) from e

    def delete(self, collection: str, record_id: str) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"DELETE FROM {_quote(collection)} WHERE id=%s", (str(record_id),))
        except mysql.connector.Error as e:
            raise self._fail(collection, e) from e

    def list_all(self, collection: str) -> Sequence[Record]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"SELECT * FROM {_quote(collection)} ORDER BY created_at, id")
                rows = fetchall(cur)
        except mysql.connector.Error as e:
            raise self._fail(collection, e) from e

        return [
            {k: to_plain(v) for k, v in row.items() if k not in _INTERNAL_COLUMNS}
            for row in rows
        ]
