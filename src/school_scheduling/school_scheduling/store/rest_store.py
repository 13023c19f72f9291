from __future__ import annotations

import logging
from typing import Optional, Sequence

import requests

from ..core.exceptions import StoreError
from .errors import classify
from .repository import Record

logger = logging.getLogger(__name__)


class RestRecordStore:
    """Record store over a PostgREST-style HTTP endpoint.

    Without a URL or key the store acts as a local simulation: writes succeed
    and reads return nothing.
    """

    def __init__(
        self,
        url: str,
        key: str,
        *,
        timeout: float = 15,
        session: Optional[requests.Session] = None,
    ):
        self._url = (url or "").strip().strip("\"'").rstrip("/")
        self._key = (key or "").strip().strip("\"'")
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self._url and self._key)

    def _headers(self, **extra: str) -> dict:
        headers = {
            "Content-Type": "application/json",
            "apikey": self._key,
            "Authorization": f"Bearer {self._key}",
        }
        headers.update(extra)
        return headers

    def upsert(self, collection: str, record: Record) -> None:
        if not self.configured:
            logger.debug("REST store not configured; skipping write to %s", collection)
            return

        has_id = record.get("id") is not None
        endpoint = f"{self._url}/rest/v1/{collection}"
        if has_id:
            endpoint += "?on_conflict=id"
        prefer = "resolution=merge-duplicates" if has_id else "return=minimal"

        try:
            resp = self._session.post(
                endpoint, json=record, headers=self._headers(Prefer=prefer), timeout=self._timeout
            )
        except requests.RequestException as e:
            logger.error("REST write to %s failed: %s", collection, e)
            raise StoreError(str(e), collection=collection) from e

        if not resp.ok:
            logger.error("REST write to %s rejected (%s): %s", collection, resp.status_code, resp.text)
            raise classify(collection, resp.text)

    def delete(self, collection: str, record_id: str) -> None:
        if not self.configured:
            logger.warning("REST store not configured; skipping delete of %s/%s", collection, record_id)
            return

        try:
            resp = self._session.delete(
                f"{self._url}/rest/v1/{collection}?id=eq.{record_id}",
                headers=self._headers(Prefer="return=minimal"),
                timeout=self._timeout,
            )
            if resp.ok:
                return

            # Some hosts reject the DELETE verb; fall back to the action bridge.
            logger.warning("REST delete rejected (%s): %s; trying bridge", resp.status_code, resp.text)
            fallback = self._session.post(
                f"{self._url}/bridge.php",
                json={"action": "DELETE_RECORD", "table": collection, "id": str(record_id)},
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.error("REST delete on %s failed: %s", collection, e)
            raise StoreError(str(e), collection=collection) from e

        if not fallback.ok:
            logger.error("Bridge delete on %s failed: %s", collection, fallback.text)
            raise classify(collection, fallback.text)

    def list_all(self, collection: str) -> Sequence[Record]:
        if not self.configured:
            return []

        try:
            resp = self._session.get(
                f"{self._url}/rest/v1/{collection}?select=*", headers=self._headers(), timeout=self._timeout
            )
        except requests.RequestException as e:
            logger.error("REST read of %s failed: %s", collection, e)
            raise StoreError(str(e), collection=collection) from e

        if not resp.ok:
            logger.error("REST read of %s rejected (%s): %s", collection, resp.status_code, resp.text)
            raise classify(collection, resp.text)
        return list(resp.json() or [])
