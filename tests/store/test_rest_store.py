from __future__ import annotations

import pytest
import requests

from school_scheduling.core.enums import SchemaDrift
from school_scheduling.core.exceptions import StoreError
from school_scheduling.store.rest_store import RestRecordStore


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def _next(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)

    def delete(self, url, **kwargs):
        return self._next("DELETE", url, **kwargs)

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)


def _store(*responses):
    session = FakeSession(*responses)
    return RestRecordStore(' "https://db.example.org/" ', "secret", session=session), session


def test_upsert_merges_on_id():
    store, session = _store(FakeResponse(201))

    store.upsert("shifts", {"id": "SH-1", "label": "Morning"})

    method, url, kwargs = session.calls[0]
    assert method == "POST"
    assert url == "https://db.example.org/rest/v1/shifts?on_conflict=id"
    assert kwargs["headers"]["Prefer"] == "resolution=merge-duplicates"
    assert kwargs["headers"]["Authorization"] == "Bearer secret"
    assert kwargs["json"] == {"id": "SH-1", "label": "Morning"}


def test_rejected_write_reports_missing_column_with_patch():
    store, _ = _store(
        FakeResponse(400, text="Could not find the 'start_date' column of 'shift_assignments' in the schema cache")
    )

    with pytest.raises(StoreError) as exc:
        store.upsert("shift_assignments", {"id": "AS-1"})

    assert exc.value.drift == SchemaDrift.MISSING_COLUMN
    assert "start_date" in exc.value.schema_patch


def test_network_failure_becomes_store_error():
    store, _ = _store(requests.ConnectionError("boom"))

    with pytest.raises(StoreError) as exc:
        store.list_all("shifts")
    assert exc.value.collection == "shifts"
    assert exc.value.drift is None


def test_delete_falls_back_to_bridge():
    store, session = _store(FakeResponse(405, text="Method Not Allowed"), FakeResponse(200))

    store.delete("time_tables", "TT-000001")

    assert session.calls[0][1] == "https://db.example.org/rest/v1/time_tables?id=eq.TT-000001"
    method, url, kwargs = session.calls[1]
    assert (method, url) == ("POST", "https://db.example.org/bridge.php")
    assert kwargs["json"] == {"action": "DELETE_RECORD", "table": "time_tables", "id": "TT-000001"}


def test_failed_bridge_delete_raises():
    store, _ = _store(FakeResponse(405), FakeResponse(500, text="bridge down"))

    with pytest.raises(StoreError):
        store.delete("time_tables", "TT-1")


def test_list_all_returns_rows():
    store, session = _store(FakeResponse(200, payload=[{"id": "SH-1"}]))

    assert store.list_all("shifts") == [{"id": "SH-1"}]
    assert session.calls[0][1].endswith("/rest/v1/shifts?select=*")


def test_unconfigured_store_simulates_locally():
    session = FakeSession()
    store = RestRecordStore("", "", session=session)

    store.upsert("shifts", {"id": "SH-1"})
    store.delete("shifts", "SH-1")
    assert store.list_all("shifts") == []
    assert session.calls == []
