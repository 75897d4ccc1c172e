"""
Shared fixtures for the console test suite.

Provides: sys.path bootstrap for the app packages, an in-memory Firestore
stand-in, and HTTP session/response mocks.
"""

import pathlib
import sys
from unittest.mock import MagicMock

import pytest

APP_DIR = pathlib.Path(__file__).resolve().parents[1] / "frontend" / "streamlit_app"
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))


class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeDocument:
    def __init__(self, store, doc_id):
        self._store = store
        self.id = doc_id

    def get(self):
        return FakeSnapshot(self.id, self._store.get(self.id))

    def set(self, data):
        self._store[self.id] = dict(data)


class FakeQuery:
    def __init__(self, store, filters=(), limit=None):
        self._store = store
        self._filters = filters
        self._limit = limit

    def where(self, field, op, value):
        assert op == "=="
        return FakeQuery(self._store, self._filters + ((field, value),), self._limit)

    def limit(self, n):
        return FakeQuery(self._store, self._filters, n)

    def stream(self):
        hits = [
            FakeSnapshot(doc_id, data)
            for doc_id, data in self._store.items()
            if all(data.get(f) == v for f, v in self._filters)
        ]
        return iter(hits[: self._limit] if self._limit is not None else hits)


class FakeCollection(FakeQuery):
    def document(self, doc_id):
        return FakeDocument(self._store, str(doc_id))


class FakeFirestore:
    """Just enough of `google.cloud.firestore.Client` for the services."""

    def __init__(self):
        self.data = {}

    def collection(self, name):
        return FakeCollection(self.data.setdefault(name, {}))


@pytest.fixture
def fake_db():
    return FakeFirestore()


def make_response(status=200, json_body=None, text=""):
    """requests.Response-like mock."""
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 400
    resp.text = text
    if isinstance(json_body, Exception):
        resp.json.side_effect = json_body
    else:
        resp.json.return_value = json_body
    return resp


@pytest.fixture
def http():
    """A requests.Session mock; set `.post/.get.return_value` per test."""
    return MagicMock()
