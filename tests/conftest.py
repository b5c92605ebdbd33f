# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - pytest-qt owns the Qt application (a QCoreApplication; no widgets here)
# - Every test gets its own SQLite document store under tmp_path
# - Every test gets its own QThreadPool, drained at teardown
# - FlakyRemote wraps a real store and fails chosen calls on demand
# ---------------------------------------------------------------------

from __future__ import annotations

import os
import threading

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6 import QtCore
from PySide6.QtCore import QThreadPool

from supplier_ledger.database import RemoteConnectionError, RemoteError, SqliteDocumentStore
from supplier_ledger.modules.ledger import ReconciliationStore


# ---------- Qt: core application only ----------
@pytest.fixture(scope="session")
def qapp_cls():
    return QtCore.QCoreApplication


# ---------- Remote stores ----------
class FlakyRemote:
    """
    Delegates to a real DocumentStore, recording every call.
    Methods named in `fail_methods` raise instead of running.
    """

    def __init__(self, inner):
        self.inner = inner
        self.fail_methods: set[str] = set()
        self.calls: list[tuple] = []
        self._lock = threading.Lock()

    def _call(self, method, *args):
        with self._lock:
            self.calls.append((method,) + args[:2])
        if method in self.fail_methods:
            if method == "fetch_all":
                raise RemoteConnectionError()
            raise RemoteError(f"{method} rejected by remote")
        return getattr(self.inner, method)(*args)

    def fetch_all(self):
        return self._call("fetch_all")

    def put(self, collection, doc_id, record):
        return self._call("put", collection, doc_id, record)

    def delete(self, collection, doc_id):
        return self._call("delete", collection, doc_id)

    def batch_update(self, collection, partials):
        return self._call("batch_update", collection, partials)

    def methods_called(self) -> list[str]:
        with self._lock:
            return [c[0] for c in self.calls]


@pytest.fixture()
def sqlite_remote(tmp_path):
    return SqliteDocumentStore(tmp_path / "ledger.db")


@pytest.fixture()
def remote(sqlite_remote):
    return FlakyRemote(sqlite_remote)


# ---------- Store ----------
@pytest.fixture()
def pool():
    p = QThreadPool()
    p.setMaxThreadCount(4)
    yield p
    p.waitForDone(5000)


@pytest.fixture()
def store(qtbot, remote, pool):
    s = ReconciliationStore(remote, pool=pool)
    yield s
    qtbot.waitUntil(lambda: s.pending_writes == 0 and not s.is_loading, timeout=5000)


@pytest.fixture()
def settle(qtbot):
    """Wait until a store has no writes in flight and is not loading."""
    def wait(s: ReconciliationStore) -> None:
        qtbot.waitUntil(lambda: s.pending_writes == 0 and not s.is_loading, timeout=5000)
    return wait


@pytest.fixture()
def make_store(qtbot, pool, tmp_path):
    """Factory for extra stores, each on its own SQLite file."""
    made = []

    def make(name: str) -> ReconciliationStore:
        s = ReconciliationStore(FlakyRemote(SqliteDocumentStore(tmp_path / f"{name}.db")), pool=pool)
        made.append(s)
        return s

    yield make
    for s in made:
        qtbot.waitUntil(lambda: s.pending_writes == 0 and not s.is_loading, timeout=5000)
