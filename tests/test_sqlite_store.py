# tests/test_sqlite_store.py
import sqlite3

import pytest

from supplier_ledger import config
from supplier_ledger.constants import COLLECTIONS
from supplier_ledger.database import (
    RemoteConnectionError,
    RemoteError,
    SqliteDocumentStore,
    get_document_store,
    sanitize,
)


def test_fetch_all_returns_every_collection(sqlite_remote):
    data = sqlite_remote.fetch_all()
    assert set(data) == set(COLLECTIONS)
    assert all(v == [] for v in data.values())


def test_put_upserts_and_strips_none(sqlite_remote):
    sqlite_remote.put("suppliers", "s1", {"id": "s1", "name": "A", "phone": None})
    sqlite_remote.put("suppliers", "s1", {"id": "s1", "name": "B", "notes": "x"})
    assert sqlite_remote.fetch_all()["suppliers"] == [{"id": "s1", "name": "B", "notes": "x"}]
    assert sqlite_remote.get("suppliers", "s1")["name"] == "B"


def test_delete_removes_document(sqlite_remote):
    sqlite_remote.put("payments", "p1", {"id": "p1", "amount": 5})
    sqlite_remote.delete("payments", "p1")
    sqlite_remote.delete("payments", "missing")
    assert sqlite_remote.get("payments", "p1") is None


def test_batch_update_merges_fields(sqlite_remote):
    sqlite_remote.put("products", "p1", {"id": "p1", "name": "Rice", "quantityInStock": 1})
    sqlite_remote.put("products", "p2", {"id": "p2", "name": "Tea", "quantityInStock": 2})
    sqlite_remote.batch_update("products", [
        {"id": "p1", "quantityInStock": 10},
        {"id": "p2", "salePrice": 30},
    ])
    assert sqlite_remote.get("products", "p1") == {"id": "p1", "name": "Rice", "quantityInStock": 10}
    assert sqlite_remote.get("products", "p2")["salePrice"] == 30


def test_batch_update_is_all_or_nothing(sqlite_remote):
    sqlite_remote.put("products", "p1", {"id": "p1", "quantityInStock": 1})
    with pytest.raises(RemoteError, match="p-missing"):
        sqlite_remote.batch_update("products", [
            {"id": "p1", "quantityInStock": 99},
            {"id": "p-missing", "quantityInStock": 5},
        ])
    assert sqlite_remote.get("products", "p1")["quantityInStock"] == 1


def test_unknown_collection_is_rejected(sqlite_remote):
    with pytest.raises(RemoteError):
        sqlite_remote.put("customers", "c1", {"id": "c1"})


def test_sanitize_rejects_non_json_values():
    assert sanitize({"a": None, "b": [{"c": None, "d": 1}]}) == {"b": [{"d": 1}]}
    with pytest.raises(RemoteError):
        sanitize({"when": object()})


def test_unreadable_database_raises_connection_error(tmp_path):
    store = SqliteDocumentStore(tmp_path / "ledger.db")
    con = sqlite3.connect(store.db_path)
    con.execute("DROP TABLE documents")
    con.commit()
    con.close()
    with pytest.raises(RemoteConnectionError):
        store.fetch_all()


def test_get_document_store_uses_configured_path(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "DB_PATH", tmp_path / "nested" / "ledger.db")
    store = get_document_store("sqlite")
    assert isinstance(store, SqliteDocumentStore)
    assert store.db_path.exists()
    with pytest.raises(ValueError):
        get_document_store("mongo")
