# supplier_ledger/database/sqlite_store.py
from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterable, List

from ..constants import COLLECTIONS
from .document_store import (
    DocumentStore,
    RemoteConnectionError,
    RemoteError,
    check_collection,
    sanitize,
)
from .schema import init_schema

_log = logging.getLogger(__name__)


class SqliteDocumentStore(DocumentStore):
    """
    Document store kept in a local SQLite file.

    A fresh connection is opened per call so the store can be used from
    worker threads of the write queue.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)
        init_schema(self.db_path)

    # ---------------------------- connections ----------------------------

    @contextmanager
    def _connect(self):
        conn = sqlite3.connect(self.db_path, timeout=10.0)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def _immediate_tx(self, conn: sqlite3.Connection):
        """
        Start an IMMEDIATE transaction (write lock once first write happens),
        commit on success, rollback on error.
        """
        cur = conn.cursor()
        try:
            cur.execute("BEGIN IMMEDIATE")
            yield
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cur.close()

    # ---------------------------- reads ----------------------------

    def fetch_all(self) -> Dict[str, List[Dict[str, Any]]]:
        data: Dict[str, List[Dict[str, Any]]] = {}
        try:
            with self._connect() as conn:
                for collection in COLLECTIONS:
                    rows = conn.execute(
                        "SELECT body FROM documents WHERE collection=? ORDER BY rowid",
                        (collection,),
                    ).fetchall()
                    data[collection] = [json.loads(r["body"]) for r in rows]
        except (sqlite3.Error, ValueError) as e:
            _log.error("Fetch from %s failed: %s", self.db_path, e)
            raise RemoteConnectionError() from e
        return data

    def get(self, collection: str, doc_id: str) -> Dict[str, Any] | None:
        check_collection(collection)
        with self._connect() as conn:
            r = conn.execute(
                "SELECT body FROM documents WHERE collection=? AND id=?",
                (collection, doc_id),
            ).fetchone()
        return json.loads(r["body"]) if r else None

    # ---------------------------- writes ----------------------------

    def put(self, collection: str, doc_id: str, record: Dict[str, Any]) -> None:
        check_collection(collection)
        body = json.dumps(sanitize(record))
        try:
            with self._connect() as conn, self._immediate_tx(conn):
                conn.execute(
                    "INSERT INTO documents(collection, id, body) VALUES (?, ?, ?) "
                    "ON CONFLICT(collection, id) DO UPDATE SET "
                    "body=excluded.body, updated_at=CURRENT_TIMESTAMP",
                    (collection, doc_id, body),
                )
        except sqlite3.Error as e:
            raise RemoteError(f"Could not save {collection}/{doc_id}: {e}") from e

    def delete(self, collection: str, doc_id: str) -> None:
        check_collection(collection)
        try:
            with self._connect() as conn, self._immediate_tx(conn):
                conn.execute(
                    "DELETE FROM documents WHERE collection=? AND id=?",
                    (collection, doc_id),
                )
        except sqlite3.Error as e:
            raise RemoteError(f"Could not delete {collection}/{doc_id}: {e}") from e

    def batch_update(self, collection: str, partials: Iterable[Dict[str, Any]]) -> None:
        """
        Merge each partial record into its existing document, all or nothing.
        Every partial must carry an "id"; a missing document fails the batch.
        """
        check_collection(collection)
        partials = [sanitize(p) for p in partials]
        if not partials:
            return
        try:
            with self._connect() as conn, self._immediate_tx(conn):
                for partial in partials:
                    doc_id = partial.get("id")
                    if not doc_id:
                        raise RemoteError("Batch update entry is missing an id.")
                    r = conn.execute(
                        "SELECT body FROM documents WHERE collection=? AND id=?",
                        (collection, doc_id),
                    ).fetchone()
                    if r is None:
                        raise RemoteError(f"No document to update: {collection}/{doc_id}")
                    merged = json.loads(r["body"])
                    merged.update(partial)
                    conn.execute(
                        "UPDATE documents SET body=?, updated_at=CURRENT_TIMESTAMP "
                        "WHERE collection=? AND id=?",
                        (json.dumps(merged), collection, doc_id),
                    )
        except sqlite3.Error as e:
            raise RemoteError(f"Batch update of {collection} failed: {e}") from e
