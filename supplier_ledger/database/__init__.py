# supplier_ledger/database/__init__.py
from __future__ import annotations

from .. import config
from ..constants import BACKEND_FIRESTORE, BACKEND_SQLITE
from .document_store import (
    DocumentStore,
    RemoteConnectionError,
    RemoteError,
    sanitize,
)
from .sqlite_store import SqliteDocumentStore


def get_document_store(backend: str | None = None) -> DocumentStore:
    """
    Build the configured document store.

      - "sqlite" (default): local file at config.DB_PATH
      - "firestore": Cloud Firestore, needs the `firestore` extra installed
    """
    backend = (backend or config.BACKEND).lower()
    if backend == BACKEND_SQLITE:
        config.DB_PATH.parent.mkdir(parents=True, exist_ok=True)
        return SqliteDocumentStore(config.DB_PATH)
    if backend == BACKEND_FIRESTORE:
        # imported here so the sqlite backend runs without google-cloud-firestore
        from .firestore_store import FirestoreDocumentStore
        return FirestoreDocumentStore(database=config.FIRESTORE_DATABASE)
    raise ValueError(f"Unknown document store backend: {backend!r}")


__all__ = [
    "DocumentStore",
    "RemoteConnectionError",
    "RemoteError",
    "SqliteDocumentStore",
    "get_document_store",
    "sanitize",
]
