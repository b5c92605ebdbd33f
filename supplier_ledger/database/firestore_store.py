# supplier_ledger/database/firestore_store.py
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from google.api_core.exceptions import GoogleAPIError
from google.cloud import firestore

from ..constants import COLLECTIONS
from .document_store import (
    DocumentStore,
    RemoteConnectionError,
    RemoteError,
    check_collection,
    sanitize,
)

_log = logging.getLogger(__name__)


class FirestoreDocumentStore(DocumentStore):
    """Document store backed by Cloud Firestore; document id == entity id."""

    def __init__(self, client: Optional[firestore.Client] = None, database: Optional[str] = None):
        self._client = client or firestore.Client(database=database)

    def _collection(self, collection: str):
        return self._client.collection(check_collection(collection))

    def fetch_all(self) -> Dict[str, List[Dict[str, Any]]]:
        data: Dict[str, List[Dict[str, Any]]] = {}
        try:
            for collection in COLLECTIONS:
                data[collection] = [
                    doc.to_dict() or {} for doc in self._collection(collection).stream()
                ]
        except GoogleAPIError as e:
            _log.error("Firestore fetch failed: %s", e)
            raise RemoteConnectionError() from e
        return data

    def put(self, collection: str, doc_id: str, record: Dict[str, Any]) -> None:
        try:
            self._collection(collection).document(doc_id).set(sanitize(record))
        except GoogleAPIError as e:
            raise RemoteError(f"Could not save {collection}/{doc_id}: {e}") from e

    def delete(self, collection: str, doc_id: str) -> None:
        try:
            self._collection(collection).document(doc_id).delete()
        except GoogleAPIError as e:
            raise RemoteError(f"Could not delete {collection}/{doc_id}: {e}") from e

    def batch_update(self, collection: str, partials: Iterable[Dict[str, Any]]) -> None:
        col = self._collection(collection)
        partials = [sanitize(p) for p in partials]
        if not partials:
            return
        batch = self._client.batch()
        for partial in partials:
            doc_id = partial.get("id")
            if not doc_id:
                raise RemoteError("Batch update entry is missing an id.")
            batch.update(col.document(doc_id), partial)
        try:
            batch.commit()
        except GoogleAPIError as e:
            raise RemoteError(f"Batch update of {collection} failed: {e}") from e
