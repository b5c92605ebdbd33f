# supplier_ledger/database/document_store.py
"""
Remote document-store contract.

Five named collections (see constants.COLLECTIONS), each a mapping from
entity id to its full serialized record. Adapters implement:

- fetch_all() -> {collection: [record, ...]} for all five collections
- put(collection, doc_id, record)          full upsert
- delete(collection, doc_id)
- batch_update(collection, partials)       atomic partial update of existing docs

Records must be JSON-serializable and must not carry None values; use
sanitize() before handing a record to an adapter.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List

from ..constants import COLLECTIONS, FETCH_ERROR_MESSAGE


class RemoteError(Exception):
    """A document-store call failed (write, delete, batch or fetch)."""
    pass


class RemoteConnectionError(RemoteError):
    """Fetching the collections failed; the store could not be reached."""

    def __init__(self, message: str = FETCH_ERROR_MESSAGE):
        super().__init__(message)


def _strip_none(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _strip_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_strip_none(v) for v in value]
    return value


def sanitize(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a JSON-clean copy of `record` with every None field removed.

    Raises RemoteError if the record is not JSON-serializable.
    """
    try:
        clean = json.loads(json.dumps(record))
    except (TypeError, ValueError) as e:
        raise RemoteError(f"Record is not JSON-serializable: {e}") from e
    return _strip_none(clean)


def check_collection(collection: str) -> str:
    if collection not in COLLECTIONS:
        raise RemoteError(f"Unknown collection: {collection!r}")
    return collection


class DocumentStore(ABC):
    """Interface the reconciliation store persists through."""

    @abstractmethod
    def fetch_all(self) -> Dict[str, List[Dict[str, Any]]]:
        ...

    @abstractmethod
    def put(self, collection: str, doc_id: str, record: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> None:
        ...

    @abstractmethod
    def batch_update(self, collection: str, partials: Iterable[Dict[str, Any]]) -> None:
        ...
