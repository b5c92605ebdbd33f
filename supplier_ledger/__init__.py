# supplier_ledger/__init__.py
"""
Supplier ledger: suppliers, products, purchase/sale invoices and supplier
payments kept in an optimistic in-memory snapshot, persisted to a document
store in the background.

Usage:
    from supplier_ledger import ReconciliationStore, get_document_store

    store = ReconciliationStore(get_document_store())
    store.refresh_data()
"""

from .database import get_document_store
from .modules.ledger import ReconciliationStore

__all__ = [
    "ReconciliationStore",
    "get_document_store",
]
