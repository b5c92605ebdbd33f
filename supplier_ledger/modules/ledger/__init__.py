# supplier_ledger/modules/ledger/__init__.py
"""
Ledger module package exports.

- ReconciliationStore: owns the snapshot and all mutations.
- Entities (Supplier, Product, invoices, Payment, SupplierStats, AppData).
- Effect engine and balance calculator as plain functions.
"""

from .balances import supplier_stats
from .effects import apply_purchase, apply_sale, revert_purchase, revert_sale
from .entities import (
    AppData,
    Payment,
    Product,
    PurchaseInvoice,
    PurchaseItem,
    SaleInvoice,
    SaleItem,
    Supplier,
    SupplierStats,
    from_record,
    to_record,
)
from .errors import DomainError
from .store import ReconciliationStore

__all__ = [
    "AppData",
    "DomainError",
    "Payment",
    "Product",
    "PurchaseInvoice",
    "PurchaseItem",
    "ReconciliationStore",
    "SaleInvoice",
    "SaleItem",
    "Supplier",
    "SupplierStats",
    "apply_purchase",
    "apply_sale",
    "from_record",
    "revert_purchase",
    "revert_sale",
    "supplier_stats",
    "to_record",
]
