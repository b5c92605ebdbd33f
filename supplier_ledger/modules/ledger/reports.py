# supplier_ledger/modules/ledger/reports.py
"""
Read-only summaries over a snapshot: dashboard totals, supplier debt,
product search and history ordering. Nothing here is cached; every call
scans the snapshot it is given.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from .balances import supplier_stats
from .entities import AppData, Payment, Product, Supplier, find_by_id

UNKNOWN_SUPPLIER = "Deleted supplier"


@dataclass(frozen=True)
class LedgerSummary:
    total_sales: float
    total_purchases: float
    total_payments: float
    total_debt: float


def ledger_summary(snapshot: AppData) -> LedgerSummary:
    """Business-wide totals; total_debt sums every supplier's remaining balance."""
    return LedgerSummary(
        total_sales=sum(inv.total_amount for inv in snapshot.sale_invoices),
        total_purchases=sum(inv.total_amount for inv in snapshot.purchase_invoices),
        total_payments=sum(p.amount for p in snapshot.payments),
        total_debt=sum(
            supplier_stats(snapshot, s.id).remaining_balance for s in snapshot.suppliers
        ),
    )


def indebted_suppliers(snapshot: AppData) -> List[Tuple[Supplier, float]]:
    """Suppliers still owed money, with the amount owed."""
    owed = []
    for s in snapshot.suppliers:
        balance = supplier_stats(snapshot, s.id).remaining_balance
        if balance > 0:
            owed.append((s, balance))
    return owed


def payment_exceeds_balance(snapshot: AppData, supplier_id: str, amount: float) -> bool:
    """True when paying `amount` would take the supplier into credit."""
    return amount > supplier_stats(snapshot, supplier_id).remaining_balance


def search_products(products: Iterable[Product], term: str = "") -> List[Product]:
    term = (term or "").strip().lower()
    return [p for p in products if term in p.name.lower()]


def products_available_for_sale(products: Iterable[Product], term: str = "") -> List[Product]:
    """In-stock products whose name contains `term`."""
    return [p for p in search_products(products, term) if p.quantity_in_stock > 0]


def supplier_name(snapshot: AppData, supplier_id: str, default: str = UNKNOWN_SUPPLIER) -> str:
    supplier = find_by_id(snapshot.suppliers, supplier_id)
    return supplier.name if supplier else default


def newest_first(records: Iterable) -> list:
    """Invoices or payments ordered by date, latest first."""
    return sorted(records, key=lambda r: r.date, reverse=True)


def recent_payments(snapshot: AppData, limit: int = 10) -> Sequence[Payment]:
    return newest_first(snapshot.payments)[:limit]
