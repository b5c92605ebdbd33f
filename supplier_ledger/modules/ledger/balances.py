# supplier_ledger/modules/ledger/balances.py
from __future__ import annotations

from .entities import AppData, SupplierStats


def supplier_stats(snapshot: AppData, supplier_id: str) -> SupplierStats:
    """
    Aggregate figures for one supplier, recomputed from the snapshot.

    total_sold_value follows the *current* product -> supplier link, so a
    purchase edit that moves a product to another supplier also moves that
    product's past sales.
    """
    total_purchased = sum(
        inv.total_amount for inv in snapshot.purchase_invoices if inv.supplier_id == supplier_id
    )
    total_paid = sum(p.amount for p in snapshot.payments if p.supplier_id == supplier_id)

    owned = {p.id for p in snapshot.products if p.supplier_id == supplier_id}
    total_sold_value = sum(
        item.total
        for inv in snapshot.sale_invoices
        for item in inv.items
        if item.product_id in owned
    )

    return SupplierStats(
        total_purchased=total_purchased,
        total_paid=total_paid,
        remaining_balance=total_purchased - total_paid,
        total_sold_value=total_sold_value,
    )
