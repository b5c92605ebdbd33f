# supplier_ledger/modules/ledger/effects.py
"""
Stock effects of invoices on the product collection.

Each function takes the current products and an invoice and returns a new
tuple of products; the input is never modified. Items whose product id is
not in the collection are skipped, except that apply_purchase creates the
product. Stock has no floor: reverting can leave quantity_in_stock negative.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Tuple

from .entities import Product, PurchaseInvoice, SaleInvoice


def _index(products: List[Product]) -> dict:
    return {p.id: i for i, p in enumerate(products)}


def apply_purchase(products: Iterable[Product], invoice: PurchaseInvoice) -> Tuple[Product, ...]:
    updated = list(products)
    pos = _index(updated)
    for item in invoice.items:
        i = pos.get(item.product_id)
        if i is None:
            pos[item.product_id] = len(updated)
            updated.append(Product(
                id=item.product_id,
                name=item.product_name_snapshot,
                supplier_id=invoice.supplier_id,
                last_purchase_price=item.purchase_price,
                sale_price=0,
                quantity_in_stock=item.quantity,
                quantity_sold=0,
            ))
            continue
        p = updated[i]
        updated[i] = replace(
            p,
            quantity_in_stock=p.quantity_in_stock + item.quantity,
            last_purchase_price=item.purchase_price,
            supplier_id=invoice.supplier_id,
        )
    return tuple(updated)


def revert_purchase(products: Iterable[Product], invoice: PurchaseInvoice) -> Tuple[Product, ...]:
    # stock only; last_purchase_price and supplier_id stay as they are
    updated = list(products)
    pos = _index(updated)
    for item in invoice.items:
        i = pos.get(item.product_id)
        if i is not None:
            p = updated[i]
            updated[i] = replace(p, quantity_in_stock=p.quantity_in_stock - item.quantity)
    return tuple(updated)


def apply_sale(products: Iterable[Product], invoice: SaleInvoice) -> Tuple[Product, ...]:
    updated = list(products)
    pos = _index(updated)
    for item in invoice.items:
        i = pos.get(item.product_id)
        if i is not None:
            p = updated[i]
            updated[i] = replace(
                p,
                quantity_in_stock=p.quantity_in_stock - item.quantity,
                quantity_sold=p.quantity_sold + item.quantity,
            )
    return tuple(updated)


def revert_sale(products: Iterable[Product], invoice: SaleInvoice) -> Tuple[Product, ...]:
    updated = list(products)
    pos = _index(updated)
    for item in invoice.items:
        i = pos.get(item.product_id)
        if i is not None:
            p = updated[i]
            updated[i] = replace(
                p,
                quantity_in_stock=p.quantity_in_stock + item.quantity,
                quantity_sold=p.quantity_sold - item.quantity,
            )
    return tuple(updated)
