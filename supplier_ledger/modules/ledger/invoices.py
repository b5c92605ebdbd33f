# supplier_ledger/modules/ledger/invoices.py
"""
Building and validating invoices and payments before they reach the store.

Builders compute item totals and invoice totals so callers never assemble
them by hand; validators enforce the same invariants on anything handed to
ReconciliationStore.save_*().
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Iterable, Optional, Sequence

from ...constants import (
    DEFAULT_CUSTOMER_NAME,
    MONEY_TOLERANCE,
    PURCHASE_INVOICE_PREFIX,
    SALE_INVOICE_PREFIX,
)
from ...utils.helpers import generate_id, now_ms
from ...utils.validators import (
    is_non_negative_number,
    is_strictly_positive_number,
    non_empty,
)
from .entities import (
    Payment,
    Product,
    PurchaseInvoice,
    PurchaseItem,
    SaleInvoice,
    SaleItem,
)
from .errors import DomainError


# ---------------------------- numbering & lookup ----------------------------

def next_invoice_number(prefix: str = PURCHASE_INVOICE_PREFIX, *, clock_ms: Optional[int] = None) -> str:
    """E.g. 'INV-482913': prefix plus the last six digits of the millisecond clock."""
    stamp = str(clock_ms if clock_ms is not None else now_ms())
    return f"{prefix}-{stamp[-6:]}"


def find_product_by_name(products: Iterable[Product], name: str) -> Optional[Product]:
    """Case-insensitive, whitespace-trimmed name match."""
    wanted = (name or "").strip().lower()
    if not wanted:
        return None
    return next((p for p in products if p.name.strip().lower() == wanted), None)


def resolve_product_id(products: Iterable[Product], name: str) -> str:
    """Id of the product with this name, or a freshly minted one."""
    existing = find_product_by_name(products, name)
    return existing.id if existing else generate_id()


# ---------------------------- items ----------------------------

def purchase_item(product_id: str, name: str, quantity: float, purchase_price: float) -> PurchaseItem:
    return PurchaseItem(
        product_id=product_id,
        product_name_snapshot=name.strip(),
        quantity=quantity,
        purchase_price=purchase_price,
        total=quantity * purchase_price,
    )


def sale_item(product_id: str, name: str, quantity: float, sale_price: float) -> SaleItem:
    return SaleItem(
        product_id=product_id,
        product_name_snapshot=name.strip(),
        quantity=quantity,
        sale_price=sale_price,
        total=quantity * sale_price,
    )


def _sum_totals(items: Sequence) -> float:
    return sum(i.total for i in items)


# ---------------------------- invoices ----------------------------

def new_purchase_invoice(
    supplier_id: str,
    items: Sequence[PurchaseItem],
    *,
    invoice_number: Optional[str] = None,
    date: Optional[int] = None,
    notes: Optional[str] = None,
) -> PurchaseInvoice:
    created = now_ms()
    return PurchaseInvoice(
        id=generate_id(),
        invoice_number=invoice_number or next_invoice_number(PURCHASE_INVOICE_PREFIX, clock_ms=created),
        date=date if date is not None else created,
        supplier_id=supplier_id,
        items=tuple(items),
        total_amount=_sum_totals(items),
        created_at=created,
        notes=notes,
    )


def new_sale_invoice(
    items: Sequence[SaleItem],
    *,
    customer_name: str = DEFAULT_CUSTOMER_NAME,
    invoice_number: Optional[str] = None,
    date: Optional[int] = None,
    notes: Optional[str] = None,
) -> SaleInvoice:
    created = now_ms()
    return SaleInvoice(
        id=generate_id(),
        invoice_number=invoice_number or next_invoice_number(SALE_INVOICE_PREFIX, clock_ms=created),
        date=date if date is not None else created,
        customer_name=customer_name.strip() if non_empty(customer_name) else DEFAULT_CUSTOMER_NAME,
        items=tuple(items),
        total_amount=_sum_totals(items),
        created_at=created,
        notes=notes,
    )


def _revise(invoice, changes: dict):
    if "items" in changes:
        changes["items"] = tuple(changes["items"])
    revised = replace(invoice, **changes)
    return replace(revised, total_amount=_sum_totals(revised.items), updated_at=now_ms())


def revise_purchase_invoice(invoice: PurchaseInvoice, **changes) -> PurchaseInvoice:
    """Edited copy: same id and created_at, totals recomputed, updated_at stamped."""
    return _revise(invoice, changes)


def revise_sale_invoice(invoice: SaleInvoice, **changes) -> SaleInvoice:
    return _revise(invoice, changes)


# ---------------------------- validation ----------------------------

def _close(a: float, b: float) -> bool:
    return math.isclose(a, b, rel_tol=1e-9, abs_tol=MONEY_TOLERANCE)


def _validate_items(items: Sequence, label: str) -> None:
    if not items:
        raise DomainError(f"{label} must contain at least one item.")
    for n, item in enumerate(items, start=1):
        if not non_empty(item.product_id):
            raise DomainError(f"{label} item {n} has no product.")
        if not is_strictly_positive_number(item.quantity):
            raise DomainError(f"{label} item {n}: quantity must be greater than zero.")
        if not is_non_negative_number(item.price):
            raise DomainError(f"{label} item {n}: price cannot be negative.")
        if not _close(item.total, item.quantity * item.price):
            raise DomainError(
                f"{label} item {n}: total {item.total} does not equal "
                f"{item.quantity} x {item.price}."
            )


def _validate_total(invoice, label: str) -> None:
    expected = _sum_totals(invoice.items)
    if not _close(invoice.total_amount, expected):
        raise DomainError(
            f"{label} total {invoice.total_amount} does not match the item total {expected}."
        )


def validate_purchase_invoice(invoice: PurchaseInvoice) -> None:
    if not non_empty(invoice.supplier_id):
        raise DomainError("Choose a supplier for the purchase invoice.")
    _validate_items(invoice.items, "Purchase invoice")
    _validate_total(invoice, "Purchase invoice")


def validate_sale_invoice(invoice: SaleInvoice) -> None:
    _validate_items(invoice.items, "Sale invoice")
    _validate_total(invoice, "Sale invoice")


def validate_payment(payment: Payment) -> None:
    if not non_empty(payment.supplier_id):
        raise DomainError("Choose a supplier for the payment.")
    if not is_strictly_positive_number(payment.amount):
        raise DomainError("Payment amount must be greater than zero.")
