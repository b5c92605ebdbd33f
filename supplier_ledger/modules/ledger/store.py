# supplier_ledger/modules/ledger/store.py
"""
modules/ledger/store.py

Purpose
-------
Own the AppData snapshot and every mutation of it.

Each mutating operation:
  1. validates (DomainError, raised synchronously, nothing changes),
  2. computes the next snapshot through the effect engine and installs it
     immediately, emitting data_changed,
  3. hands one RemoteWrite to the write queue and returns the new snapshot
     without waiting for it.

If a write fails, the error is published on error_changed and the whole
snapshot is reloaded from the document store (refresh_data). Optimistic
changes that never reached the store disappear with that reload.

Public interface
----------------
- snapshot / suppliers / products / purchase_invoices / sale_invoices / payments
- is_loading, error, pending_writes
- add_supplier, delete_supplier
- save_purchase_invoice, delete_purchase_invoice
- save_sale_invoice, delete_sale_invoice
- save_payment, delete_payment
- update_product_price
- get_supplier_stats
- refresh_data, dismiss_error
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional, Tuple

from PySide6.QtCore import QObject, QThreadPool, Signal, Slot

from ...constants import (
    COLLECTION_PAYMENTS,
    COLLECTION_PRODUCTS,
    COLLECTION_PURCHASE_INVOICES,
    COLLECTION_SALE_INVOICES,
    COLLECTION_SUPPLIERS,
)
from ...database.document_store import DocumentStore
from ...utils.helpers import generate_id, now_ms
from ...utils.loggers import get_logger
from ...utils.validators import is_non_negative_number, non_empty
from .balances import supplier_stats
from .effects import apply_purchase, apply_sale, revert_purchase, revert_sale
from .entities import (
    AppData,
    Payment,
    Product,
    PurchaseInvoice,
    SaleInvoice,
    Supplier,
    SupplierStats,
    find_by_id,
    to_record,
)
from .errors import DomainError
from .invoices import validate_payment, validate_purchase_invoice, validate_sale_invoice
from .sync import BackgroundRunner, RemoteWrite, WriteQueue


def _replace_by_id(entities: tuple, entity: Any) -> tuple:
    return tuple(entity if e.id == entity.id else e for e in entities)


def _without_id(entities: tuple, entity_id: str) -> tuple:
    return tuple(e for e in entities if e.id != entity_id)


def _touched_products(products: Tuple[Product, ...], existing_ids: set, *invoices) -> list:
    """Records of pre-existing products referenced by any of the invoices."""
    ids = {
        item.product_id
        for inv in invoices if inv is not None
        for item in inv.items
    } & existing_ids
    return [to_record(p) for p in products if p.id in ids]


class ReconciliationStore(QObject):
    """
    Optimistic in-memory ledger kept in sync with a DocumentStore.

    A new store is idle with an empty snapshot; the owner starts the first
    load with refresh_data(), normally right after connecting its slots to
    loading_changed / data_changed. Mutations made before that load
    finishes are replaced by the loaded snapshot.
    """

    data_changed = Signal(object)      # AppData
    loading_changed = Signal(bool)
    error_changed = Signal(object)     # str | None

    def __init__(
        self,
        remote: DocumentStore,
        pool: Optional[QThreadPool] = None,
        logger: Optional[logging.Logger] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._remote = remote
        self._log = logger or get_logger()
        self._snapshot = AppData()
        self._is_loading = False
        self._error: Optional[str] = None

        self._fetcher = BackgroundRunner(pool, parent=self)
        self._fetcher.finished.connect(self._on_fetched)
        self._fetch_ticket: Optional[int] = None

        self._writes = WriteQueue(remote, pool=pool, logger=self._log, parent=self)
        self._writes.failed.connect(self._on_write_failed)

    # ---------------------------- read surface ----------------------------

    @property
    def snapshot(self) -> AppData:
        return self._snapshot

    @property
    def suppliers(self) -> Tuple[Supplier, ...]:
        return self._snapshot.suppliers

    @property
    def products(self) -> Tuple[Product, ...]:
        return self._snapshot.products

    @property
    def purchase_invoices(self) -> Tuple[PurchaseInvoice, ...]:
        return self._snapshot.purchase_invoices

    @property
    def sale_invoices(self) -> Tuple[SaleInvoice, ...]:
        return self._snapshot.sale_invoices

    @property
    def payments(self) -> Tuple[Payment, ...]:
        return self._snapshot.payments

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def pending_writes(self) -> int:
        return self._writes.pending_count

    def get_supplier_stats(self, supplier_id: str) -> SupplierStats:
        return supplier_stats(self._snapshot, supplier_id)

    # ---------------------------- suppliers ----------------------------

    def add_supplier(self, name: str, phone: Optional[str] = None, notes: Optional[str] = None) -> AppData:
        if not non_empty(name):
            raise DomainError("Supplier name is required.")
        supplier = Supplier(
            id=generate_id(),
            name=name.strip(),
            created_at=now_ms(),
            phone=phone or None,
            notes=notes or None,
        )
        snap = replace(self._snapshot, suppliers=(supplier,) + self._snapshot.suppliers)
        write = RemoteWrite(f"Adding supplier {supplier.name!r}").put(
            COLLECTION_SUPPLIERS, supplier.id, to_record(supplier)
        )
        return self._commit(snap, write)

    def delete_supplier(self, supplier_id: str) -> AppData:
        """Remove a supplier nothing refers to; DomainError otherwise."""
        snap = self._snapshot
        has_products = any(p.supplier_id == supplier_id for p in snap.products)
        has_purchases = any(inv.supplier_id == supplier_id for inv in snap.purchase_invoices)
        if has_products or has_purchases:
            raise DomainError(
                "Cannot delete supplier: products or purchase invoices are linked to it."
            )
        if find_by_id(snap.suppliers, supplier_id) is None:
            return snap
        write = RemoteWrite(f"Deleting supplier {supplier_id}").delete(COLLECTION_SUPPLIERS, supplier_id)
        return self._commit(replace(snap, suppliers=_without_id(snap.suppliers, supplier_id)), write)

    # ---------------------------- purchase invoices ----------------------------

    def save_purchase_invoice(self, invoice: PurchaseInvoice) -> AppData:
        """
        Add or edit (matched by id) a purchase invoice.

        Edit reverts the stored invoice's effects before applying the new
        one; unknown products referenced by the items are created.
        """
        validate_purchase_invoice(invoice)
        snap = self._snapshot
        old = find_by_id(snap.purchase_invoices, invoice.id)
        existing_ids = {p.id for p in snap.products}

        products = snap.products
        if old is not None:
            products = revert_purchase(products, old)
            invoices = _replace_by_id(snap.purchase_invoices, invoice)
        else:
            invoices = (invoice,) + snap.purchase_invoices
        products = apply_purchase(products, invoice)

        write = RemoteWrite(
            f"{'Updating' if old else 'Adding'} purchase invoice {invoice.invoice_number}"
        )
        # minted products must exist before the invoice that references them
        for p in products:
            if p.id not in existing_ids:
                write.put(COLLECTION_PRODUCTS, p.id, to_record(p))
        if old is not None:
            write.delete(COLLECTION_PURCHASE_INVOICES, invoice.id)
        write.put(COLLECTION_PURCHASE_INVOICES, invoice.id, to_record(invoice))
        write.batch_update(COLLECTION_PRODUCTS, _touched_products(products, existing_ids, old, invoice))

        return self._commit(replace(snap, products=products, purchase_invoices=invoices), write)

    def delete_purchase_invoice(self, invoice_id: str) -> AppData:
        snap = self._snapshot
        invoice = find_by_id(snap.purchase_invoices, invoice_id)
        if invoice is None:
            return snap
        products = revert_purchase(snap.products, invoice)
        existing_ids = {p.id for p in snap.products}
        write = (
            RemoteWrite(f"Deleting purchase invoice {invoice.invoice_number}")
            .delete(COLLECTION_PURCHASE_INVOICES, invoice_id)
            .batch_update(COLLECTION_PRODUCTS, _touched_products(products, existing_ids, invoice))
        )
        return self._commit(
            replace(
                snap,
                products=products,
                purchase_invoices=_without_id(snap.purchase_invoices, invoice_id),
            ),
            write,
        )

    # ---------------------------- sale invoices ----------------------------

    def save_sale_invoice(self, invoice: SaleInvoice) -> AppData:
        validate_sale_invoice(invoice)
        snap = self._snapshot
        old = find_by_id(snap.sale_invoices, invoice.id)
        existing_ids = {p.id for p in snap.products}

        products = snap.products
        if old is not None:
            products = revert_sale(products, old)
            invoices = _replace_by_id(snap.sale_invoices, invoice)
        else:
            invoices = (invoice,) + snap.sale_invoices
        products = apply_sale(products, invoice)

        write = RemoteWrite(f"{'Updating' if old else 'Adding'} sale invoice {invoice.invoice_number}")
        if old is not None:
            write.delete(COLLECTION_SALE_INVOICES, invoice.id)
        write.put(COLLECTION_SALE_INVOICES, invoice.id, to_record(invoice))
        write.batch_update(COLLECTION_PRODUCTS, _touched_products(products, existing_ids, old, invoice))

        return self._commit(replace(snap, products=products, sale_invoices=invoices), write)

    def delete_sale_invoice(self, invoice_id: str) -> AppData:
        snap = self._snapshot
        invoice = find_by_id(snap.sale_invoices, invoice_id)
        if invoice is None:
            return snap
        products = revert_sale(snap.products, invoice)
        existing_ids = {p.id for p in snap.products}
        write = (
            RemoteWrite(f"Deleting sale invoice {invoice.invoice_number}")
            .delete(COLLECTION_SALE_INVOICES, invoice_id)
            .batch_update(COLLECTION_PRODUCTS, _touched_products(products, existing_ids, invoice))
        )
        return self._commit(
            replace(
                snap,
                products=products,
                sale_invoices=_without_id(snap.sale_invoices, invoice_id),
            ),
            write,
        )

    # ---------------------------- payments ----------------------------

    def save_payment(self, payment: Payment) -> AppData:
        validate_payment(payment)
        snap = self._snapshot
        if find_by_id(snap.payments, payment.id) is not None:
            payments = _replace_by_id(snap.payments, payment)
            action = "Updating"
        else:
            payments = (payment,) + snap.payments
            action = "Adding"
        write = RemoteWrite(f"{action} payment {payment.id}").put(
            COLLECTION_PAYMENTS, payment.id, to_record(payment)
        )
        return self._commit(replace(snap, payments=payments), write)

    def delete_payment(self, payment_id: str) -> AppData:
        snap = self._snapshot
        if find_by_id(snap.payments, payment_id) is None:
            return snap
        write = RemoteWrite(f"Deleting payment {payment_id}").delete(COLLECTION_PAYMENTS, payment_id)
        return self._commit(replace(snap, payments=_without_id(snap.payments, payment_id)), write)

    # ---------------------------- products ----------------------------

    def update_product_price(self, product_id: str, new_price: float) -> AppData:
        if not is_non_negative_number(new_price):
            raise DomainError("Sale price cannot be negative.")
        snap = self._snapshot
        product = find_by_id(snap.products, product_id)
        if product is None:
            return snap
        updated = replace(product, sale_price=float(new_price))
        write = RemoteWrite(f"Updating price of {product.name!r}").batch_update(
            COLLECTION_PRODUCTS, [to_record(updated)]
        )
        return self._commit(replace(snap, products=_replace_by_id(snap.products, updated)), write)

    # ---------------------------- sync ----------------------------

    def refresh_data(self) -> None:
        """Reload the whole snapshot from the document store in the background."""
        self._set_loading(True)
        self._set_error(None)
        remote = self._remote
        self._fetch_ticket = self._fetcher.run(lambda: AppData.from_records(remote.fetch_all()))

    def dismiss_error(self) -> None:
        self._set_error(None)

    def _commit(self, snapshot: AppData, write: RemoteWrite) -> AppData:
        """Install the new snapshot now; persist it in the background."""
        self._snapshot = snapshot
        self.data_changed.emit(snapshot)
        self._writes.submit(write)
        return snapshot

    @Slot(str, object)
    def _on_write_failed(self, description: str, error: Any) -> None:
        self._log.warning("Discarding local state after failed write (%s); reloading.", description)
        self.refresh_data()
        self._set_error(str(error) or f"{description} failed.")

    @Slot(int, object, object)
    def _on_fetched(self, ticket: int, result: Any, error: Any) -> None:
        if ticket != self._fetch_ticket:
            return  # superseded by a newer refresh
        self._fetch_ticket = None
        if error is not None:
            self._log.error("Loading data failed: %s", error)
            self._set_error(str(error) or "Loading data failed.")
        else:
            self._snapshot = result
            self.data_changed.emit(result)
        self._set_loading(False)

    def _set_loading(self, value: bool) -> None:
        if value != self._is_loading:
            self._is_loading = value
            self.loading_changed.emit(value)

    def _set_error(self, message: Optional[str]) -> None:
        if message != self._error:
            self._error = message
            self.error_changed.emit(message)
