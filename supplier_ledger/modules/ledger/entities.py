# supplier_ledger/modules/ledger/entities.py
"""
Ledger entities and the AppData snapshot.

All entities are immutable; the effect engine and the store derive new
values with dataclasses.replace(). Stored records use camelCase keys
(supplierId, quantityInStock, ...) and omit None fields.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar

from ...constants import (
    COLLECTION_PAYMENTS,
    COLLECTION_PRODUCTS,
    COLLECTION_PURCHASE_INVOICES,
    COLLECTION_SALE_INVOICES,
    COLLECTION_SUPPLIERS,
    DEFAULT_CUSTOMER_NAME,
)

T = TypeVar("T")


@dataclass(frozen=True)
class Supplier:
    id: str
    name: str
    created_at: int
    phone: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    supplier_id: str
    last_purchase_price: float = 0.0
    sale_price: float = 0.0
    quantity_in_stock: float = 0
    quantity_sold: float = 0


@dataclass(frozen=True)
class PurchaseItem:
    product_id: str
    product_name_snapshot: str
    quantity: float
    purchase_price: float
    total: float

    @property
    def price(self) -> float:
        return self.purchase_price


@dataclass(frozen=True)
class PurchaseInvoice:
    id: str
    invoice_number: str
    date: int
    supplier_id: str
    items: Tuple[PurchaseItem, ...]
    total_amount: float
    created_at: int
    notes: Optional[str] = None
    updated_at: Optional[int] = None


@dataclass(frozen=True)
class SaleItem:
    product_id: str
    product_name_snapshot: str
    quantity: float
    sale_price: float
    total: float

    @property
    def price(self) -> float:
        return self.sale_price


@dataclass(frozen=True)
class SaleInvoice:
    id: str
    invoice_number: str
    date: int
    items: Tuple[SaleItem, ...]
    total_amount: float
    created_at: int
    customer_name: str = DEFAULT_CUSTOMER_NAME
    notes: Optional[str] = None
    updated_at: Optional[int] = None


@dataclass(frozen=True)
class Payment:
    id: str
    date: int
    supplier_id: str
    amount: float
    notes: Optional[str] = None


@dataclass(frozen=True)
class SupplierStats:
    """Derived per-supplier figures; computed on demand, never stored."""
    total_purchased: float
    total_paid: float
    remaining_balance: float
    total_sold_value: float


# ---------------------------- records ----------------------------

_ITEM_TYPES: Dict[type, type] = {
    PurchaseInvoice: PurchaseItem,
    SaleInvoice: SaleItem,
}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def to_record(entity: Any) -> Dict[str, Any]:
    """Serialize an entity to a store record (camelCase keys, no None values)."""
    record: Dict[str, Any] = {}
    for f in fields(entity):
        value = getattr(entity, f.name)
        if value is None:
            continue
        if isinstance(value, tuple):
            value = [to_record(v) for v in value]
        record[_camel(f.name)] = value
    return record


def from_record(cls: Type[T], record: Mapping[str, Any]) -> T:
    """
    Build an entity from a store record. Unknown keys are ignored; missing
    optional fields take their defaults.

    Raises ValueError when a required field is absent.
    """
    kwargs: Dict[str, Any] = {}
    for f in fields(cls):
        key = _camel(f.name)
        if key not in record or record[key] is None:
            continue
        value = record[key]
        if f.name == "items":
            item_cls = _ITEM_TYPES[cls]
            value = tuple(from_record(item_cls, item) for item in value)
        kwargs[f.name] = value
    try:
        return cls(**kwargs)
    except TypeError as e:
        raise ValueError(f"Malformed {cls.__name__} record {record.get('id')!r}: {e}") from e


# ---------------------------- snapshot ----------------------------

@dataclass(frozen=True)
class AppData:
    """
    Complete in-memory copy of the five collections.

    Suppliers and invoices are newest first by created_at, payments by date.
    Products have no timestamp and keep the order the store returned them.
    """
    suppliers: Tuple[Supplier, ...] = ()
    products: Tuple[Product, ...] = ()
    purchase_invoices: Tuple[PurchaseInvoice, ...] = ()
    sale_invoices: Tuple[SaleInvoice, ...] = ()
    payments: Tuple[Payment, ...] = ()

    @classmethod
    def from_records(cls, data: Mapping[str, Any]) -> "AppData":
        """Build a snapshot from DocumentStore.fetch_all() output."""
        def load(entity_cls, collection):
            return [from_record(entity_cls, r) for r in data.get(collection) or ()]

        def newest_first(entities, attr):
            # ties: later-stored records first (fetch order is oldest first)
            return tuple(sorted(reversed(entities), key=lambda e: getattr(e, attr), reverse=True))

        return cls(
            suppliers=newest_first(load(Supplier, COLLECTION_SUPPLIERS), "created_at"),
            products=tuple(load(Product, COLLECTION_PRODUCTS)),
            purchase_invoices=newest_first(
                load(PurchaseInvoice, COLLECTION_PURCHASE_INVOICES), "created_at"),
            sale_invoices=newest_first(load(SaleInvoice, COLLECTION_SALE_INVOICES), "created_at"),
            payments=newest_first(load(Payment, COLLECTION_PAYMENTS), "date"),
        )


def find_by_id(entities, entity_id: str):
    """First entity whose id matches, else None."""
    return next((e for e in entities if e.id == entity_id), None)
