# tests/test_entities.py
import json
from dataclasses import FrozenInstanceError

import pytest

from supplier_ledger.constants import COLLECTIONS
from supplier_ledger.modules.ledger.entities import (
    AppData,
    Product,
    PurchaseInvoice,
    SaleInvoice,
    Supplier,
    from_record,
    to_record,
)
from supplier_ledger.modules.ledger.invoices import new_purchase_invoice, purchase_item


def test_records_use_camel_case_and_drop_none():
    s = Supplier(id="s1", name="Al Noor", created_at=1700000000000)
    assert to_record(s) == {"id": "s1", "name": "Al Noor", "createdAt": 1700000000000}

    p = Product(id="p1", name="Rice", supplier_id="s1", quantity_in_stock=3)
    rec = to_record(p)
    assert rec["supplierId"] == "s1"
    assert rec["quantityInStock"] == 3
    assert rec["lastPurchasePrice"] == 0.0


def test_invoice_record_embeds_items_and_is_json_clean():
    inv = new_purchase_invoice("s1", [purchase_item("p1", "Rice", 10, 100)])
    rec = to_record(inv)
    json.dumps(rec)
    assert rec["items"] == [{
        "productId": "p1",
        "productNameSnapshot": "Rice",
        "quantity": 10,
        "purchasePrice": 100,
        "total": 1000,
    }]
    assert "notes" not in rec and "updatedAt" not in rec
    assert from_record(PurchaseInvoice, rec) == inv


def test_from_record_reads_web_client_documents():
    doc = {
        "id": "lq2x9",
        "invoiceNumber": "SAL-123456",
        "date": 1700000000000,
        "customerName": "Abu Ali",
        "items": [{"productId": "p1", "productNameSnapshot": "Rice",
                   "quantity": 2, "salePrice": 150, "total": 300}],
        "totalAmount": 300,
        "createdAt": 1700000000000,
        "someLegacyField": True,
    }
    inv = from_record(SaleInvoice, doc)
    assert inv.customer_name == "Abu Ali"
    assert inv.items[0].sale_price == 150
    assert isinstance(inv.items, tuple)


def test_from_record_rejects_missing_required_fields():
    with pytest.raises(ValueError, match="Supplier"):
        from_record(Supplier, {"id": "s1", "name": "No timestamp"})


def test_app_data_from_records():
    data = {c: [] for c in COLLECTIONS}
    data["suppliers"] = [{"id": "s1", "name": "A", "createdAt": 1}]
    data["products"] = [{"id": "p1", "name": "Rice", "supplierId": "s1",
                         "lastPurchasePrice": 1, "salePrice": 2,
                         "quantityInStock": 3, "quantitySold": 4}]
    snap = AppData.from_records(data)
    assert snap.suppliers == (Supplier(id="s1", name="A", created_at=1),)
    assert snap.products[0].quantity_sold == 4
    assert snap.payments == ()
    assert AppData.from_records({}) == AppData()


def test_app_data_from_records_orders_newest_first():
    data = {c: [] for c in COLLECTIONS}
    data["suppliers"] = [
        {"id": "s1", "name": "Old", "createdAt": 1},
        {"id": "s2", "name": "New", "createdAt": 5},
        {"id": "s3", "name": "Same ms, stored later", "createdAt": 5},
    ]
    data["purchaseInvoices"] = [
        {"id": f"p{n}", "invoiceNumber": f"INV-{n}", "date": 10 - n, "supplierId": "s1",
         "items": [], "totalAmount": 0, "createdAt": n}
        for n in (2, 9, 4)
    ]
    data["payments"] = [
        {"id": "pay1", "date": 300, "supplierId": "s1", "amount": 1},
        {"id": "pay2", "date": 100, "supplierId": "s1", "amount": 1},
        {"id": "pay3", "date": 200, "supplierId": "s1", "amount": 1},
    ]
    data["products"] = [
        {"id": "b", "name": "B", "supplierId": "s1"},
        {"id": "a", "name": "A", "supplierId": "s1"},
    ]

    snap = AppData.from_records(data)

    assert [s.id for s in snap.suppliers] == ["s3", "s2", "s1"]
    assert [i.id for i in snap.purchase_invoices] == ["p9", "p4", "p2"]
    assert [p.id for p in snap.payments] == ["pay1", "pay3", "pay2"]
    assert [p.id for p in snap.products] == ["b", "a"]


def test_entities_are_immutable():
    s = Supplier(id="s1", name="A", created_at=1)
    with pytest.raises(FrozenInstanceError):
        s.name = "B"
