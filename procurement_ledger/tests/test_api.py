from decimal import Decimal

import pytest

from procurement_ledger.tests.conftest import ACTOR_ID

HEADERS = {"X-Actor-Id": str(ACTOR_ID)}


@pytest.fixture
def vendor_and_products(make_vendor, make_product):
    return make_vendor(), make_product(), make_product()


def _po_body(vendor_id, product_ids, order_date="2026-07-01", **extra):
    body = {
        "vendor_id": vendor_id,
        "order_date": order_date,
        "items": [
            {"product_id": pid, "quantity_ordered": 4, "cost_price": "2.50", "selling_price": "4.00"}
            for pid in product_ids
        ],
    }
    body.update(extra)
    return body


def _ordered_po(client, vendor_id, product_ids):
    created = client.post("/v1/purchase-orders", json=_po_body(vendor_id, product_ids), headers=HEADERS)
    assert created.status_code == 201, created.text
    po = created.json()
    updated = client.put(
        f"/v1/purchase-orders/{po['id']}",
        json=_po_body(vendor_id, product_ids, status="ordered"),
        headers=HEADERS,
    )
    assert updated.status_code == 200, updated.text
    return updated.json()


def test_full_flow_order_receive_pay(client, vendor_and_products):
    """
    GIVEN un vendor et deux produits
    WHEN PO (2 x 4 x 2.50) -> ORDERED -> réception complète -> paiement de 20
    THEN PO RECEIVED puis PAID, et les listes par vendor / PO renvoient les documents
    """
    # ---------- ARRANGE ----------
    vendor, p1, p2 = vendor_and_products
    po = _ordered_po(client, vendor.id, [p1.id, p2.id])
    assert po["status"] == "ordered"
    assert Decimal(po["total_amount"]) == Decimal("20.00")
    assert po["created_by"] == ACTOR_ID

    # ---------- ACT : réception ----------
    receipt = client.post(
        "/v1/stock-receipts",
        json={
            "purchase_order_id": po["id"],
            "received_date": "2026-07-03",
            "items": [{"purchase_order_item_id": i["id"], "quantity_received": 4} for i in po["items"]],
        },
        headers=HEADERS,
    )

    # ---------- ASSERT ----------
    assert receipt.status_code == 201, receipt.text
    assert Decimal(receipt.json()["total_amount"]) == Decimal("20.00")
    assert len(receipt.json()["items"]) == 2
    assert client.get(f"/v1/purchase-orders/{po['id']}").json()["status"] == "received"
    by_po = client.get(f"/v1/stock-receipts/purchase-order/{po['id']}").json()
    assert [r["id"] for r in by_po] == [receipt.json()["id"]]

    # ---------- ACT : paiement ----------
    payment = client.post(
        "/v1/vendor-payments",
        json={"vendor_id": vendor.id, "amount": "20.00", "payment_date": "2026-07-10", "payment_method": "upi"},
        headers=HEADERS,
    )

    # ---------- ASSERT ----------
    assert payment.status_code == 201, payment.text
    assert Decimal(payment.json()["unapplied_amount"]) == Decimal("0.00")
    paid_po = client.get(f"/v1/purchase-orders/{po['id']}").json()
    assert paid_po["payment_status"] == "paid"
    assert Decimal(paid_po["paid_amount"]) == Decimal("20.00")
    assert [p["id"] for p in client.get(f"/v1/vendor-payments/vendor/{vendor.id}").json()] == [payment.json()["id"]]
    assert client.get(f"/v1/vendor-payments/{payment.json()['id']}").status_code == 200


def test_writes_require_actor_header(client, vendor_and_products):
    vendor, p1, _ = vendor_and_products

    resp = client.post("/v1/purchase-orders", json=_po_body(vendor.id, [p1.id]))
    assert resp.status_code == 401

    resp = client.post("/v1/purchase-orders", json=_po_body(vendor.id, [p1.id]), headers={"X-Actor-Id": "0"})
    assert resp.status_code == 401


def test_not_found_maps_to_404_with_code(client):
    resp = client.get("/v1/purchase-orders/999999")
    assert resp.status_code == 404
    assert resp.json()["code"] == "purchase_order_not_found"

    resp = client.get("/v1/stock-receipts/999999")
    assert resp.status_code == 404
    assert resp.json()["code"] == "stock_receipt_not_found"


def test_domain_errors_map_to_400_with_code(client, vendor_and_products):
    vendor, p1, _ = vendor_and_products
    draft = client.post("/v1/purchase-orders", json=_po_body(vendor.id, [p1.id]), headers=HEADERS).json()

    # réception sur un DRAFT
    resp = client.post(
        "/v1/stock-receipts",
        json={
            "purchase_order_id": draft["id"],
            "received_date": "2026-07-03",
            "items": [{"purchase_order_item_id": draft["items"][0]["id"], "quantity_received": 1}],
        },
        headers=HEADERS,
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "order_not_receivable"

    # paiement sans dette
    resp = client.post(
        "/v1/vendor-payments",
        json={"vendor_id": vendor.id, "amount": "5.00", "payment_date": "2026-07-10", "payment_method": "cash"},
        headers=HEADERS,
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "insufficient_balance"

    # annulation OK puis annulation d'un PO non DRAFT
    assert client.delete(f"/v1/purchase-orders/{draft['id']}", headers=HEADERS).status_code == 204
    resp = client.delete(f"/v1/purchase-orders/{draft['id']}", headers=HEADERS)
    assert resp.status_code == 400
    assert resp.json()["code"] == "cannot_cancel_non_draft"


def test_invalid_payload_is_rejected_before_services(client, vendor_and_products):
    vendor, _, _ = vendor_and_products

    resp = client.post("/v1/purchase-orders", json=_po_body(vendor.id, []), headers=HEADERS)
    assert resp.status_code == 422

    resp = client.post(
        "/v1/vendor-payments",
        json={"vendor_id": vendor.id, "amount": "-1", "payment_date": "2026-07-10", "payment_method": "cash"},
        headers=HEADERS,
    )
    assert resp.status_code == 422


def test_amounts_with_sub_cent_precision_are_rejected(client, vendor_and_products):
    vendor, p1, _ = vendor_and_products

    body = _po_body(vendor.id, [p1.id])
    body["items"][0]["cost_price"] = "2.505"
    assert client.post("/v1/purchase-orders", json=body, headers=HEADERS).status_code == 422

    resp = client.post(
        "/v1/vendor-payments",
        json={"vendor_id": vendor.id, "amount": "10.005", "payment_date": "2026-07-10", "payment_method": "cash"},
        headers=HEADERS,
    )
    assert resp.status_code == 422


def test_total_below_paid_amount_maps_to_400(client, make_vendor, make_product):
    vendor = make_vendor(balance=Decimal("10.00"))
    product = make_product()
    draft = client.post("/v1/purchase-orders", json=_po_body(vendor.id, [product.id]), headers=HEADERS).json()
    paid = client.post(
        "/v1/vendor-payments",
        json={"vendor_id": vendor.id, "amount": "10.00", "payment_date": "2026-07-10", "payment_method": "cash"},
        headers=HEADERS,
    )
    assert paid.status_code == 201, paid.text

    body = _po_body(vendor.id, [product.id])
    body["items"][0]["quantity_ordered"] = 1
    resp = client.put(f"/v1/purchase-orders/{draft['id']}", json=body, headers=HEADERS)

    assert resp.status_code == 400
    assert resp.json()["code"] == "total_below_paid_amount"
