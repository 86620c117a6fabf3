"""
Procurement service.

Points d'entrée des cas d'usage (indépendants du transport) :
    create_purchase_order / update_purchase_order / cancel_purchase_order
    create_stock_receipt
    create_vendor_payment

Chaque appel reçoit sa Session et l'id de l'acteur authentifié ; la logique
est dans les moteurs :
    procurement_ledger.services.purchase_orders  (PurchaseOrderManager)
    procurement_ledger.services.receiving        (ReceivingEngine)
    procurement_ledger.services.payments         (PaymentAllocator)
    procurement_ledger.services.vendor_ledger    (VendorLedger)
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from procurement_ledger.app.db.models.models_v1 import PurchaseOrder, StockReceipt, VendorPayment
from procurement_ledger.app.schemas.purchase_order import PurchaseOrderCreate, PurchaseOrderUpdate
from procurement_ledger.app.schemas.stock_receipt import StockReceiptCreate
from procurement_ledger.app.schemas.vendor_payment import VendorPaymentCreate
from procurement_ledger.services.payments import PaymentAllocator
from procurement_ledger.services.purchase_orders import PurchaseOrderManager
from procurement_ledger.services.receiving import ReceivingEngine


def create_purchase_order(db: Session, payload: PurchaseOrderCreate, actor_id: int) -> PurchaseOrder:
    return PurchaseOrderManager(db).create(payload, actor_id)


def update_purchase_order(db: Session, po_id: int, payload: PurchaseOrderUpdate, actor_id: int) -> PurchaseOrder:
    return PurchaseOrderManager(db).update(po_id, payload, actor_id)


def cancel_purchase_order(db: Session, po_id: int, actor_id: int) -> None:
    PurchaseOrderManager(db).cancel(po_id, actor_id)


def create_stock_receipt(db: Session, payload: StockReceiptCreate, actor_id: int) -> StockReceipt:
    return ReceivingEngine(db).create_receipt(payload, actor_id)


def create_vendor_payment(db: Session, payload: VendorPaymentCreate, actor_id: int) -> VendorPayment:
    return PaymentAllocator(db).create_payment(payload, actor_id)


__all__ = [
    "create_purchase_order",
    "update_purchase_order",
    "cancel_purchase_order",
    "create_stock_receipt",
    "create_vendor_payment",
]
