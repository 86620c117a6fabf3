"""
Réception de marchandise sur un PO.

Une réception :
- crée un lot (ProductBatch) par ligne reçue, jamais fusionné avec l'existant
- fait avancer quantity_received des lignes du PO
- recalcule le statut du PO (PARTIAL / RECEIVED)
- augmente la dette fournisseur de la valeur reçue (prix du PO, pas de la réception)

Tout ou rien : une seule transaction par réception.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from procurement_ledger.app.db.models.core_types import POStatus, RECEIVABLE_PO_STATUSES
from procurement_ledger.app.db.models.models_v1 import (
    ProductBatch,
    PurchaseOrder,
    PurchaseOrderItem,
    StockReceipt,
    StockReceiptItem,
)
from procurement_ledger.app.db.session import transaction
from procurement_ledger.app.schemas.stock_receipt import StockReceiptCreate
from procurement_ledger.services.errors import (
    NotReceivableError,
    PurchaseOrderItemNotFoundError,
    PurchaseOrderNotFoundError,
    QuantityExceedsOrderedError,
    StockReceiptNotFoundError,
    ValidationError,
)
from procurement_ledger.services.money import ZERO, line_total
from procurement_ledger.services.numbering import STOCK_RECEIPT_PREFIX, generate_document_number
from procurement_ledger.services.vendor_ledger import VendorLedger


def resolve_order_status(items: Iterable[PurchaseOrderItem], current: POStatus) -> POStatus:
    """
    RECEIVED si toutes les lignes sont complètes, PARTIAL si au moins une ligne
    a reçu quelque chose, sinon statut inchangé. Indépendant de l'ordre des lignes.
    """
    seen = False
    all_received = True
    any_received = False
    for item in items:
        seen = True
        if item.quantity_received > 0:
            any_received = True
        if item.quantity_received < item.quantity_ordered:
            all_received = False

    if seen and all_received:
        return POStatus.received
    if any_received:
        return POStatus.partial
    return current


class ReceivingEngine:
    def __init__(
        self,
        db: Session,
        ledger: VendorLedger | None = None,
        logger: logging.Logger | None = None,
    ):
        self.db = db
        self.log = logger or logging.getLogger(__name__)
        self.ledger = ledger or VendorLedger(db, logger=self.log)

    # ---------- LECTURES ----------
    def get_all(self) -> list[StockReceipt]:
        stmt = (
            select(StockReceipt)
            .options(selectinload(StockReceipt.items))
            .order_by(StockReceipt.received_date.desc(), StockReceipt.id.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_by_id(self, receipt_id: int) -> StockReceipt:
        receipt = (
            self.db.execute(
                select(StockReceipt)
                .where(StockReceipt.id == receipt_id)
                .options(selectinload(StockReceipt.items))
            )
            .scalars()
            .first()
        )
        if not receipt:
            raise StockReceiptNotFoundError()
        return receipt

    def get_by_purchase_order(self, po_id: int) -> list[StockReceipt]:
        stmt = (
            select(StockReceipt)
            .where(StockReceipt.purchase_order_id == po_id)
            .options(selectinload(StockReceipt.items))
            .order_by(StockReceipt.received_date.desc(), StockReceipt.id.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    # ---------- RÉCEPTION ----------
    def create_receipt(self, payload: StockReceiptCreate, actor_id: int) -> StockReceipt:
        if not payload.items:
            raise ValidationError("A stock receipt needs at least one item")

        po = self._get_order(payload.purchase_order_id)

        with transaction(self.db):
            # Verrous dans l'ordre vendor -> PO (même ordre que PaymentAllocator)
            self.ledger.lock(po.vendor_id)
            po = self._get_order(payload.purchase_order_id, for_update=True)

            if po.status not in RECEIVABLE_PO_STATUSES:
                raise NotReceivableError(
                    f"Purchase order {po.order_number} is {po.status.value}, expected ordered or partial"
                )

            lines, total = self._validate_lines(po, payload)

            receipt = StockReceipt(
                purchase_order_id=po.id,
                receipt_number=generate_document_number(STOCK_RECEIPT_PREFIX, payload.received_date),
                received_date=payload.received_date,
                total_amount=total,
                notes=payload.notes,
                created_by=actor_id,
                updated_by=actor_id,
            )
            self.db.add(receipt)
            self.db.flush()

            for po_item, qty in lines:
                batch = self._create_batch(po_item, qty, payload.received_date, actor_id)
                receipt.items.append(
                    StockReceiptItem(
                        purchase_order_item_id=po_item.id,
                        product_batch_id=batch.id,
                        quantity_received=qty,
                        created_by=actor_id,
                        updated_by=actor_id,
                    )
                )
                po_item.quantity_received += qty
                po_item.updated_by = actor_id
            self.db.flush()

            new_status = resolve_order_status(po.items, po.status)
            previous_status = po.status
            if new_status != previous_status:
                po.status = new_status
                po.updated_by = actor_id

            # marchandise reçue = dette fournisseur
            self.ledger.increase_balance(po.vendor_id, total)
            self.db.flush()

        self.log.info(
            "stock receipt %s created for PO %s (total=%s, status %s -> %s)",
            receipt.receipt_number, po.order_number, total, previous_status.value, po.status.value,
        )
        return receipt

    # ---------- HELPERS ----------
    def _get_order(self, po_id: int, *, for_update: bool = False) -> PurchaseOrder:
        stmt = (
            select(PurchaseOrder)
            .where(PurchaseOrder.id == po_id)
            .options(selectinload(PurchaseOrder.items))
        )
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        po = self.db.execute(stmt).scalars().first()
        if not po:
            raise PurchaseOrderNotFoundError()
        return po

    def _validate_lines(
        self,
        po: PurchaseOrder,
        payload: StockReceiptCreate,
    ) -> tuple[list[tuple[PurchaseOrderItem, int]], Decimal]:
        po_items = {item.id: item for item in po.items}
        # une même ligne peut apparaître plusieurs fois : on cumule
        requested: dict[int, int] = {}
        lines = []
        total = ZERO

        for ln in payload.items:
            po_item = po_items.get(ln.purchase_order_item_id)
            if po_item is None:
                raise PurchaseOrderItemNotFoundError(
                    f"Item {ln.purchase_order_item_id} does not belong to purchase order {po.order_number}"
                )
            if ln.quantity_received <= 0:
                raise ValidationError("quantity_received must be positive")

            cumulated = requested.get(po_item.id, 0) + ln.quantity_received
            if cumulated > po_item.quantity_remaining:
                raise QuantityExceedsOrderedError(
                    f"Item {po_item.id}: receiving {cumulated}, only {po_item.quantity_remaining} remaining"
                )
            requested[po_item.id] = cumulated

            total += line_total(ln.quantity_received, po_item.cost_price)
            lines.append((po_item, ln.quantity_received))

        return lines, total

    def _create_batch(
        self,
        po_item: PurchaseOrderItem,
        quantity: int,
        received_date: date,
        actor_id: int,
    ) -> ProductBatch:
        batch = ProductBatch(
            product_id=po_item.product_id,
            cost_price=po_item.cost_price,
            selling_price=po_item.selling_price,
            quantity_available=quantity,
            purchased_at=received_date,
            expires_at=po_item.expires_at,
            created_by=actor_id,
            updated_by=actor_id,
        )
        self.db.add(batch)
        self.db.flush()
        return batch
