"""
Bons de commande fournisseur (PO) et leurs lignes.

Cycle de vie :
    DRAFT -> ORDERED -> PARTIAL -> RECEIVED
    DRAFT -> CANCELLED

Un PO n'est modifiable (lignes remplacées en bloc) que tant qu'il est DRAFT.
Après passage en ORDERED, seul ReceivingEngine fait avancer quantity_received.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from procurement_ledger.app.db.models.core_types import POStatus, PaymentStatus
from procurement_ledger.app.db.models.models_v1 import PurchaseOrder, PurchaseOrderItem, utcnow
from procurement_ledger.app.db.session import transaction
from procurement_ledger.app.schemas.purchase_order import (
    PurchaseOrderCreate,
    PurchaseOrderItemCreate,
    PurchaseOrderUpdate,
)
from procurement_ledger.services.errors import (
    CannotCancelNonDraftError,
    CannotUpdateNonDraftError,
    PurchaseOrderNotFoundError,
    TotalBelowPaidAmountError,
    ValidationError,
)
from procurement_ledger.services.lookups import get_product, get_vendor
from procurement_ledger.services.money import ZERO, line_total, to_money
from procurement_ledger.services.numbering import PURCHASE_ORDER_PREFIX, generate_document_number
from procurement_ledger.services.payments import payment_status_for


class PurchaseOrderManager:
    def __init__(self, db: Session, logger: logging.Logger | None = None):
        self.db = db
        self.log = logger or logging.getLogger(__name__)

    # ---------- LECTURES ----------
    def get_all(self) -> list[PurchaseOrder]:
        stmt = (
            select(PurchaseOrder)
            .options(selectinload(PurchaseOrder.items))
            .order_by(PurchaseOrder.order_date.desc(), PurchaseOrder.id.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_by_id(self, po_id: int) -> PurchaseOrder:
        po = (
            self.db.execute(
                select(PurchaseOrder)
                .where(PurchaseOrder.id == po_id)
                .options(selectinload(PurchaseOrder.items))
            )
            .scalars()
            .first()
        )
        if not po:
            raise PurchaseOrderNotFoundError()
        return po

    def get_by_vendor(self, vendor_id: int) -> list[PurchaseOrder]:
        stmt = (
            select(PurchaseOrder)
            .where(PurchaseOrder.vendor_id == vendor_id)
            .options(selectinload(PurchaseOrder.items))
            .order_by(PurchaseOrder.order_date.desc(), PurchaseOrder.id.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    # ---------- ÉCRITURES ----------
    def create(self, payload: PurchaseOrderCreate, actor_id: int) -> PurchaseOrder:
        get_vendor(self.db, payload.vendor_id)
        items, total = self._build_items(payload.items, actor_id)

        po = PurchaseOrder(
            order_number=generate_document_number(PURCHASE_ORDER_PREFIX, payload.order_date),
            vendor_id=payload.vendor_id,
            order_date=payload.order_date,
            status=POStatus.draft,
            total_amount=total,
            paid_amount=ZERO,
            payment_status=PaymentStatus.unpaid,
            notes=payload.notes,
            items=items,
            created_by=actor_id,
            updated_by=actor_id,
        )
        with transaction(self.db):
            self.db.add(po)
            self.db.flush()

        self.log.info(
            "purchase order %s created (id=%s vendor=%s total=%s items=%d)",
            po.order_number, po.id, po.vendor_id, po.total_amount, len(po.items),
        )
        return po

    def update(self, po_id: int, payload: PurchaseOrderUpdate, actor_id: int) -> PurchaseOrder:
        """
        Remplace entièrement un PO DRAFT (en-tête + lignes) et recalcule le total.

        Le même appel peut le passer en ORDERED ou CANCELLED.
        """
        po = self.get_by_id(po_id)
        if po.status != POStatus.draft:
            raise CannotUpdateNonDraftError()

        get_vendor(self.db, payload.vendor_id)
        items, total = self._build_items(payload.items, actor_id)
        if total < to_money(po.paid_amount):
            raise TotalBelowPaidAmountError(
                f"Purchase order {po.order_number}: total {total} is below the {po.paid_amount} already paid"
            )
        previous_status = po.status

        with transaction(self.db):
            # delete-orphan : les anciennes lignes sont supprimées au flush
            po.items = items
            po.vendor_id = payload.vendor_id
            po.order_date = payload.order_date
            po.status = payload.status
            po.total_amount = total
            # un DRAFT peut déjà avoir reçu des paiements FIFO
            po.payment_status = payment_status_for(po.paid_amount, total)
            po.notes = payload.notes
            po.updated_by = actor_id
            self.db.flush()

        self.log.info(
            "purchase order %s updated (status %s -> %s, total=%s)",
            po.order_number, previous_status.value, po.status.value, po.total_amount,
        )
        return po

    def cancel(self, po_id: int, actor_id: int) -> None:
        po = self.get_by_id(po_id)
        if po.status != POStatus.draft:
            raise CannotCancelNonDraftError()

        with transaction(self.db):
            # WHERE status = draft : protège contre un passage en ORDERED concurrent
            cancelled = self.db.execute(
                update(PurchaseOrder)
                .where(PurchaseOrder.id == po_id)
                .where(PurchaseOrder.status == POStatus.draft)
                .values(status=POStatus.cancelled, updated_by=actor_id, updated_at=utcnow())
                .returning(PurchaseOrder.id)
                .execution_options(synchronize_session=False)
            ).scalar_one_or_none()
            if cancelled is None:
                raise CannotCancelNonDraftError()
        self.db.expire(po)

        self.log.info("purchase order %s cancelled by %s", po.order_number, actor_id)

    # ---------- HELPERS ----------
    def _build_items(
        self,
        lines: list[PurchaseOrderItemCreate],
        actor_id: int,
    ) -> tuple[list[PurchaseOrderItem], Decimal]:
        if not lines:
            raise ValidationError("A purchase order needs at least one item")

        total = ZERO
        items = []
        for ln in lines:
            if ln.quantity_ordered <= 0:
                raise ValidationError("quantity_ordered must be positive")
            if ln.cost_price < 0 or ln.selling_price < 0:
                raise ValidationError("Prices must not be negative")
            get_product(self.db, ln.product_id)

            total += line_total(ln.quantity_ordered, ln.cost_price)
            items.append(
                PurchaseOrderItem(
                    product_id=ln.product_id,
                    quantity_ordered=ln.quantity_ordered,
                    quantity_received=0,
                    cost_price=to_money(ln.cost_price),
                    selling_price=to_money(ln.selling_price),
                    expires_at=ln.expires_at,
                    created_by=actor_id,
                    updated_by=actor_id,
                )
            )
        return items, total
