"""
Paiements fournisseur et imputation FIFO sur les PO ouverts.

Un paiement :
- diminue la dette fournisseur du montant total (UPDATE conditionnel)
- est imputé sur les PO non soldés / non annulés du vendor, du plus ancien
  (order_date) au plus récent, chaque PO étant plafonné à son restant dû

Le paiement lui-même ne stocke pas son imputation : elle est écrite sur les PO
(paid_amount, payment_status, last_payment_at).

Reliquat : si les PO ouverts ne suffisent pas à absorber le montant, le solde
vendor est quand même débité du montant complet et le reste n'est imputé nulle
part. Il est journalisé et exposé via `VendorPayment.unapplied_amount`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from procurement_ledger.app.db.models.core_types import PaymentStatus, POStatus
from procurement_ledger.app.db.models.models_v1 import PurchaseOrder, VendorPayment, utcnow
from procurement_ledger.app.db.session import transaction
from procurement_ledger.app.schemas.vendor_payment import VendorPaymentCreate
from procurement_ledger.services.errors import (
    InsufficientBalanceError,
    PaymentExceedsBalanceError,
    ValidationError,
    VendorPaymentNotFoundError,
)
from procurement_ledger.services.lookups import get_vendor
from procurement_ledger.services.money import ZERO, to_money
from procurement_ledger.services.numbering import VENDOR_PAYMENT_PREFIX, generate_document_number
from procurement_ledger.services.vendor_ledger import VendorLedger


def payment_status_for(paid_amount, total_amount) -> PaymentStatus:
    paid = to_money(paid_amount)
    if paid <= ZERO:
        return PaymentStatus.unpaid
    if paid >= to_money(total_amount):
        return PaymentStatus.paid
    return PaymentStatus.partial


@dataclass(frozen=True)
class Allocation:
    purchase_order_id: int
    amount: Decimal
    paid_amount: Decimal
    payment_status: PaymentStatus


def allocate_fifo(orders: Sequence[PurchaseOrder], amount: Decimal) -> tuple[list[Allocation], Decimal]:
    """
    Répartit `amount` sur `orders` (déjà triés du plus ancien au plus récent).

    Fonction pure : ne modifie pas les PO. Retourne les imputations et le reliquat.
    """
    remaining = to_money(amount)
    allocations: list[Allocation] = []

    for po in orders:
        if remaining <= ZERO:
            break

        outstanding = to_money(po.total_amount) - to_money(po.paid_amount)
        if outstanding <= ZERO:
            continue

        allocate = min(remaining, outstanding)
        new_paid = to_money(po.paid_amount) + allocate
        status = payment_status_for(new_paid, po.total_amount)

        allocations.append(
            Allocation(
                purchase_order_id=po.id,
                amount=allocate,
                paid_amount=new_paid,
                payment_status=status,
            )
        )
        remaining -= allocate

    return allocations, remaining


class PaymentAllocator:
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
    def get_all(self) -> list[VendorPayment]:
        stmt = select(VendorPayment).order_by(VendorPayment.payment_date.desc(), VendorPayment.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def get_by_id(self, payment_id: int) -> VendorPayment:
        payment = self.db.get(VendorPayment, payment_id)
        if not payment:
            raise VendorPaymentNotFoundError()
        return payment

    def get_by_vendor(self, vendor_id: int) -> list[VendorPayment]:
        stmt = (
            select(VendorPayment)
            .where(VendorPayment.vendor_id == vendor_id)
            .order_by(VendorPayment.payment_date.desc(), VendorPayment.id.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def open_orders(self, vendor_id: int) -> list[PurchaseOrder]:
        """PO du vendor non soldés et non annulés, FIFO (order_date puis id)."""
        stmt = (
            select(PurchaseOrder)
            .where(PurchaseOrder.vendor_id == vendor_id)
            .where(PurchaseOrder.payment_status != PaymentStatus.paid)
            .where(PurchaseOrder.status != POStatus.cancelled)
            .order_by(PurchaseOrder.order_date.asc(), PurchaseOrder.id.asc())
            .execution_options(populate_existing=True)
        )
        return list(self.db.execute(stmt).scalars().all())

    # ---------- PAIEMENT ----------
    def create_payment(self, payload: VendorPaymentCreate, actor_id: int) -> VendorPayment:
        amount = to_money(payload.amount)
        if amount <= ZERO:
            raise ValidationError("Payment amount must be positive")

        # Contrôle anticipé (messages précis). La vraie garde est l'UPDATE
        # conditionnel de decrease_balance, dans la transaction.
        vendor = get_vendor(self.db, payload.vendor_id, include_inactive=True)
        self.db.refresh(vendor, attribute_names=["balance"])
        if vendor.balance <= ZERO:
            raise InsufficientBalanceError()
        if amount > vendor.balance:
            raise PaymentExceedsBalanceError(
                f"Payment amount {amount} exceeds vendor balance {vendor.balance}"
            )

        with transaction(self.db):
            # 1re écriture de la transaction : verrouille la ligne vendor
            self.ledger.decrease_balance(vendor.id, amount)

            payment = VendorPayment(
                vendor_id=vendor.id,
                payment_number=generate_document_number(VENDOR_PAYMENT_PREFIX, payload.payment_date),
                amount=amount,
                payment_date=payload.payment_date,
                payment_method=payload.payment_method,
                reference=payload.reference,
                notes=payload.notes,
                created_by=actor_id,
                updated_by=actor_id,
            )
            self.db.add(payment)

            orders = self.open_orders(vendor.id)
            allocations, remaining = allocate_fifo(orders, amount)

            now = utcnow()
            by_id = {po.id: po for po in orders}
            for alloc in allocations:
                po = by_id[alloc.purchase_order_id]
                po.paid_amount = alloc.paid_amount
                po.payment_status = alloc.payment_status
                po.last_payment_at = now
                po.updated_by = actor_id
            self.db.flush()

        payment.unapplied_amount = remaining
        self.log.info(
            "vendor payment %s created (vendor=%s amount=%s allocations=%s)",
            payment.payment_number,
            vendor.id,
            amount,
            [(a.purchase_order_id, str(a.amount)) for a in allocations],
        )
        if remaining > ZERO:
            self.log.warning(
                "vendor payment %s: %s left unapplied, no open purchase order to absorb it",
                payment.payment_number, remaining,
            )
        return payment
