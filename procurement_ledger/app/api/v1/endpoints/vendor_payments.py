from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from procurement_ledger.app.api.deps import get_actor_id, get_db
from procurement_ledger.app.schemas.vendor_payment import VendorPaymentCreate, VendorPaymentRead
from procurement_ledger.services import procurement
from procurement_ledger.services.payments import PaymentAllocator

router = APIRouter(prefix="/vendor-payments")


@router.get("", response_model=list[VendorPaymentRead])
def list_payments(db: Session = Depends(get_db)):
    return PaymentAllocator(db).get_all()


@router.get("/vendor/{vendor_id}", response_model=list[VendorPaymentRead])
def list_payments_by_vendor(vendor_id: int, db: Session = Depends(get_db)):
    return PaymentAllocator(db).get_by_vendor(vendor_id)


@router.get("/{payment_id}", response_model=VendorPaymentRead)
def get_payment(payment_id: int, db: Session = Depends(get_db)):
    return PaymentAllocator(db).get_by_id(payment_id)


@router.post("", response_model=VendorPaymentRead, status_code=201)
def create_payment(
    payload: VendorPaymentCreate,
    db: Session = Depends(get_db),
    actor_id: int = Depends(get_actor_id),
):
    # pas de retry automatique : écriture financière non idempotente
    return procurement.create_vendor_payment(db, payload, actor_id)
