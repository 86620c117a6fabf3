from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from procurement_ledger.app.api.deps import get_actor_id, get_db
from procurement_ledger.app.schemas.purchase_order import (
    PurchaseOrderCreate,
    PurchaseOrderRead,
    PurchaseOrderUpdate,
)
from procurement_ledger.services import procurement
from procurement_ledger.services.purchase_orders import PurchaseOrderManager

router = APIRouter(prefix="/purchase-orders")


@router.get("", response_model=list[PurchaseOrderRead])
def list_pos(db: Session = Depends(get_db)):
    return PurchaseOrderManager(db).get_all()


@router.get("/vendor/{vendor_id}", response_model=list[PurchaseOrderRead])
def list_pos_by_vendor(vendor_id: int, db: Session = Depends(get_db)):
    return PurchaseOrderManager(db).get_by_vendor(vendor_id)


@router.get("/{po_id}", response_model=PurchaseOrderRead)
def get_po(po_id: int, db: Session = Depends(get_db)):
    return PurchaseOrderManager(db).get_by_id(po_id)


@router.post("", response_model=PurchaseOrderRead, status_code=201)
def create_po(
    payload: PurchaseOrderCreate,
    db: Session = Depends(get_db),
    actor_id: int = Depends(get_actor_id),
):
    return procurement.create_purchase_order(db, payload, actor_id)


@router.put("/{po_id}", response_model=PurchaseOrderRead)
def update_po(
    po_id: int,
    payload: PurchaseOrderUpdate,
    db: Session = Depends(get_db),
    actor_id: int = Depends(get_actor_id),
):
    return procurement.update_purchase_order(db, po_id, payload, actor_id)


@router.delete("/{po_id}", status_code=204)
def cancel_po(
    po_id: int,
    db: Session = Depends(get_db),
    actor_id: int = Depends(get_actor_id),
):
    procurement.cancel_purchase_order(db, po_id, actor_id)
    return Response(status_code=204)
