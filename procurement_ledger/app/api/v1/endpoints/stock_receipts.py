from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from procurement_ledger.app.api.deps import get_actor_id, get_db
from procurement_ledger.app.schemas.stock_receipt import StockReceiptCreate, StockReceiptRead
from procurement_ledger.services import procurement
from procurement_ledger.services.receiving import ReceivingEngine

router = APIRouter(prefix="/stock-receipts")


@router.get("", response_model=list[StockReceiptRead])
def list_receipts(db: Session = Depends(get_db)):
    return ReceivingEngine(db).get_all()


@router.get("/purchase-order/{po_id}", response_model=list[StockReceiptRead])
def list_receipts_by_po(po_id: int, db: Session = Depends(get_db)):
    return ReceivingEngine(db).get_by_purchase_order(po_id)


@router.get("/{receipt_id}", response_model=StockReceiptRead)
def get_receipt(receipt_id: int, db: Session = Depends(get_db)):
    return ReceivingEngine(db).get_by_id(receipt_id)


@router.post("", response_model=StockReceiptRead, status_code=201)
def create_receipt(
    payload: StockReceiptCreate,
    db: Session = Depends(get_db),
    actor_id: int = Depends(get_actor_id),
):
    return procurement.create_stock_receipt(db, payload, actor_id)
