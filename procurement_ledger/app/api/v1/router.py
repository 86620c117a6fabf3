from fastapi import APIRouter

from procurement_ledger.app.api.v1.endpoints.purchase_orders import router as purchase_orders_router
from procurement_ledger.app.api.v1.endpoints.stock_receipts import router as stock_receipts_router
from procurement_ledger.app.api.v1.endpoints.vendor_payments import router as vendor_payments_router

router = APIRouter()
router.include_router(purchase_orders_router, tags=["purchase_orders"])
router.include_router(stock_receipts_router, tags=["stock_receipts"])
router.include_router(vendor_payments_router, tags=["vendor_payments"])
