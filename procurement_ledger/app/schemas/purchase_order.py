from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from procurement_ledger.app.db.models.core_types import (
    EDITABLE_PO_STATUSES,
    PaymentStatus,
    POStatus,
)


class PurchaseOrderItemCreate(BaseModel):
    product_id: int
    quantity_ordered: int = Field(ge=1)
    cost_price: Decimal = Field(ge=0, decimal_places=2)
    selling_price: Decimal = Field(ge=0, decimal_places=2)
    expires_at: date | None = None


class PurchaseOrderCreate(BaseModel):
    vendor_id: int
    order_date: date
    notes: str | None = Field(default=None, max_length=1000)
    items: list[PurchaseOrderItemCreate] = Field(min_length=1)


class PurchaseOrderUpdate(PurchaseOrderCreate):
    status: POStatus = POStatus.draft

    @field_validator("status")
    @classmethod
    def _editable_status(cls, v: POStatus) -> POStatus:
        if v not in EDITABLE_PO_STATUSES:
            raise ValueError("status must be one of draft, ordered, cancelled")
        return v


class PurchaseOrderItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    purchase_order_id: int
    product_id: int
    quantity_ordered: int
    quantity_received: int
    cost_price: Decimal
    selling_price: Decimal
    expires_at: date | None


class PurchaseOrderRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_number: str
    vendor_id: int
    order_date: date
    status: POStatus
    total_amount: Decimal
    paid_amount: Decimal
    payment_status: PaymentStatus
    last_payment_at: datetime | None
    notes: str | None
    created_at: datetime
    updated_at: datetime
    created_by: int
    updated_by: int
    items: list[PurchaseOrderItemRead] = Field(default_factory=list)
