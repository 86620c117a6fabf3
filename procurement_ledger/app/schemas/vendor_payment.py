from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from procurement_ledger.app.db.models.core_types import PaymentMethod


class VendorPaymentCreate(BaseModel):
    vendor_id: int
    amount: Decimal = Field(gt=0, decimal_places=2)
    payment_date: date
    payment_method: PaymentMethod
    reference: str | None = Field(default=None, max_length=255)
    notes: str | None = Field(default=None, max_length=1000)


class VendorPaymentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    vendor_id: int
    payment_number: str
    amount: Decimal
    payment_date: date
    payment_method: PaymentMethod
    reference: str | None
    notes: str | None
    created_at: datetime
    created_by: int
    # reliquat non imputé sur un PO (uniquement dans la réponse de création)
    unapplied_amount: Decimal = Decimal("0.00")
