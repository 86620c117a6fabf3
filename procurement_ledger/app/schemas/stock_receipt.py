from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class StockReceiptItemCreate(BaseModel):
    purchase_order_item_id: int
    quantity_received: int = Field(ge=1)


class StockReceiptCreate(BaseModel):
    purchase_order_id: int
    received_date: date
    notes: str | None = Field(default=None, max_length=1000)
    items: list[StockReceiptItemCreate] = Field(min_length=1)


class StockReceiptItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    stock_receipt_id: int
    purchase_order_item_id: int
    product_batch_id: int
    quantity_received: int


class StockReceiptRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    purchase_order_id: int
    receipt_number: str
    received_date: date
    total_amount: Decimal
    notes: str | None
    created_at: datetime
    created_by: int
    items: list[StockReceiptItemRead] = Field(default_factory=list)
