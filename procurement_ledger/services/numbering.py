from __future__ import annotations

import uuid
from datetime import date

PURCHASE_ORDER_PREFIX = "PO"
STOCK_RECEIPT_PREFIX = "SR"
VENDOR_PAYMENT_PREFIX = "VP"


def generate_document_number(prefix: str, doc_date: date) -> str:
    """PREFIX-YYYYMMDD-xxxxxxxx : lisible, unique (colonne UNIQUE), jamais clé primaire."""
    return f"{prefix}-{doc_date.strftime('%Y%m%d')}-{uuid.uuid4().hex[:8]}"
