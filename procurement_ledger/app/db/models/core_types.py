import enum


class POStatus(str, enum.Enum):
    draft = "draft"
    ordered = "ordered"
    partial = "partial"
    received = "received"
    cancelled = "cancelled"


class PaymentStatus(str, enum.Enum):
    unpaid = "unpaid"
    partial = "partial"
    paid = "paid"


class PaymentMethod(str, enum.Enum):
    cash = "cash"
    bank_transfer = "bank_transfer"
    cheque = "cheque"
    upi = "upi"


# Statuts acceptés par la mise à jour d'un PO (toujours depuis DRAFT)
EDITABLE_PO_STATUSES = {
    POStatus.draft,
    POStatus.ordered,
    POStatus.cancelled,
}

# PO sur lesquels une réception est possible
RECEIVABLE_PO_STATUSES = {
    POStatus.ordered,
    POStatus.partial,
}
