"""
Erreurs métier du module achats / dette fournisseur.

Chaque classe porte un `code` stable : la couche HTTP s'en sert pour
choisir le statut et le renvoyer tel quel au client.
"""

from __future__ import annotations


class LedgerError(Exception):
    code = "ledger_error"
    default_message = "Procurement ledger error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ---------- NOT FOUND ----------
class NotFoundError(LedgerError):
    code = "not_found"
    default_message = "Resource not found"


class VendorNotFoundError(NotFoundError):
    code = "vendor_not_found"
    default_message = "Vendor not found"


class ProductNotFoundError(NotFoundError):
    code = "product_not_found"
    default_message = "Product not found"


class PurchaseOrderNotFoundError(NotFoundError):
    code = "purchase_order_not_found"
    default_message = "Purchase order not found"


class PurchaseOrderItemNotFoundError(NotFoundError):
    code = "purchase_order_item_not_found"
    default_message = "Purchase order item not found"


class StockReceiptNotFoundError(NotFoundError):
    code = "stock_receipt_not_found"
    default_message = "Stock receipt not found"


class VendorPaymentNotFoundError(NotFoundError):
    code = "vendor_payment_not_found"
    default_message = "Vendor payment not found"


# ---------- VALIDATION ----------
class ValidationError(LedgerError):
    code = "validation_error"
    default_message = "Invalid input"


# ---------- RÈGLES MÉTIER ----------
class DomainError(LedgerError):
    code = "domain_error"
    default_message = "Business rule violation"


class NonDraftError(DomainError):
    code = "non_draft"
    default_message = "Purchase order is not in draft status"


class CannotUpdateNonDraftError(NonDraftError):
    code = "cannot_update_non_draft"
    default_message = "Can only update purchase orders in draft status"


class CannotCancelNonDraftError(NonDraftError):
    code = "cannot_cancel_non_draft"
    default_message = "Can only cancel purchase orders in draft status"


class NotReceivableError(DomainError):
    code = "order_not_receivable"
    default_message = "Purchase order is not in a receivable status"


class QuantityExceedsOrderedError(DomainError):
    code = "quantity_exceeds_ordered"
    default_message = "Quantity received exceeds quantity ordered"


class InsufficientBalanceError(DomainError):
    code = "insufficient_balance"
    default_message = "Vendor has no outstanding balance"


class PaymentExceedsBalanceError(DomainError):
    code = "payment_exceeds_balance"
    default_message = "Payment amount exceeds vendor balance"


class TotalBelowPaidAmountError(DomainError):
    code = "total_below_paid_amount"
    default_message = "Purchase order total cannot be lower than the amount already paid"


# ---------- STOCKAGE ----------
class TransactionError(LedgerError):
    code = "transaction_error"
    default_message = "Store failure, transaction rolled back"
