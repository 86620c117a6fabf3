from __future__ import annotations

from datetime import datetime, date, timezone
from decimal import Decimal

from sqlalchemy import (
    String,
    Integer,
    BigInteger,
    DateTime,
    Date,
    Boolean,
    ForeignKey,
    Numeric,
    Text,
    Enum,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from procurement_ledger.app.db.base import Base
from procurement_ledger.app.db.models.core_types import (
    POStatus,
    PaymentStatus,
    PaymentMethod,
)

# BIGINT en Postgres, INTEGER en SQLite (sinon pas d'autoincrement sur le rowid)
PK = BigInteger().with_variant(Integer(), "sqlite")
MONEY = Numeric(14, 2)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )
    created_by: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_by: Mapped[int] = mapped_column(Integer, nullable=False)


# ---------- MASTER DATA ----------
class Vendor(AuditMixin, Base):
    __tablename__ = "vendors"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    contact_person: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(20))
    email: Mapped[str | None] = mapped_column(String(255))
    address: Mapped[str | None] = mapped_column(String(500))
    # Dette envers le fournisseur. Écrit uniquement par services.vendor_ledger
    balance: Mapped[Decimal] = mapped_column(MONEY, default=Decimal("0.00"), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Product(AuditMixin, Base):
    __tablename__ = "products"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    sku: Mapped[str | None] = mapped_column(String(64), unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


# ---------- PROCUREMENT ----------
class PurchaseOrder(AuditMixin, Base):
    __tablename__ = "purchase_orders"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    order_number: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    vendor_id: Mapped[int] = mapped_column(
        ForeignKey("vendors.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[POStatus] = mapped_column(Enum(POStatus, name="po_status"), default=POStatus.draft, nullable=False)

    total_amount: Mapped[Decimal] = mapped_column(MONEY, default=Decimal("0.00"), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(MONEY, default=Decimal("0.00"), nullable=False)
    payment_status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, name="payment_status"),
        default=PaymentStatus.unpaid,
        nullable=False,
    )
    last_payment_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    notes: Mapped[str | None] = mapped_column(Text)

    vendor: Mapped[Vendor] = relationship()
    items: Mapped[list["PurchaseOrderItem"]] = relationship(
        back_populates="purchase_order",
        cascade="all, delete-orphan",
        order_by="PurchaseOrderItem.id",
    )

    __table_args__ = (
        CheckConstraint("paid_amount >= 0", name="ck_po_paid_nonneg"),
        CheckConstraint("paid_amount <= total_amount", name="ck_po_paid_le_total"),
        Index("ix_purchase_orders_vendor_date", "vendor_id", "order_date"),
    )


class PurchaseOrderItem(AuditMixin, Base):
    __tablename__ = "purchase_order_items"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    purchase_order_id: Mapped[int] = mapped_column(
        ForeignKey("purchase_orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity_ordered: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity_received: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    cost_price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    selling_price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    expires_at: Mapped[date | None] = mapped_column(Date)

    purchase_order: Mapped[PurchaseOrder] = relationship(back_populates="items")
    product: Mapped[Product] = relationship()

    __table_args__ = (
        CheckConstraint("quantity_ordered > 0", name="ck_po_item_qty_ordered_pos"),
        CheckConstraint("quantity_received >= 0", name="ck_po_item_qty_received_nonneg"),
        CheckConstraint("quantity_received <= quantity_ordered", name="ck_po_item_received_le_ordered"),
        CheckConstraint("cost_price >= 0", name="ck_po_item_cost_nonneg"),
        CheckConstraint("selling_price >= 0", name="ck_po_item_selling_nonneg"),
    )

    @property
    def quantity_remaining(self) -> int:
        return self.quantity_ordered - self.quantity_received


# ---------- RECEIVING ----------
class StockReceipt(AuditMixin, Base):
    __tablename__ = "stock_receipts"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    purchase_order_id: Mapped[int] = mapped_column(
        ForeignKey("purchase_orders.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    receipt_number: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    received_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(MONEY, default=Decimal("0.00"), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)

    purchase_order: Mapped[PurchaseOrder] = relationship()
    items: Mapped[list["StockReceiptItem"]] = relationship(
        back_populates="receipt",
        cascade="all, delete-orphan",
        order_by="StockReceiptItem.id",
    )


class StockReceiptItem(AuditMixin, Base):
    __tablename__ = "stock_receipt_items"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    stock_receipt_id: Mapped[int] = mapped_column(
        ForeignKey("stock_receipts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    purchase_order_item_id: Mapped[int] = mapped_column(
        ForeignKey("purchase_order_items.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    # 1 ligne de réception = 1 lot, jamais fusionné
    product_batch_id: Mapped[int] = mapped_column(
        ForeignKey("product_batches.id", ondelete="RESTRICT"),
        unique=True,
        nullable=False,
    )
    quantity_received: Mapped[int] = mapped_column(Integer, nullable=False)

    receipt: Mapped[StockReceipt] = relationship(back_populates="items")
    batch: Mapped["ProductBatch"] = relationship()

    __table_args__ = (CheckConstraint("quantity_received > 0", name="ck_sr_item_qty_pos"),)


# ---------- INVENTORY ----------
class ProductBatch(AuditMixin, Base):
    __tablename__ = "product_batches"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    cost_price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    selling_price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    quantity_available: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    purchased_at: Mapped[date] = mapped_column(Date, nullable=False)
    expires_at: Mapped[date | None] = mapped_column(Date)

    __table_args__ = (
        CheckConstraint("quantity_available >= 0", name="ck_batch_qty_nonneg"),
        Index("ix_product_batches_product_expiry", "product_id", "expires_at"),
    )


# ---------- PAYMENTS ----------
class VendorPayment(AuditMixin, Base):
    __tablename__ = "vendor_payments"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    vendor_id: Mapped[int] = mapped_column(
        ForeignKey("vendors.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    payment_number: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(Enum(PaymentMethod, name="payment_method"), nullable=False)
    reference: Mapped[str | None] = mapped_column(String(255))
    notes: Mapped[str | None] = mapped_column(Text)

    # Non persisté : reliquat non imputé lors de l'allocation FIFO
    unapplied_amount = Decimal("0.00")

    __table_args__ = (CheckConstraint("amount > 0", name="ck_vendor_payment_amount_pos"),)
