"""initial procurement schema (vendors, PO, receipts, batches, payments)

Revision ID: 3f1a9c2e7b10
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3f1a9c2e7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PK = sa.BigInteger().with_variant(sa.Integer(), "sqlite")
MONEY = sa.Numeric(14, 2)

PO_STATUS = sa.Enum("draft", "ordered", "partial", "received", "cancelled", name="po_status")
PAYMENT_STATUS = sa.Enum("unpaid", "partial", "paid", name="payment_status")
PAYMENT_METHOD = sa.Enum("cash", "bank_transfer", "cheque", "upi", name="payment_method")


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=False),
        sa.Column("updated_by", sa.Integer(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "vendors",
        sa.Column("id", PK, primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("contact_person", sa.String(255)),
        sa.Column("phone", sa.String(20)),
        sa.Column("email", sa.String(255)),
        sa.Column("address", sa.String(500)),
        sa.Column("balance", MONEY, nullable=False, server_default="0"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_audit_columns(),
    )

    op.create_table(
        "products",
        sa.Column("id", PK, primary_key=True),
        sa.Column("sku", sa.String(64), unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_audit_columns(),
    )

    op.create_table(
        "purchase_orders",
        sa.Column("id", PK, primary_key=True),
        sa.Column("order_number", sa.String(64), nullable=False, unique=True),
        sa.Column("vendor_id", PK, sa.ForeignKey("vendors.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("order_date", sa.Date(), nullable=False),
        sa.Column("status", PO_STATUS, nullable=False, server_default="draft"),
        sa.Column("total_amount", MONEY, nullable=False, server_default="0"),
        sa.Column("paid_amount", MONEY, nullable=False, server_default="0"),
        sa.Column("payment_status", PAYMENT_STATUS, nullable=False, server_default="unpaid"),
        sa.Column("last_payment_at", sa.DateTime(timezone=True)),
        sa.Column("notes", sa.Text()),
        *_audit_columns(),
        sa.CheckConstraint("paid_amount >= 0", name="ck_po_paid_nonneg"),
        sa.CheckConstraint("paid_amount <= total_amount", name="ck_po_paid_le_total"),
    )
    op.create_index("ix_purchase_orders_vendor_id", "purchase_orders", ["vendor_id"])
    op.create_index("ix_purchase_orders_vendor_date", "purchase_orders", ["vendor_id", "order_date"])

    op.create_table(
        "purchase_order_items",
        sa.Column("id", PK, primary_key=True),
        sa.Column(
            "purchase_order_id",
            PK,
            sa.ForeignKey("purchase_orders.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("product_id", PK, sa.ForeignKey("products.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity_ordered", sa.Integer(), nullable=False),
        sa.Column("quantity_received", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("cost_price", MONEY, nullable=False),
        sa.Column("selling_price", MONEY, nullable=False),
        sa.Column("expires_at", sa.Date()),
        *_audit_columns(),
        sa.CheckConstraint("quantity_ordered > 0", name="ck_po_item_qty_ordered_pos"),
        sa.CheckConstraint("quantity_received >= 0", name="ck_po_item_qty_received_nonneg"),
        sa.CheckConstraint("quantity_received <= quantity_ordered", name="ck_po_item_received_le_ordered"),
        sa.CheckConstraint("cost_price >= 0", name="ck_po_item_cost_nonneg"),
        sa.CheckConstraint("selling_price >= 0", name="ck_po_item_selling_nonneg"),
    )
    op.create_index("ix_purchase_order_items_purchase_order_id", "purchase_order_items", ["purchase_order_id"])
    op.create_index("ix_purchase_order_items_product_id", "purchase_order_items", ["product_id"])

    op.create_table(
        "product_batches",
        sa.Column("id", PK, primary_key=True),
        sa.Column("product_id", PK, sa.ForeignKey("products.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("cost_price", MONEY, nullable=False),
        sa.Column("selling_price", MONEY, nullable=False),
        sa.Column("quantity_available", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("purchased_at", sa.Date(), nullable=False),
        sa.Column("expires_at", sa.Date()),
        *_audit_columns(),
        sa.CheckConstraint("quantity_available >= 0", name="ck_batch_qty_nonneg"),
    )
    op.create_index("ix_product_batches_product_id", "product_batches", ["product_id"])
    op.create_index("ix_product_batches_product_expiry", "product_batches", ["product_id", "expires_at"])

    op.create_table(
        "stock_receipts",
        sa.Column("id", PK, primary_key=True),
        sa.Column(
            "purchase_order_id",
            PK,
            sa.ForeignKey("purchase_orders.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("receipt_number", sa.String(64), nullable=False, unique=True),
        sa.Column("received_date", sa.Date(), nullable=False),
        sa.Column("total_amount", MONEY, nullable=False, server_default="0"),
        sa.Column("notes", sa.Text()),
        *_audit_columns(),
    )
    op.create_index("ix_stock_receipts_purchase_order_id", "stock_receipts", ["purchase_order_id"])

    op.create_table(
        "stock_receipt_items",
        sa.Column("id", PK, primary_key=True),
        sa.Column(
            "stock_receipt_id",
            PK,
            sa.ForeignKey("stock_receipts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "purchase_order_item_id",
            PK,
            sa.ForeignKey("purchase_order_items.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "product_batch_id",
            PK,
            sa.ForeignKey("product_batches.id", ondelete="RESTRICT"),
            nullable=False,
            unique=True,
        ),
        sa.Column("quantity_received", sa.Integer(), nullable=False),
        *_audit_columns(),
        sa.CheckConstraint("quantity_received > 0", name="ck_sr_item_qty_pos"),
    )
    op.create_index("ix_stock_receipt_items_stock_receipt_id", "stock_receipt_items", ["stock_receipt_id"])
    op.create_index(
        "ix_stock_receipt_items_purchase_order_item_id",
        "stock_receipt_items",
        ["purchase_order_item_id"],
    )

    op.create_table(
        "vendor_payments",
        sa.Column("id", PK, primary_key=True),
        sa.Column("vendor_id", PK, sa.ForeignKey("vendors.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("payment_number", sa.String(64), nullable=False, unique=True),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("payment_method", PAYMENT_METHOD, nullable=False),
        sa.Column("reference", sa.String(255)),
        sa.Column("notes", sa.Text()),
        *_audit_columns(),
        sa.CheckConstraint("amount > 0", name="ck_vendor_payment_amount_pos"),
    )
    op.create_index("ix_vendor_payments_vendor_id", "vendor_payments", ["vendor_id"])


def downgrade() -> None:
    op.drop_table("vendor_payments")
    op.drop_table("stock_receipt_items")
    op.drop_table("stock_receipts")
    op.drop_table("product_batches")
    op.drop_table("purchase_order_items")
    op.drop_table("purchase_orders")
    op.drop_table("products")
    op.drop_table("vendors")

    bind = op.get_bind()
    PAYMENT_METHOD.drop(bind, checkfirst=True)
    PAYMENT_STATUS.drop(bind, checkfirst=True)
    PO_STATUS.drop(bind, checkfirst=True)
