"""
Lectures vendor / produit partagées par les moteurs.

Le filtre soft-delete (`active = true`) est centralisé dans `active_only` :
aucun autre module ne doit répéter le prédicat.
"""

from __future__ import annotations

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from procurement_ledger.app.db.models.models_v1 import Product, Vendor
from procurement_ledger.services.errors import ProductNotFoundError, VendorNotFoundError


def active_only(stmt: Select, model) -> Select:
    return stmt.where(model.active.is_(True))


def get_vendor(db: Session, vendor_id: int, *, include_inactive: bool = False) -> Vendor:
    stmt = select(Vendor).where(Vendor.id == vendor_id)
    if not include_inactive:
        stmt = active_only(stmt, Vendor)
    vendor = db.execute(stmt).scalar_one_or_none()
    if not vendor:
        raise VendorNotFoundError()
    return vendor


def get_product(db: Session, product_id: int) -> Product:
    product = db.execute(active_only(select(Product).where(Product.id == product_id), Product)).scalar_one_or_none()
    if not product:
        raise ProductNotFoundError(f"Product {product_id} not found")
    return product


def list_active_vendors(db: Session) -> list[Vendor]:
    return list(db.execute(active_only(select(Vendor), Vendor).order_by(Vendor.name)).scalars().all())
