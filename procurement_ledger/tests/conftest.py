import os
import uuid
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from procurement_ledger.app.db.base import Base
from procurement_ledger.app.db.models import models_v1  # noqa: F401  (tables)
from procurement_ledger.app.db.models.core_types import POStatus
from procurement_ledger.app.db.models.models_v1 import Product, Vendor
from procurement_ledger.app.db.session import make_engine, make_sessionmaker
from procurement_ledger.app.schemas.purchase_order import (
    PurchaseOrderCreate,
    PurchaseOrderItemCreate,
    PurchaseOrderUpdate,
)
from procurement_ledger.services.purchase_orders import PurchaseOrderManager

ACTOR_ID = 42


@pytest.fixture(scope="function")
def engine(tmp_path):
    """
    Base isolée par test.

    TEST_DATABASE_URL (Postgres) si fourni, sinon un fichier SQLite jetable :
    un vrai fichier (pas :memory:) pour que plusieurs connexions / threads
    voient les mêmes données.
    """
    url = os.getenv("TEST_DATABASE_URL") or f"sqlite+pysqlite:///{tmp_path / 'ledger.db'}"
    eng = make_engine(url)
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        Base.metadata.drop_all(bind=eng)
        eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_sessionmaker(engine)


@pytest.fixture
def db_session(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# ---------- FACTORIES ----------
@pytest.fixture
def make_vendor(db_session):
    def _make(*, balance=Decimal("0.00"), active=True, name=None) -> Vendor:
        vendor = Vendor(
            name=name or f"TEST-VENDOR-{uuid.uuid4().hex[:8]}",
            balance=Decimal(balance),
            active=active,
            created_by=ACTOR_ID,
            updated_by=ACTOR_ID,
        )
        db_session.add(vendor)
        db_session.commit()
        return vendor

    return _make


@pytest.fixture
def make_product(db_session):
    def _make(*, active=True) -> Product:
        product = Product(
            sku=f"TEST-SKU-{uuid.uuid4().hex[:8]}",
            name="Test product",
            active=active,
            created_by=ACTOR_ID,
            updated_by=ACTOR_ID,
        )
        db_session.add(product)
        db_session.commit()
        return product

    return _make


@pytest.fixture
def make_po(db_session, make_vendor, make_product):
    """
    Crée un PO via PurchaseOrderManager puis le passe au statut voulu
    (ORDERED par défaut) avec une mise à jour, comme en production.

    lines : [(quantity_ordered, cost_price), ...]
    """

    def _make(
        *,
        vendor=None,
        lines=((10, "5.00"),),
        order_date=date(2026, 1, 10),
        status=POStatus.ordered,
        expires_at=None,
    ):
        vendor = vendor or make_vendor()
        items = [
            PurchaseOrderItemCreate(
                product_id=make_product().id,
                quantity_ordered=qty,
                cost_price=Decimal(cost),
                selling_price=Decimal(cost) * 2,
                expires_at=expires_at,
            )
            for qty, cost in lines
        ]
        manager = PurchaseOrderManager(db_session)
        po = manager.create(
            PurchaseOrderCreate(vendor_id=vendor.id, order_date=order_date, items=items),
            ACTOR_ID,
        )
        if status != POStatus.draft:
            po = manager.update(
                po.id,
                PurchaseOrderUpdate(vendor_id=vendor.id, order_date=order_date, status=status, items=items),
                ACTOR_ID,
            )
        return po

    return _make


# ---------- API ----------
@pytest.fixture
def client(session_factory):
    from procurement_ledger.app.api.deps import get_db
    from procurement_ledger.app.main import create_app

    app = create_app()

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
