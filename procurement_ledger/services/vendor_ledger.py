"""
Solde fournisseur (dette de l'entreprise envers le vendor).

Règle : seuls ReceivingEngine (+) et PaymentAllocator (-) modifient
`vendors.balance`, et uniquement via ce module. Les deux opérations sont des
UPDATE conditionnels côté SQL, jamais un read-modify-write applicatif.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value

from procurement_ledger.app.db.models.models_v1 import Vendor
from procurement_ledger.services.errors import (
    PaymentExceedsBalanceError,
    ValidationError,
    VendorNotFoundError,
)
from procurement_ledger.services.money import ZERO, to_money


class VendorLedger:
    def __init__(self, db: Session, logger: logging.Logger | None = None):
        self.db = db
        self.log = logger or logging.getLogger(__name__)

    def get_balance(self, vendor_id: int) -> Decimal:
        balance = self.db.execute(select(Vendor.balance).where(Vendor.id == vendor_id)).scalar_one_or_none()
        if balance is None:
            raise VendorNotFoundError()
        return balance

    def lock(self, vendor_id: int) -> None:
        """SELECT ... FOR UPDATE sur la ligne vendor (sans effet en SQLite)."""
        locked = self.db.execute(
            select(Vendor.id).where(Vendor.id == vendor_id).with_for_update()
        ).scalar_one_or_none()
        if locked is None:
            raise VendorNotFoundError()

    def increase_balance(self, vendor_id: int, delta) -> Decimal:
        delta = self._check_delta(delta)
        new_balance = self.db.execute(
            update(Vendor)
            .where(Vendor.id == vendor_id)
            .values(balance=Vendor.balance + delta)
            .returning(Vendor.balance)
            .execution_options(synchronize_session=False)
        ).scalar_one_or_none()
        if new_balance is None:
            raise VendorNotFoundError()
        self._sync(vendor_id, new_balance)
        self.log.debug("vendor %s balance +%s -> %s", vendor_id, delta, new_balance)
        return new_balance

    def decrease_balance(self, vendor_id: int, delta) -> Decimal:
        """
        balance -= delta, seulement si balance >= delta.

        Le WHERE porte la condition : deux paiements concurrents ne peuvent pas
        passer tous les deux (le second ne matche plus aucune ligne).
        """
        delta = self._check_delta(delta)
        new_balance = self.db.execute(
            update(Vendor)
            .where(Vendor.id == vendor_id)
            .where(Vendor.balance >= delta)
            .values(balance=Vendor.balance - delta)
            .returning(Vendor.balance)
            .execution_options(synchronize_session=False)
        ).scalar_one_or_none()
        if new_balance is None:
            exists = self.db.execute(select(Vendor.id).where(Vendor.id == vendor_id)).scalar_one_or_none()
            if exists is None:
                raise VendorNotFoundError()
            raise PaymentExceedsBalanceError()
        self._sync(vendor_id, new_balance)
        self.log.debug("vendor %s balance -%s -> %s", vendor_id, delta, new_balance)
        return new_balance

    def _sync(self, vendor_id: int, balance: Decimal) -> None:
        # Vendor déjà chargé dans la session : on aligne sa valeur sur la base
        vendor = self.db.identity_map.get(Session.identity_key(Vendor, vendor_id))
        if vendor is not None:
            set_committed_value(vendor, "balance", balance)

    @staticmethod
    def _check_delta(delta) -> Decimal:
        delta = to_money(delta)
        if delta < ZERO:
            raise ValidationError("Balance delta must not be negative")
        return delta
