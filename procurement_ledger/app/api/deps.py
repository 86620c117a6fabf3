from __future__ import annotations

from typing import Generator

from fastapi import Header, HTTPException

from procurement_ledger.app.db.session import SessionLocal


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_actor_id(x_actor_id: int | None = Header(default=None, alias="X-Actor-Id")) -> int:
    """
    Id de l'utilisateur authentifié, posé par le middleware d'auth en amont.
    Sert uniquement à l'audit (created_by / updated_by).
    """
    if x_actor_id is None or x_actor_id <= 0:
        raise HTTPException(status_code=401, detail="Missing or invalid X-Actor-Id header")
    return x_actor_id
