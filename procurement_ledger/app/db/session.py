from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from procurement_ledger.app.settings import settings
from procurement_ledger.services.errors import TransactionError

log = logging.getLogger(__name__)


def make_engine(url: str, *, echo: bool = False, pool_pre_ping: bool = True) -> Engine:
    connect_args = {}
    if url.startswith("sqlite"):
        # sessions multi-threads (1 requête = 1 thread) + attente sur le verrou d'écriture
        connect_args = {"check_same_thread": False, "timeout": 30}
    eng = create_engine(url, echo=echo, pool_pre_ping=pool_pre_ping, connect_args=connect_args)
    if eng.dialect.name == "sqlite":
        event.listen(eng, "connect", _sqlite_foreign_keys)
    return eng


def _sqlite_foreign_keys(dbapi_conn, _record) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_sessionmaker(bind: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=bind, autoflush=False, autocommit=False, expire_on_commit=False)


engine = make_engine(settings.DATABASE_URL, echo=settings.DB_ECHO, pool_pre_ping=settings.DB_POOL_PRE_PING)
SessionLocal = make_sessionmaker(engine)


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Frontière transactionnelle d'un cas d'usage.

    Commit si le bloc se termine, rollback sinon. Les erreurs SQLAlchemy sont
    remontées en TransactionError (opaque), les autres exceptions telles quelles.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log.error("transaction rolled back: %s", e.__class__.__name__, exc_info=True)
        raise TransactionError("Store failure, transaction rolled back") from e
    except BaseException:
        db.rollback()
        raise
