from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from procurement_ledger.services.errors import (
    DomainError,
    LedgerError,
    NotFoundError,
    TransactionError,
    ValidationError,
)

log = logging.getLogger(__name__)


def status_for(exc: LedgerError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, (ValidationError, DomainError)):
        return 400
    return 500


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    status_code = status_for(exc)
    detail = exc.message
    if isinstance(exc, TransactionError) or status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.code)
        detail = "Internal error, nothing was written"
    return JSONResponse(status_code=status_code, content={"detail": detail, "code": exc.code})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LedgerError, ledger_error_handler)
