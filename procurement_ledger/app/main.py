from fastapi import FastAPI

from procurement_ledger.app.api.errors import register_error_handlers
from procurement_ledger.app.api.v1.router import router as v1_router
from procurement_ledger.app.logging_setup import setup_logging
from procurement_ledger.app.settings import settings


def create_app() -> FastAPI:
    setup_logging(settings)
    app = FastAPI(title=settings.APP_TITLE, version="0.1.0")
    register_error_handlers(app)
    app.include_router(v1_router, prefix="/v1")
    return app


app = create_app()
