"""
Main FastAPI application - Caja back-office.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from caja import __version__
from caja.api.routers import balances, transactions
from caja.application.services import LedgerService
from caja.core.config import get_settings
from caja.domain.services import ILedgerStateRepository

logger = logging.getLogger(__name__)


def create_app(repository: ILedgerStateRepository | None = None) -> FastAPI:
    """
    Build the API. Without a repository the state lives in the
    DATABASE_* configured database.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        """Application lifespan - load ledger state on startup."""
        settings = get_settings()
        repo = repository
        if repo is None:
            from caja.infrastructure.database import default_session_factory
            from caja.infrastructure.repositories import SqlLedgerStateRepository

            repo = SqlLedgerStateRepository(default_session_factory())

        ledger = LedgerService(repo, tolerance=settings.calculated_amount_tolerance)
        ledger.load()
        app.state.ledger = ledger
        yield

    app = FastAPI(
        title="Caja Back-office API",
        description="""
## Casa de cambio - caja y bancos

- **Transacciones**: entradas/salidas de ARS, USD, USDT y compra/venta de USD y USDT
- **Saldos de caja** por moneda
- **Saldos bancarios** por banco y moneda
- Cada transacción se registra una sola vez; no hay edición ni borrado
        """,
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(transactions.router)
    app.include_router(balances.router)

    @app.get("/")
    def root():
        return {
            "name": "Caja Back-office API",
            "version": __version__,
            "docs": "/docs",
        }

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        """Handle domain validation errors."""
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=400,
            content={"detail": str(exc)}
        )

    return app


app = create_app()

