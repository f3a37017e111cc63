"""
Dependency injection for the API routers.
"""

from fastapi import Request

from caja.application.services import LedgerService


def get_ledger(request: Request) -> LedgerService:
    """Ledger service created in the app lifespan."""
    return request.app.state.ledger
