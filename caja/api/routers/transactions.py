"""
API Routers - Registro y consulta de transacciones.
"""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from caja.api.dependencies import get_ledger
from caja.application.dto.transaction_dto import (
    TransactionCreateDTO,
    TransactionResponseDTO,
)
from caja.application.services import LedgerService
from caja.domain.entities import as_utc

router = APIRouter(prefix="/api/v1", tags=["Transacciones"])


@router.post(
    "/transactions",
    response_model=TransactionResponseDTO,
    status_code=status.HTTP_201_CREATED,
)
def create_transaction(
    dto: TransactionCreateDTO,
    ledger: LedgerService = Depends(get_ledger),
):
    """
    Registra una operación y actualiza saldos de caja y banco.

    - El banco es obligatorio salvo para USDT_IN, USDT_OUT, USD_IN, USD_OUT
    - Compra/venta sin monto calculado: se deriva de monto y cotización
    """
    transaction = ledger.post(dto.to_input())
    return TransactionResponseDTO.model_validate(transaction)


@router.get("/transactions", response_model=list[TransactionResponseDTO])
def list_transactions(
    start: datetime | None = Query(None, description="Desde (inclusive)"),
    end: datetime | None = Query(None, description="Hasta (inclusive)"),
    ledger: LedgerService = Depends(get_ledger),
):
    """Transacciones entre start y end, más recientes primero."""
    if start and end and as_utc(start) > as_utc(end):
        raise HTTPException(status_code=400, detail="start debe ser anterior a end")
    return [TransactionResponseDTO.model_validate(t) for t in ledger.transactions(start, end)]


@router.get("/transactions/{transaction_id}", response_model=TransactionResponseDTO)
def get_transaction(transaction_id: UUID, ledger: LedgerService = Depends(get_ledger)):
    """Transacción por ID."""
    transaction = ledger.get_transaction(transaction_id)
    if transaction is None:
        raise HTTPException(status_code=404, detail="Transacción no encontrada")
    return TransactionResponseDTO.model_validate(transaction)
