"""
API Routers - Saldos de caja y bancos.
"""

from fastapi import APIRouter, Depends

from caja.api.dependencies import get_ledger
from caja.application.dto.transaction_dto import (
    BalancesResponseDTO,
    BankBalancesResponseDTO,
)
from caja.application.services import LedgerService
from caja.domain.value_objects import BankId

router = APIRouter(prefix="/api/v1/balances", tags=["Saldos"])


@router.get("", response_model=BalancesResponseDTO)
def get_balances(ledger: LedgerService = Depends(get_ledger)):
    """Saldos de caja por moneda y de cada banco."""
    return BalancesResponseDTO(
        cash=ledger.cash_balances(),
        banks=ledger.bank_balances(),
    )


@router.get("/banks/{bank_id}", response_model=BankBalancesResponseDTO)
def get_bank_balances(bank_id: str, ledger: LedgerService = Depends(get_ledger)):
    """Saldos de un banco; monedas sin movimientos en 0."""
    return BankBalancesResponseDTO(
        bank_id=bank_id,
        balances=ledger.balances_for_bank(BankId(bank_id)),
    )
