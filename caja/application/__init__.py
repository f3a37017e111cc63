"""Application layer - Use cases and DTOs."""

from caja.application.dto.transaction_dto import (
    AttachmentDTO,
    BalancesResponseDTO,
    BankBalancesResponseDTO,
    TransactionCreateDTO,
    TransactionResponseDTO,
)
from caja.application.services import LedgerService
