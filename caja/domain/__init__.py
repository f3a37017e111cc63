"""Domain layer - Pure Python business logic."""

from caja.domain.entities import (
    BankBalances,
    CashRegisterBalances,
    Transaction,
    TransactionInput,
)
from caja.domain.exceptions import LedgerError, ValidationError
from caja.domain.services import (
    POSTING_RULES,
    ILedgerStateRepository,
    LedgerPoster,
    LedgerState,
    TransactionLog,
)
from caja.domain.value_objects import (
    AttachmentRef,
    BalanceDelta,
    BankId,
    Currency,
    CurrencyOperation,
    ExchangeRate,
    LedgerBook,
    Money,
)
