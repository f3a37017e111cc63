"""
Application Service - Caja ledger shared by the API.
"""

import logging
import threading
import uuid
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from caja.domain.entities import Transaction, TransactionInput, utc_now
from caja.domain.services import (
    DEFAULT_CALCULATED_AMOUNT_TOLERANCE,
    ILedgerStateRepository,
    LedgerPoster,
    LedgerState,
)
from caja.domain.value_objects import BankId, Currency

logger = logging.getLogger(__name__)


class LedgerService:
    """
    Owns the poster (cash balances, bank balances, transaction log) and
    persists the state after every posting.

    post() holds a lock across compute, apply, append and save so that
    concurrent requests never observe a half-applied transaction. If the
    save fails the state is restored to what it was before the posting.
    """

    def __init__(
        self,
        repository: ILedgerStateRepository,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], uuid.UUID] = uuid.uuid4,
        tolerance: Decimal = DEFAULT_CALCULATED_AMOUNT_TOLERANCE,
    ):
        self.repository = repository
        self._lock = threading.Lock()
        self._poster = LedgerPoster(
            LedgerState(), clock=clock, id_factory=id_factory, tolerance=tolerance
        )

    @property
    def state(self) -> LedgerState:
        return self._poster.state

    def load(self) -> None:
        """Restore balances and log from the repository."""
        with self._lock:
            state = self.repository.load()
            self._poster.state = state if state is not None else LedgerState()
            logger.info(
                "Ledger loaded: %d transactions, %d banks",
                len(self._poster.log),
                len(self._poster.banks.banks()),
            )

    def post(self, data: TransactionInput) -> Transaction:
        with self._lock:
            snapshot = self._poster.state.copy()
            transaction = self._poster.post(data)
            try:
                self.repository.save(self._poster.state)
            except Exception:
                self._poster.state = snapshot
                logger.exception("Failed to persist ledger after posting %s; rolled back", transaction.id)
                raise
        return transaction

    def transactions(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Transaction]:
        with self._lock:
            if start is None and end is None:
                return self._poster.log.all()
            return self._poster.log.query_by_date_range(
                start or datetime.min, end or datetime.max
            )

    def get_transaction(self, transaction_id: uuid.UUID) -> Transaction | None:
        with self._lock:
            return self._poster.log.get(transaction_id)

    def cash_balances(self) -> dict[Currency, Decimal]:
        with self._lock:
            return self._poster.cash.as_dict()

    def bank_balances(self) -> dict[BankId, dict[Currency, Decimal]]:
        with self._lock:
            return self._poster.banks.as_dict()

    def balances_for_bank(self, bank_id: BankId) -> dict[Currency, Decimal]:
        with self._lock:
            return {c: self._poster.banks.get(bank_id, c) for c in Currency}
