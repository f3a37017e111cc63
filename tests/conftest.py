"""
Pytest configuration and fixtures.
"""

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from caja.domain.entities import TransactionInput
from caja.domain.services import LedgerPoster, LedgerState
from caja.domain.value_objects import BankId, CurrencyOperation

BANK = BankId("galicia")


class SteppingClock:
    """Clock advancing one minute per call."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(minutes=1)
        return current


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock(datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def state() -> LedgerState:
    return LedgerState()


@pytest.fixture
def poster(state: LedgerState, clock: SteppingClock) -> LedgerPoster:
    return LedgerPoster(state, clock=clock)


@pytest.fixture
def make_input():
    def _make(
        operation: CurrencyOperation,
        amount: str,
        bank_id: str | None = BANK,
        exchange_rate: str | None = None,
        calculated_amount: str | None = None,
    ) -> TransactionInput:
        return TransactionInput(
            operation_type="Mostrador",
            currency_operation=operation,
            amount=Decimal(amount),
            bank_id=BankId(bank_id) if bank_id else None,
            exchange_rate=Decimal(exchange_rate) if exchange_rate else None,
            calculated_amount=Decimal(calculated_amount) if calculated_amount else None,
            client_id="CLI001",
        )

    return _make


@pytest.fixture
def fixed_ids():
    ids = iter(uuid.UUID(int=i) for i in range(1, 10_000))
    return lambda: next(ids)
