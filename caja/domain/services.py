"""
Domain Services - Imputación de operaciones en caja y bancos.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from .entities import (
    BankBalances,
    CashRegisterBalances,
    Transaction,
    TransactionInput,
    as_utc,
    utc_now,
)
from .exceptions import ValidationError
from .value_objects import (
    BalanceDelta,
    Currency,
    CurrencyOperation,
    ExchangeRate,
    LedgerBook,
    Money,
)

logger = logging.getLogger(__name__)

DEFAULT_CALCULATED_AMOUNT_TOLERANCE = Decimal("0.0001")


class AmountSource(str, Enum):
    AMOUNT = "AMOUNT"          # monto principal
    CALCULATED = "CALCULATED"  # contraparte calculada con la cotización


@dataclass(frozen=True, slots=True)
class PostingLeg:
    book: LedgerBook
    currency: Currency
    sign: int
    source: AmountSource = AmountSource.AMOUNT


def _cash(currency: Currency, sign: int, source: AmountSource = AmountSource.AMOUNT) -> PostingLeg:
    return PostingLeg(LedgerBook.CASH, currency, sign, source)


def _bank(currency: Currency, sign: int, source: AmountSource = AmountSource.AMOUNT) -> PostingLeg:
    return PostingLeg(LedgerBook.BANK, currency, sign, source)


_CALC = AmountSource.CALCULATED

POSTING_RULES: dict[CurrencyOperation, tuple[PostingLeg, ...]] = {
    CurrencyOperation.ARS_IN: (_cash(Currency.ARS, +1), _bank(Currency.ARS, -1)),
    CurrencyOperation.ARS_OUT: (_cash(Currency.ARS, -1), _bank(Currency.ARS, +1)),
    CurrencyOperation.USDT_BUY: (
        _cash(Currency.ARS, -1),
        _cash(Currency.USDT, +1, _CALC),
        _bank(Currency.ARS, -1),
    ),
    CurrencyOperation.USDT_SELL: (
        _cash(Currency.USDT, -1),
        _cash(Currency.ARS, +1, _CALC),
        _bank(Currency.ARS, +1, _CALC),
    ),
    CurrencyOperation.USDT_IN: (_cash(Currency.USDT, +1),),
    CurrencyOperation.USDT_OUT: (_cash(Currency.USDT, -1),),
    CurrencyOperation.USD_IN: (_cash(Currency.USD, +1), _bank(Currency.USD, -1)),
    CurrencyOperation.USD_OUT: (_cash(Currency.USD, -1), _bank(Currency.USD, +1)),
    CurrencyOperation.USD_BUY: (
        _cash(Currency.ARS, -1),
        _cash(Currency.USD, +1, _CALC),
        _bank(Currency.ARS, -1),
    ),
    CurrencyOperation.USD_SELL: (
        _cash(Currency.USD, -1),
        _cash(Currency.ARS, +1, _CALC),
        _bank(Currency.ARS, +1, _CALC),
    ),
}


class TransactionLog:
    """
    Registro de transacciones, más reciente primero.
    Solo se agregan transacciones; nunca se editan ni se borran.
    """

    def __init__(self, transactions: list[Transaction] | None = None):
        self._transactions: list[Transaction] = list(transactions or [])

    def append(self, transaction: Transaction) -> None:
        self._transactions.insert(0, transaction)

    def query_by_date_range(self, start: datetime, end: datetime) -> list[Transaction]:
        """Transacciones con start <= created_at <= end, en orden del registro."""
        start, end = as_utc(start), as_utc(end)
        return [t for t in self._transactions if start <= t.created_at <= end]

    def get(self, transaction_id: uuid.UUID) -> Transaction | None:
        for transaction in self._transactions:
            if transaction.id == transaction_id:
                return transaction
        return None

    def all(self) -> list[Transaction]:
        return list(self._transactions)

    def copy(self) -> "TransactionLog":
        return TransactionLog(self._transactions)

    def __len__(self) -> int:
        return len(self._transactions)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(list(self._transactions))


@dataclass
class LedgerState:
    """Estado completo: saldos de caja, saldos bancarios y registro."""
    cash: CashRegisterBalances = field(default_factory=CashRegisterBalances)
    banks: BankBalances = field(default_factory=BankBalances)
    log: TransactionLog = field(default_factory=TransactionLog)

    def copy(self) -> "LedgerState":
        return LedgerState(cash=self.cash.copy(), banks=self.banks.copy(), log=self.log.copy())


class ILedgerStateRepository(ABC):

    @abstractmethod
    def load(self) -> LedgerState | None:
        ...

    @abstractmethod
    def save(self, state: LedgerState) -> None:
        ...


class LedgerPoster:
    """
    Service - Imputa cada operación en caja y, si corresponde, en banco.

    Única vía de escritura de los saldos. calculated_amount se toma tal
    como viene del formulario; no se recalcula al imputar.
    """

    def __init__(
        self,
        state: LedgerState,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], uuid.UUID] = uuid.uuid4,
        tolerance: Decimal = DEFAULT_CALCULATED_AMOUNT_TOLERANCE,
    ):
        self.state = state
        self.clock = clock
        self.id_factory = id_factory
        self.tolerance = tolerance

    @property
    def cash(self) -> CashRegisterBalances:
        return self.state.cash

    @property
    def banks(self) -> BankBalances:
        return self.state.banks

    @property
    def log(self) -> TransactionLog:
        return self.state.log

    def validate(self, data: TransactionInput) -> None:
        op = data.currency_operation
        if op.requires_bank and not data.bank_id:
            raise ValidationError(f"La operación {op.value} requiere seleccionar un banco")
        if data.amount < 0:
            raise ValidationError(f"El monto debe ser positivo: {data.amount}")
        if data.exchange_rate is not None and data.exchange_rate <= 0:
            raise ValidationError(f"La cotización debe ser positiva: {data.exchange_rate}")

    def compute_deltas(self, data: TransactionInput) -> list[BalanceDelta]:
        """
        Movimientos de caja y banco para una operación (sin efectos).
        Caja primero, banco después.
        """
        self.validate(data)
        op = data.currency_operation
        cash_deltas: list[BalanceDelta] = []
        bank_deltas: list[BalanceDelta] = []

        for leg in POSTING_RULES[op]:
            if leg.source == AmountSource.CALCULATED:
                if data.calculated_amount is None:
                    continue
                value = data.calculated_amount
            else:
                value = data.amount

            money = Money(amount=value, currency=leg.currency)
            if leg.sign < 0:
                money = -money
            if leg.book == LedgerBook.CASH:
                cash_deltas.append(BalanceDelta(LedgerBook.CASH, money))
            elif data.bank_id:
                bank_deltas.append(BalanceDelta(LedgerBook.BANK, money, data.bank_id))

        return cash_deltas + bank_deltas

    def post(self, data: TransactionInput) -> Transaction:
        """
        Registra una operación.
        Valida, aplica caja, aplica banco y agrega al registro, en ese orden.
        """
        deltas = self.compute_deltas(data)
        self._check_calculated_amount(data)

        transaction = Transaction.from_input(data, self.id_factory(), self.clock())

        for delta in deltas:
            if delta.book == LedgerBook.CASH:
                self.cash.apply(delta.money)
            else:
                self.banks.apply(delta.bank_id, delta.money)

        self.log.append(transaction)
        logger.info(
            "Posted %s %s amount=%s bank=%s (%d deltas)",
            transaction.id,
            data.currency_operation.value,
            data.amount,
            data.bank_id,
            len(deltas),
        )
        return transaction

    def _check_calculated_amount(self, data: TransactionInput) -> None:
        op = data.currency_operation
        if not op.is_exchange:
            return
        if data.calculated_amount is None:
            logger.warning(
                "%s without calculated_amount: counter leg skipped", op.value
            )
            return
        if data.exchange_rate is None:
            return

        expected = ExchangeRate(data.exchange_rate, op.currency).counter_amount(data.amount, op)
        if abs(expected - data.calculated_amount) > abs(expected) * self.tolerance:
            logger.warning(
                "%s calculated_amount=%s diverges from expected %s (amount=%s rate=%s)",
                op.value,
                data.calculated_amount,
                expected,
                data.amount,
                data.exchange_rate,
            )
