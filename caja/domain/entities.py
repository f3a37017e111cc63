"""
Domain Entities - Transacciones y saldos de caja/banco.
Cada transacción se registra una sola vez y no se modifica.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from .value_objects import AttachmentRef, BankId, Currency, CurrencyOperation, Money


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Naive datetimes are taken as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


@dataclass(frozen=True)
class TransactionInput:
    """
    Datos validados de una operación, tal como llegan del formulario.
    calculated_amount es la contraparte calculada al cargar la operación.
    """
    operation_type: str
    currency_operation: CurrencyOperation
    amount: Decimal
    bank_id: BankId | None = None
    exchange_rate: Decimal | None = None
    calculated_amount: Decimal | None = None
    description: str | None = None
    client_id: str | None = None
    attachment: AttachmentRef | None = None


@dataclass(frozen=True)
class Transaction:
    """
    Entity - Transacción registrada.
    Inmutable: no hay edición ni borrado.
    """
    operation_type: str
    currency_operation: CurrencyOperation
    amount: Decimal
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=utc_now)
    bank_id: BankId | None = None
    exchange_rate: Decimal | None = None
    calculated_amount: Decimal | None = None
    description: str | None = None
    client_id: str | None = None
    attachment: AttachmentRef | None = None

    @classmethod
    def from_input(
        cls,
        data: TransactionInput,
        transaction_id: uuid.UUID,
        created_at: datetime,
    ) -> "Transaction":
        return cls(
            id=transaction_id,
            created_at=as_utc(created_at),
            operation_type=data.operation_type,
            currency_operation=data.currency_operation,
            amount=data.amount,
            bank_id=data.bank_id,
            exchange_rate=data.exchange_rate,
            calculated_amount=data.calculated_amount,
            description=data.description,
            client_id=data.client_id,
            attachment=data.attachment,
        )


class CashRegisterBalances:
    """Saldos de caja por moneda."""

    def __init__(self, balances: dict[Currency, Decimal] | None = None):
        self._balances: dict[Currency, Money] = {c: Money(Decimal("0"), c) for c in Currency}
        for currency, amount in (balances or {}).items():
            currency = Currency(currency)
            self._balances[currency] = Money(Decimal(amount), currency)

    def get(self, currency: Currency) -> Decimal:
        return self._balances[currency].amount

    def apply(self, money: Money) -> None:
        self._balances[money.currency] = self._balances[money.currency] + money

    def as_dict(self) -> dict[Currency, Decimal]:
        return {currency: money.amount for currency, money in self._balances.items()}

    def copy(self) -> "CashRegisterBalances":
        return CashRegisterBalances(self.as_dict())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CashRegisterBalances):
            return NotImplemented
        return self._balances == other._balances


class BankBalances:
    """Saldos por banco y moneda. Un banco sin movimientos tiene saldo 0."""

    def __init__(self, balances: dict[str, dict[Currency, Decimal]] | None = None):
        self._balances: dict[tuple[BankId, Currency], Money] = {}
        for bank_id, per_currency in (balances or {}).items():
            for currency, amount in per_currency.items():
                currency = Currency(currency)
                self._balances[(BankId(bank_id), currency)] = Money(Decimal(amount), currency)

    def get(self, bank_id: BankId, currency: Currency) -> Decimal:
        money = self._balances.get((bank_id, currency))
        return money.amount if money is not None else Decimal("0")

    def apply(self, bank_id: BankId, money: Money) -> None:
        key = (bank_id, money.currency)
        current = self._balances.get(key, Money(Decimal("0"), money.currency))
        self._balances[key] = current + money

    def banks(self) -> list[BankId]:
        return sorted({bank_id for bank_id, _ in self._balances})

    def for_bank(self, bank_id: BankId) -> dict[Currency, Decimal]:
        return {
            currency: money.amount
            for (bank, currency), money in self._balances.items()
            if bank == bank_id
        }

    def as_dict(self) -> dict[BankId, dict[Currency, Decimal]]:
        return {bank_id: self.for_bank(bank_id) for bank_id in self.banks()}

    def copy(self) -> "BankBalances":
        return BankBalances(self.as_dict())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BankBalances):
            return NotImplemented
        return self._balances == other._balances
