"""
Domain Layer - Value objects for the caja back-office.
Monedas, operaciones de cambio y montos firmados.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import NewType

from .exceptions import ValidationError

BankId = NewType("BankId", str)


class Currency(str, Enum):
    """Monedas manejadas por la caja."""
    ARS = "ARS"
    USD = "USD"
    USDT = "USDT"


class CurrencyOperation(str, Enum):
    """Operaciones de caja registradas desde el formulario."""
    ARS_IN = "ARS_IN"        # Entrada de ARS
    ARS_OUT = "ARS_OUT"      # Salida de ARS
    USDT_BUY = "USDT_BUY"    # Compra de USDT
    USDT_SELL = "USDT_SELL"  # Venta de USDT
    USDT_IN = "USDT_IN"      # Entrada de USDT
    USDT_OUT = "USDT_OUT"    # Salida de USDT
    USD_IN = "USD_IN"        # Entrada de USD
    USD_OUT = "USD_OUT"      # Salida de USD
    USD_BUY = "USD_BUY"      # Compra de USD
    USD_SELL = "USD_SELL"    # Venta de USD

    @property
    def currency(self) -> Currency:
        return Currency(self.value.rsplit("_", 1)[0])

    @property
    def is_buy(self) -> bool:
        return self.value.endswith("_BUY")

    @property
    def is_sell(self) -> bool:
        return self.value.endswith("_SELL")

    @property
    def is_exchange(self) -> bool:
        return self.is_buy or self.is_sell

    @property
    def requires_bank(self) -> bool:
        return self not in NO_BANK_OPERATIONS


NO_BANK_OPERATIONS = frozenset({
    CurrencyOperation.USDT_IN,
    CurrencyOperation.USDT_OUT,
    CurrencyOperation.USD_IN,
    CurrencyOperation.USD_OUT,
})


class LedgerBook(str, Enum):
    """Libro afectado por un movimiento."""
    CASH = "CASH"  # Caja
    BANK = "BANK"  # Banco


@dataclass(frozen=True, slots=True)
class Money:
    """Value Object - Monto firmado en una moneda."""
    amount: Decimal
    currency: Currency

    def __add__(self, other: "Money") -> "Money":
        if self.currency != other.currency:
            raise ValueError("No se pueden sumar monedas distintas")
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __neg__(self) -> "Money":
        return Money(amount=-self.amount, currency=self.currency)


@dataclass(frozen=True, slots=True)
class ExchangeRate:
    """Value Object - Cotización en ARS por unidad de la moneda operada."""
    rate: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if self.rate <= 0:
            raise ValidationError(f"La cotización debe ser positiva: {self.rate}")

    def counter_amount(self, amount: Decimal, operation: CurrencyOperation) -> Decimal:
        """
        Monto de la contraparte.
        Compra: amount / rate. Venta: amount * rate.
        """
        if operation.is_buy:
            return amount / self.rate
        if operation.is_sell:
            return amount * self.rate
        raise ValueError(f"{operation.value} no es una operación de cambio")


@dataclass(frozen=True, slots=True)
class BalanceDelta:
    """Movimiento a aplicar sobre la caja o sobre un banco."""
    book: LedgerBook
    money: Money
    bank_id: BankId | None = None


@dataclass(frozen=True, slots=True)
class AttachmentRef:
    """Referencia al comprobante adjunto (no se guarda el binario)."""
    name: str
    url: str
    content_type: str
    size_bytes: int
