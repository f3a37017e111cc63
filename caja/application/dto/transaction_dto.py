"""
API DTOs - Data Transfer Objects for API requests/responses.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from caja.core.config import get_settings
from caja.domain.entities import TransactionInput
from caja.domain.value_objects import AttachmentRef, BankId, Currency, CurrencyOperation, ExchangeRate

ACCEPTED_ATTACHMENT_TYPES = frozenset({
    "application/pdf",
    "image/jpeg",
    "image/png",
    "image/jpg",
})


class AttachmentDTO(BaseModel):
    """DTO - Comprobante adjunto (solo referencia)."""
    name: str = Field(..., min_length=1, description="Nombre del archivo")
    url: str = Field(..., min_length=1, description="URL del archivo")
    content_type: str = Field(..., description="Tipo MIME")
    size_bytes: int = Field(..., ge=0, description="Tamaño en bytes")

    model_config = ConfigDict(from_attributes=True)

    @field_validator("content_type")
    @classmethod
    def check_content_type(cls, value: str) -> str:
        if value not in ACCEPTED_ATTACHMENT_TYPES:
            raise ValueError("Tipo de archivo no soportado. Use PDF, JPG o PNG.")
        return value

    @field_validator("size_bytes")
    @classmethod
    def check_size(cls, value: int) -> int:
        limit = get_settings().max_attachment_bytes
        if value > limit:
            raise ValueError(
                f"El archivo es demasiado grande. El tamaño máximo es {limit // (1024 * 1024)}MB."
            )
        return value


class TransactionCreateDTO(BaseModel):
    """DTO - Alta de transacción (formulario)."""
    client_id: str = Field(..., min_length=1, description="Cliente")
    operation_type: str = Field(..., min_length=1, description="Tipo de operación")
    currency_operation: CurrencyOperation = Field(..., description="Operación")
    bank_id: str | None = Field(None, description="Banco")
    amount: Decimal = Field(..., ge=0, description="Monto")
    exchange_rate: Decimal | None = Field(None, gt=0, description="Cotización")
    calculated_amount: Decimal | None = Field(None, description="Monto calculado")
    description: str | None = Field(None, description="Descripción")
    attachment: AttachmentDTO | None = None

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "client_id": "CLI001",
            "operation_type": "Mostrador",
            "currency_operation": "USDT_BUY",
            "bank_id": "galicia",
            "amount": 1000000,
            "exchange_rate": 1000,
            "description": "Compra USDT cliente mostrador",
        }
    })

    @model_validator(mode="after")
    def check_bank(self) -> "TransactionCreateDTO":
        if self.currency_operation.requires_bank and not self.bank_id:
            raise ValueError("Banco es requerido para esta operación")
        return self

    def resolved_calculated_amount(self) -> Decimal | None:
        """Contraparte: la informada, o amount / rate (compra), amount * rate (venta)."""
        if self.calculated_amount is not None:
            return self.calculated_amount
        op = self.currency_operation
        if op.is_exchange and self.exchange_rate is not None:
            rate = ExchangeRate(rate=self.exchange_rate, currency=op.currency)
            return rate.counter_amount(self.amount, op)
        return None

    def to_input(self) -> TransactionInput:
        attachment = None
        if self.attachment is not None:
            attachment = AttachmentRef(**self.attachment.model_dump())
        return TransactionInput(
            operation_type=self.operation_type,
            currency_operation=self.currency_operation,
            amount=self.amount,
            bank_id=BankId(self.bank_id) if self.bank_id else None,
            exchange_rate=self.exchange_rate,
            calculated_amount=self.resolved_calculated_amount(),
            description=self.description,
            client_id=self.client_id,
            attachment=attachment,
        )


class TransactionResponseDTO(BaseModel):
    """DTO - Transacción registrada."""
    id: UUID
    created_at: datetime
    client_id: str | None
    operation_type: str
    currency_operation: CurrencyOperation
    bank_id: str | None
    amount: Decimal
    exchange_rate: Decimal | None
    calculated_amount: Decimal | None
    description: str | None
    attachment: AttachmentDTO | None

    model_config = ConfigDict(from_attributes=True)


class BalancesResponseDTO(BaseModel):
    """DTO - Saldos de caja y bancos."""
    cash: dict[Currency, Decimal]
    banks: dict[str, dict[Currency, Decimal]]


class BankBalancesResponseDTO(BaseModel):
    """DTO - Saldos de un banco."""
    bank_id: str
    balances: dict[Currency, Decimal]
