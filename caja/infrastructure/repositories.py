"""
Infrastructure - Persistencia del estado de la caja.

El estado se guarda como dos entradas clave/valor en JSON:
saldos ("caja-storage") y registro de transacciones ("transaction-storage").
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, TypeAdapter
from sqlalchemy.orm import sessionmaker

from caja.domain.entities import BankBalances, CashRegisterBalances, Transaction
from caja.domain.services import ILedgerStateRepository, LedgerState, TransactionLog
from caja.domain.value_objects import AttachmentRef, Currency, CurrencyOperation
from caja.infrastructure.database.models import KeyValueEntry

logger = logging.getLogger(__name__)

BALANCES_KEY = "caja-storage"
TRANSACTIONS_KEY = "transaction-storage"


class AttachmentRecord(BaseModel):
    name: str
    url: str
    content_type: str
    size_bytes: int

    model_config = ConfigDict(from_attributes=True)


class TransactionRecord(BaseModel):
    id: UUID
    created_at: datetime
    operation_type: str
    currency_operation: CurrencyOperation
    amount: Decimal
    bank_id: str | None = None
    exchange_rate: Decimal | None = None
    calculated_amount: Decimal | None = None
    description: str | None = None
    client_id: str | None = None
    attachment: AttachmentRecord | None = None

    model_config = ConfigDict(from_attributes=True)

    def to_entity(self) -> Transaction:
        attachment = None
        if self.attachment is not None:
            attachment = AttachmentRef(**self.attachment.model_dump())
        created_at = self.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return Transaction(
            id=self.id,
            created_at=created_at,
            operation_type=self.operation_type,
            currency_operation=self.currency_operation,
            amount=self.amount,
            bank_id=self.bank_id,
            exchange_rate=self.exchange_rate,
            calculated_amount=self.calculated_amount,
            description=self.description,
            client_id=self.client_id,
            attachment=attachment,
        )


class BalancesRecord(BaseModel):
    cash: dict[Currency, Decimal] = {}
    banks: dict[str, dict[Currency, Decimal]] = {}


_transactions_adapter = TypeAdapter(list[TransactionRecord])


def dump_balances(state: LedgerState) -> str:
    return BalancesRecord(
        cash=state.cash.as_dict(),
        banks=state.banks.as_dict(),
    ).model_dump_json()


def dump_transactions(state: LedgerState) -> str:
    records = [TransactionRecord.model_validate(t) for t in state.log.all()]
    return _transactions_adapter.dump_json(records).decode("utf-8")


def load_state(balances_json: str | None, transactions_json: str | None) -> LedgerState:
    balances = BalancesRecord.model_validate_json(balances_json) if balances_json else BalancesRecord()
    records = _transactions_adapter.validate_json(transactions_json) if transactions_json else []
    return LedgerState(
        cash=CashRegisterBalances(balances.cash),
        banks=BankBalances(balances.banks),
        log=TransactionLog([r.to_entity() for r in records]),
    )


class InMemoryLedgerStateRepository(ILedgerStateRepository):
    """Repositorio en memoria; guarda el JSON igual que el repositorio SQL."""

    def __init__(self):
        self.entries: dict[str, str] = {}
        self.save_count = 0

    def load(self) -> LedgerState | None:
        if not self.entries:
            return None
        return load_state(self.entries.get(BALANCES_KEY), self.entries.get(TRANSACTIONS_KEY))

    def save(self, state: LedgerState) -> None:
        self.entries[BALANCES_KEY] = dump_balances(state)
        self.entries[TRANSACTIONS_KEY] = dump_transactions(state)
        self.save_count += 1


class SqlLedgerStateRepository(ILedgerStateRepository):
    """Repositorio sobre la tabla KeyValueEntry (SQLite o PostgreSQL)."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def load(self) -> LedgerState | None:
        db = self.session_factory()
        try:
            balances = db.get(KeyValueEntry, BALANCES_KEY)
            transactions = db.get(KeyValueEntry, TRANSACTIONS_KEY)
            balances_json = balances.value if balances else None
            transactions_json = transactions.value if transactions else None
        finally:
            db.close()

        if balances_json is None and transactions_json is None:
            return None
        return load_state(balances_json, transactions_json)

    def save(self, state: LedgerState) -> None:
        values = {
            BALANCES_KEY: dump_balances(state),
            TRANSACTIONS_KEY: dump_transactions(state),
        }
        now = datetime.now(timezone.utc)

        db = self.session_factory()
        try:
            for key, value in values.items():
                entry = db.get(KeyValueEntry, key)
                if entry is None:
                    db.add(KeyValueEntry(key=key, value=value, updated_at=now))
                else:
                    entry.value = value
                    entry.updated_at = now
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
        logger.debug("Saved ledger state (%d transactions)", len(state.log))
