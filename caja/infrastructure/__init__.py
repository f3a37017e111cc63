"""Infrastructure layer."""

from caja.infrastructure.database import build_engine, build_session_factory, init_db
from caja.infrastructure.database.models import KeyValueEntry
from caja.infrastructure.repositories import (
    InMemoryLedgerStateRepository,
    SqlLedgerStateRepository,
)
