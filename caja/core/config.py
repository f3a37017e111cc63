"""
Configuración leída de variables de entorno.
"""

import os
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from pathlib import Path


@dataclass(frozen=True)
class Settings:
    """Settings inmutables del proceso."""

    database_url: str
    log_dir: Path
    log_level: str
    calculated_amount_tolerance: Decimal
    max_attachment_bytes: int


def get_engine_url(database_type: str | None = None) -> str:
    """Database URL desde el entorno."""
    db_type = database_type or os.getenv("DATABASE_TYPE", "sqlite")

    if db_type == "sqlite":
        db_path = os.getenv("DATABASE_PATH", "./data/caja.db")
        return f"sqlite:///{db_path}"
    elif db_type == "postgresql":
        host = os.getenv("DB_HOST", "localhost")
        port = os.getenv("DB_PORT", "5432")
        dbname = os.getenv("DB_NAME", "caja")
        user = os.getenv("DB_USER", "postgres")
        password = os.getenv("DB_PASSWORD", "postgres")
        return f"postgresql://{user}:{password}@{host}:{port}/{dbname}"
    else:
        raise ValueError(f"Unsupported database type: {db_type}")


def load_settings() -> Settings:
    return Settings(
        database_url=get_engine_url(),
        log_dir=Path(os.getenv("LOG_DIR", "./logs")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        calculated_amount_tolerance=Decimal(os.getenv("CALCULATED_AMOUNT_TOLERANCE", "0.0001")),
        max_attachment_bytes=int(os.getenv("MAX_ATTACHMENT_BYTES", str(5 * 1024 * 1024))),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
