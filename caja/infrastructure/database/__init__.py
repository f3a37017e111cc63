"""
Database initialization and session management.
"""

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from caja.core.config import get_settings
from caja.infrastructure.database.models import KeyValueEntry


def build_engine(database_url: str) -> Engine:
    if "sqlite" in database_url:
        return create_engine(database_url, echo=False, connect_args={"check_same_thread": False})
    return create_engine(database_url, echo=False)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Initialize database - create all tables."""
    url = engine.url
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(bind=engine)


def default_session_factory() -> sessionmaker:
    """Engine and session factory from DATABASE_* settings, tables created."""
    engine = build_engine(get_settings().database_url)
    init_db(engine)
    return build_session_factory(engine)


__all__ = [
    "KeyValueEntry",
    "build_engine",
    "build_session_factory",
    "default_session_factory",
    "init_db",
]
