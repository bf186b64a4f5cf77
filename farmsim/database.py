"""
FarmSim Database Configuration

Builds the SQLAlchemy engine and session factory for the scenario store
(scenarios, alerts, planning projections, decisions, comparisons).

Environment variables:
    DATABASE_URL     — SQLAlchemy URL (default: SQLite file farmsim/farmsim.db)
    SQLALCHEMY_ECHO  — "true" to log every SQL statement

Architecture:
    - SQLAlchemy 2.0 style with mapped_column and type annotations
    - create_db_engine() is shared by the app, the seed script and the tests,
      so every SQLite connection gets the same pragmas
    - get_db() is the FastAPI request dependency; session_scope() is for
      scripts that run outside a request
"""

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Session

DEFAULT_DATABASE_URL = f"sqlite:///{Path(__file__).parent / 'farmsim.db'}"
DATABASE_URL = os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the given URL.

    SQLite engines allow cross-thread use (FastAPI runs sync endpoints in a
    thread pool) and turn on foreign keys for every connection. File
    databases also switch to WAL so readers don't block the writer.
    """
    is_sqlite = url.startswith("sqlite")
    db_engine = create_engine(
        url,
        connect_args={"check_same_thread": False} if is_sqlite else {},
        pool_pre_ping=True,
        echo=echo,
    )

    if is_sqlite:
        in_memory = ":memory:" in url or url.rstrip("/") == "sqlite:"

        @event.listens_for(db_engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            if not in_memory:
                cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    return db_engine


engine = create_db_engine(
    DATABASE_URL,
    echo=os.environ.get("SQLALCHEMY_ECHO", "false").lower() == "true",
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Declarative base for all FarmSim ORM models."""
    pass


def get_db() -> Iterator[Session]:
    """
    FastAPI dependency that provides a database session.
    Yields a session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for scripts; rolls back on error and always closes."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind: Optional[Engine] = None):
    """
    Create all tables that don't exist yet.
    Called during application startup, by seed_data.py and by the tests.
    """
    from . import models  # noqa: F401 (registers the tables on Base.metadata)
    Base.metadata.create_all(bind=bind or engine)
