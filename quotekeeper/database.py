"""Database configuration and session management."""

import logging
import math
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from quotekeeper.config import get_settings
from quotekeeper.exceptions import ConfigurationError, StoreUnavailableError

logger = logging.getLogger(__name__)

Base: Any = declarative_base()

SessionLocal = sessionmaker(autocommit=False, autoflush=False)

_engine: Engine | None = None


def build_engine(database_url: str, connect_timeout: int = 5) -> Engine:
    """Create an engine for the given URL.

    ``connect_timeout`` (seconds) bounds how long a PostgreSQL connection attempt may
    block.
    """
    if database_url.startswith("sqlite"):
        engine = create_engine(database_url, connect_args={"check_same_thread": False})

        @event.listens_for(engine, "connect")
        def enable_foreign_keys(dbapi_connection, connection_record):
            # SQLite ignores ON DELETE CASCADE unless asked
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine
    connect_args = {}
    if database_url.startswith("postgresql"):
        connect_args["connect_timeout"] = connect_timeout
    return create_engine(
        database_url,
        connect_args=connect_args,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def get_engine() -> Engine:
    """Return the process engine, creating it on first use.

    Raises:
        ConfigurationError: if DATABASE_URL is not configured.
    """
    global _engine
    if _engine is None:
        settings = get_settings()
        database_url = settings.database_url
        if not database_url:
            raise ConfigurationError("DATABASE_URL is not set; the durable store cannot be used")
        _engine = build_engine(
            database_url, connect_timeout=max(1, math.ceil(settings.probe_timeout_seconds))
        )
        SessionLocal.configure(bind=_engine)
        # Log only the host part, never credentials
        logger.info(f"Database engine created for {database_url.rsplit('@', 1)[-1]}")
    return _engine


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    get_engine()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_connection(engine: Engine) -> bool:
    """Run a trivial query against the engine.

    Raises:
        StoreUnavailableError: if the database cannot be reached.
    """
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        raise StoreUnavailableError(f"Database unreachable: {e.__class__.__name__}") from e
    return True

