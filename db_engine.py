"""
Database engine management for the customer ledger.
Uses SQLModel with SQLite for persistent storage.

The engine is created explicitly by the application entry point and
passed to the repositories that need it; there is no module-level engine.
"""

from typing import Optional
import logging

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

logger = logging.getLogger(__name__)

IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def _casefold(value: Optional[str]) -> Optional[str]:
    """SQL-callable case folding, matching str.casefold() used in Python filters."""
    if value is None:
        return None
    return value.casefold()


def create_db_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """
    Create a database engine for the ledger.

    Args:
        database_url: SQLAlchemy URL; defaults to the configured database_url
        echo: Log emitted SQL; defaults to the configured db_echo

    Returns:
        A new Engine with SQLite helpers registered
    """
    if database_url is None or echo is None:
        from config import get_settings
        settings = get_settings()
        database_url = database_url if database_url is not None else settings.database_url
        echo = echo if echo is not None else settings.db_echo

    kwargs = {}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in IN_MEMORY_URLS:
            # One shared connection, otherwise every session sees an empty database
            kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, echo=echo, **kwargs)

    if engine.dialect.name == "sqlite":
        _register_sqlite_functions(engine)
        _enable_wal_mode(engine)

    logger.info(f"Database engine created for {engine.url.render_as_string(hide_password=True)}")
    return engine


def _register_sqlite_functions(engine: Engine) -> None:
    """Register Python helpers on every new SQLite connection."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.create_function("casefold", 1, _casefold, deterministic=True)


def _enable_wal_mode(engine: Engine) -> None:
    """Enable SQLite WAL mode so reads never block on the writer."""
    try:
        with engine.connect() as conn:
            mode = conn.exec_driver_sql("PRAGMA journal_mode=WAL").scalar()
            conn.exec_driver_sql("PRAGMA busy_timeout=5000")
            logger.info(f"SQLite journal mode: {mode}")
    except Exception as e:
        logger.warning(f"Could not enable WAL mode: {e}")


def init_db(engine: Engine) -> None:
    """Create all tables. Safe to call on an existing database."""
    from models import TransactionRecord  # noqa: F401  (registers the table)

    SQLModel.metadata.create_all(engine)
    logger.info("Database initialized")


def dispose_engine(engine: Engine) -> None:
    """Release all pooled connections at application shutdown."""
    engine.dispose()
    logger.info("Database engine disposed")
