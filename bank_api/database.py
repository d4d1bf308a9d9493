"""
Database configuration and connection management.

Owns the two relational stores (accounts and customers). Engines are built
from settings when the application starts, not at import time.
"""

import logging
import time
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from .config import Settings
from .models import AccountsBase, CustomersBase

# Load environment variables
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(dotenv_path=env_path)

logger = logging.getLogger(__name__)


def sanitize_url(db_url: str) -> str:
    """Strip credentials from a database URL for logging."""
    if "@" in db_url:
        scheme, _, rest = db_url.partition("://")
        return f"{scheme}://...@{rest.split('@', 1)[1]}"
    return db_url


def get_engine_kwargs(db_url: str, settings: Settings) -> Dict[str, Any]:
    """
    Get database-specific engine arguments.

    SQLite URLs (used for development and tests) share one connection so
    in-memory databases survive across sessions.

    Args:
        db_url: Database connection URL
        settings: Application settings with pool configuration

    Returns:
        Keyword arguments for ``create_engine``
    """
    if db_url.startswith("sqlite"):
        kwargs: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in db_url or db_url.rstrip("/") in ("sqlite:", "sqlite+pysqlite:"):
            kwargs["poolclass"] = StaticPool
        return kwargs
    return {
        "pool_pre_ping": True,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
    }


def _install_slow_query_logging(engine: Engine, name: str, threshold_ms: int) -> None:
    @event.listens_for(engine, "before_cursor_execute")
    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_start_time", []).append(time.time())

    @event.listens_for(engine, "after_cursor_execute")
    def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        total_time_ms = (time.time() - conn.info["query_start_time"].pop()) * 1000
        if total_time_ms > threshold_ms:
            logger.warning(
                f"Slow query on {name}: {total_time_ms:.2f}ms",
                extra={"query_time_ms": total_time_ms, "statement": statement[:200]},
            )


def create_store_engine(name: str, db_url: str, settings: Settings) -> Engine:
    """Create an engine for one relational store."""
    logger.info(f"Using {name} database: {sanitize_url(db_url)}")
    engine = create_engine(db_url, echo=settings.DB_ECHO, **get_engine_kwargs(db_url, settings))
    _install_slow_query_logging(engine, name, settings.SLOW_QUERY_THRESHOLD_MS)
    return engine


class DatabaseManager:
    """
    Engines and session factories for the accounts and customers databases.

    Attributes:
        accounts_engine: Engine for the bank account store
        customers_engine: Engine for the customer store
        AccountsSession: Session factory bound to accounts_engine
        CustomersSession: Session factory bound to customers_engine
    """

    def __init__(self, accounts_engine: Engine, customers_engine: Engine):
        self.accounts_engine = accounts_engine
        self.customers_engine = customers_engine
        self.AccountsSession = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=accounts_engine
        )
        self.CustomersSession = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=customers_engine
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "DatabaseManager":
        return cls(
            create_store_engine("accounts", settings.ACCOUNTS_DATABASE_URL, settings),
            create_store_engine("customers", settings.CUSTOMERS_DATABASE_URL, settings),
        )

    def init_db(self) -> None:
        """
        Initialize database tables.

        Creates all tables on application startup.
        Uses checkfirst=True to safely handle existing tables.
        """
        try:
            logger.info("Initializing database tables...")
            AccountsBase.metadata.create_all(bind=self.accounts_engine, checkfirst=True)
            CustomersBase.metadata.create_all(bind=self.customers_engine, checkfirst=True)
            logger.info("Database initialized successfully")
        except Exception as e:
            error_msg = str(e).lower()
            if "already exists" in error_msg or "duplicate" in error_msg:
                logger.warning("Database objects already exist (expected)")
            else:
                logger.error(f"Failed to initialize database: {e}")
                raise

    def check_connection(self) -> Dict[str, str]:
        """
        Probe both stores with ``SELECT 1``.

        Returns:
            Mapping of store name to "healthy" or "unhealthy"
        """
        checks = {}
        for name, engine in (
            ("accounts_db", self.accounts_engine),
            ("customers_db", self.customers_engine),
        ):
            try:
                with engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
                checks[name] = "healthy"
            except Exception as e:
                logger.warning(f"Database health check failed for {name}: {e}")
                checks[name] = "unhealthy"
        return checks

    def dispose(self) -> None:
        self.accounts_engine.dispose()
        self.customers_engine.dispose()
