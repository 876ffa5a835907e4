"""Database factory functions for creating database instances."""

from typing import Optional

from withdrawals.config import default_db_path, load_settings
from withdrawals.database.memory import InMemoryDatabase
from withdrawals.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(
    database_path: Optional[str] = None, timeout: Optional[float] = None
) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks WITHDRAWALS_DB_PATH
            environment variable, then defaults to ~/.withdrawals/withdrawals.db
        timeout: Bounded storage wait in seconds. If None, checks
            WITHDRAWALS_STORAGE_TIMEOUT, then defaults to 5 seconds

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    settings = load_settings()
    if database_path is None:
        database_path = settings.db_path

    if database_path is None:
        database_path = default_db_path()

    if timeout is None:
        timeout = settings.storage_timeout

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url, timeout=timeout)


def create_memory_database(timeout: Optional[float] = None) -> InMemoryDatabase:
    """Create an in-memory database instance."""
    if timeout is None:
        timeout = load_settings().storage_timeout
    return InMemoryDatabase(timeout=timeout)
