"""Database layer for the withdrawal workflow."""

from withdrawals.database.base import Database
from withdrawals.database.factories import create_sqlite_database, create_memory_database

__all__ = ["Database", "create_sqlite_database", "create_memory_database"]
