"""
SQLite Database Adapter

This module implements the DatabaseAdapter interface for SQLite.
All SQLite-specific configuration and behavior is encapsulated here.

SQLite is a file-based database that's perfect for:
- Local development
- Testing
- Single-instance deployments
- Low to medium traffic applications

Key characteristics:
- File-based (single .db file)
- No server required
- Single writer at a time (file locking)
- Excellent for reads, limited concurrent writes
"""

from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.pool import NullPool

from app.db.interface import DatabaseAdapter
from app.db.postgres_adapter import PostgreSQLAdapter


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter implementation.

    This adapter handles all SQLite-specific configuration and operations.
    SQLite uses file-based storage and has different characteristics than
    server-based databases like PostgreSQL.
    """

    def get_pool_class(self) -> type[NullPool]:
        """
        Get the connection pool class for SQLite.

        SQLite uses NullPool (a fresh connection per checkout) because
        the file-based database doesn't benefit from connection pooling.

        Returns:
            NullPool class
        """
        return NullPool

    def get_connect_args(self) -> dict[str, Any]:
        """
        Get SQLite-specific connection arguments.

        Returns:
            Dictionary with SQLite connection arguments
        """
        return {
            "check_same_thread": False
        }

    def get_engine_kwargs(self) -> dict[str, Any]:
        """
        Get SQLite-specific engine configuration.

        Returns:
            Dictionary with SQLite engine options
        """
        return {
            "echo": False  # Set to True only for SQL debugging in development
        }

    def get_dialect_name(self) -> str:
        return "sqlite"


def get_database_adapter(database_url: str) -> DatabaseAdapter:
    """
    Factory function to get the database adapter for a connection string.

    Args:
        database_url: SQLAlchemy async connection string

    Returns:
        DatabaseAdapter instance (SQLite unless the URL names PostgreSQL)
    """
    backend = make_url(database_url).get_backend_name()
    if backend == "postgresql":
        return PostgreSQLAdapter()
    return SQLiteAdapter()
