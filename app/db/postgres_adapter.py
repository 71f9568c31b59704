"""
PostgreSQL Database Adapter

Used when DATABASE_URL points at a managed PostgreSQL instance
(postgresql+asyncpg://...). Relies on SQLAlchemy's default QueuePool.
"""

from typing import Any, Optional

from sqlalchemy.pool import Pool

from app.db.interface import DatabaseAdapter


class PostgreSQLAdapter(DatabaseAdapter):
    """PostgreSQL database adapter implementation."""

    def get_pool_class(self) -> Optional[type[Pool]]:
        return None

    def get_connect_args(self) -> dict[str, Any]:
        return {}

    def get_engine_kwargs(self) -> dict[str, Any]:
        """
        Get PostgreSQL-specific engine configuration.

        pool_pre_ping drops connections the managed server closed while idle.
        """
        return {
            "echo": False,
            "pool_size": 5,
            "max_overflow": 10,
            "pool_pre_ping": True,
        }

    def get_dialect_name(self) -> str:
        return "postgresql"
