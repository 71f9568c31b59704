"""
Database Session Management with Connection Pooling

This module handles async database connections using SQLAlchemy's async engine.
Uses a database abstraction layer to support different database backends.

Key Features:
- Database abstraction: SQLite by default, PostgreSQL selected from DATABASE_URL
- Connection pooling: Configured per database type
- Async session management: Proper async context management

The visitor log store opens its own short-lived session per operation, so no
request-scoped session dependency is needed.
"""

from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession as SQLModelAsyncSession

from app.core.setting import settings
from app.db.sqlite_adapter import get_database_adapter

# The adapter handles all database-specific configuration
db_adapter = get_database_adapter(settings.DATABASE_URL)

engine = db_adapter.create_engine(
    settings.DATABASE_URL
)

# Create async session factory
# This factory creates sessions that are properly configured for async operations
async_session_maker = async_sessionmaker(
    engine,
    class_=SQLModelAsyncSession,
    expire_on_commit=False,  # Prevents SQLAlchemy from expiring objects after commit
    autoflush=False,
)


async def init_db() -> None:
    """Create missing tables on the configured engine."""
    await db_adapter.create_tables(engine)
