"""
Database module with abstraction layer.

This module provides:
- DatabaseAdapter interface: Abstract base class for database implementations
- SQLiteAdapter / PostgreSQLAdapter: Backend-specific implementations
- Session management: Database session creation and management

To add a new database backend:
1. Create a new adapter class inheriting from DatabaseAdapter
2. Implement all abstract methods
3. Return it from get_database_adapter() in sqlite_adapter.py
"""

from app.db.interface import DatabaseAdapter
from app.db.session import async_session_maker, engine, init_db

__all__ = [
    "DatabaseAdapter",
    "async_session_maker",
    "engine",
    "init_db",
]
