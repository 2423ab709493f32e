"""Database drivers and the facade the application talks to."""

from .base import BaseBackend
from .postgres import PostgresBackend
from .sqlite import SQLiteBackend
from .database import Database, ScriptResult, connect, connect_config, parse_sqlite_url

__all__ = [
    "BaseBackend",
    "PostgresBackend",
    "SQLiteBackend",
    "Database",
    "ScriptResult",
    "connect",
    "connect_config",
    "parse_sqlite_url",
]
