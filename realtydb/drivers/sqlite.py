"""SQLite backend on a single aiosqlite connection."""

import sqlite3
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence

import aiosqlite

from .base import BaseBackend, first_value, returns_rows
from ..models.schema import Dialect
from ..models.record import RunResult

logger = logging.getLogger(__name__)


class SQLiteBackend(BaseBackend):
    """
    Backend for the embedded database.

    The connection runs in autocommit mode with foreign-key enforcement
    switched on, matching how the application opens the file.
    """

    dialect = Dialect.SQLITE
    name = "sqlite"

    def __init__(self, conn: aiosqlite.Connection, path: str = ":memory:"):
        self._conn = conn
        self.path = path

    @classmethod
    async def create(
        cls,
        path: str,
        foreign_keys: bool = True,
        read_only: bool = False,
    ) -> "SQLiteBackend":
        """
        Open the database file and configure the connection.

        Args:
            path: File path, or ``:memory:``
            foreign_keys: Enforce foreign-key constraints
            read_only: Open the file in read-only mode, as the migration
                source is opened
        """
        if read_only and path != ":memory:":
            target = f"file:{Path(path).resolve().as_posix()}?mode=ro"
            conn = await aiosqlite.connect(target, uri=True, isolation_level=None)
        else:
            conn = await aiosqlite.connect(path, isolation_level=None)
        conn.row_factory = sqlite3.Row
        if foreign_keys:
            await conn.execute("PRAGMA foreign_keys = ON")
        logger.info(f"Connected to SQLite database {path}")
        return cls(conn, path)

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> RunResult:
        cursor = await self._conn.execute(sql, tuple(params))
        try:
            if returns_rows(sql):
                rows = [dict(r) for r in await cursor.fetchall()]
                return RunResult(changes=len(rows), last_id=first_value(rows[0] if rows else None))
            return RunResult(changes=max(cursor.rowcount, 0), last_id=cursor.lastrowid)
        finally:
            await cursor.close()

    async def fetch(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        cursor = await self._conn.execute(sql, tuple(params))
        try:
            rows = await cursor.fetchall()
        finally:
            await cursor.close()
        return [dict(r) for r in rows]

    async def close(self) -> None:
        await self._conn.close()
        logger.info(f"SQLite database {self.path} closed")

    def describe(self) -> str:
        return f"sqlite {self.path}"
