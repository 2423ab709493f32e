"""PostgreSQL backend on an asyncpg connection pool."""

import logging
from typing import Any, Dict, List, Optional, Sequence

import asyncpg

from .base import BaseBackend, first_value, returns_rows
from ..config import DatabaseConfig, mask_url
from ..models.schema import Dialect
from ..models.record import RunResult

logger = logging.getLogger(__name__)


def parse_command_status(status: str) -> int:
    """
    Affected row count from a command tag.

    asyncpg returns tags such as ``INSERT 0 3``, ``UPDATE 2`` or
    ``CREATE TABLE``; the count is the trailing number when there is one.
    """
    parts = (status or "").split()
    if parts and parts[-1].isdigit():
        return int(parts[-1])
    return 0


class PostgresBackend(BaseBackend):
    """Backend executing ``$N`` statements on an asyncpg pool."""

    dialect = Dialect.POSTGRES
    name = "postgres"

    def __init__(self, pool: "asyncpg.Pool", url: str = ""):
        """
        Initialize the backend around an existing pool.

        Args:
            pool: asyncpg pool, created at startup by ``create``
            url: Connection URL, kept masked for log lines
        """
        self._pool = pool
        self._url = mask_url(url)

    @classmethod
    async def create(cls, config: DatabaseConfig, command_timeout: float = 60) -> "PostgresBackend":
        """Create the pool described by a DatabaseConfig."""
        pool = await asyncpg.create_pool(
            config.url,
            min_size=config.pool_min,
            max_size=config.pool_max,
            command_timeout=command_timeout,
            ssl="require" if config.ssl else False,
            server_settings={"application_name": "realtydb"},
        )
        logger.info(f"Connected to PostgreSQL database {config.masked_url} (ssl={config.ssl})")
        return cls(pool, config.url)

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> RunResult:
        async with self._pool.acquire() as conn:
            if returns_rows(sql):
                rows = [dict(r) for r in await conn.fetch(sql, *params)]
                return RunResult(
                    changes=len(rows),
                    last_id=first_value(rows[0] if rows else None),
                    status=f"RETURNING {len(rows)}",
                )
            status = await conn.execute(sql, *params)
        return RunResult(changes=parse_command_status(status), status=status)

    async def fetch(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(sql, *params)
        return [dict(r) for r in rows]

    async def fetchrow(self, sql: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(sql, *params)
        return dict(row) if row is not None else None

    async def close(self) -> None:
        await self._pool.close()
        logger.info("PostgreSQL pool closed")

    def describe(self) -> str:
        return f"postgres {self._url}"
