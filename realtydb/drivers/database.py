"""Backend-agnostic database facade.

Application code writes queries once, in SQLite form with ``?`` markers, and
runs them through ``Database``. The facade translates each query for the
active backend and hands it to the driver:

    db = await connect(os.environ["DATABASE_URL"])
    async with db:
        user = await db.get("SELECT * FROM users WHERE email = ?", [email])
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import unquote, urlparse

from .base import BaseBackend
from .postgres import PostgresBackend
from .sqlite import SQLiteBackend
from ..config import DatabaseConfig, mask_url, ssl_required
from ..errors import UnsupportedDatabaseURL
from ..models.schema import Dialect
from ..models.record import RunResult, TranslatedStatement
from ..services.translator import SQLTranslator, get_translator, split_statements

logger = logging.getLogger(__name__)


@dataclass
class ScriptResult:
    """Outcome of executing a SQL script."""
    path: str
    executed: int = 0
    failed: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.executed + len(self.failed)


class Database:
    """
    Facade exposing ``run``, ``get`` and ``all`` over one backend.

    Errors raised by the driver are logged as ``Database <op> error`` and
    re-raised unchanged; nothing is retried.
    """

    def __init__(self, backend: BaseBackend, translator: Optional[SQLTranslator] = None):
        """
        Initialize the facade.

        Args:
            backend: Connected backend
            translator: Translator to use, defaults to the shared one
        """
        self.backend = backend
        self.translator = translator or get_translator()

    @property
    def dialect(self) -> Dialect:
        return self.backend.dialect

    async def __aenter__(self) -> "Database":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def prepare(self, query: str, params: Optional[Sequence[Any]] = None) -> TranslatedStatement:
        """Translate a query for the active backend without executing it."""
        return self.translator.translate_query(query, params, self.dialect)

    async def run(self, query: str, params: Optional[Sequence[Any]] = None) -> RunResult:
        """
        Execute a statement that returns no rows.

        Returns:
            RunResult; ``changes`` is 0 when translation left nothing to run
        """
        return await self.execute(self.prepare(query, params), op="run")

    async def get(self, query: str, params: Optional[Sequence[Any]] = None) -> Optional[Dict[str, Any]]:
        """Execute a query and return the first row, or None."""
        statement = self.prepare(query, params)
        if statement.is_empty:
            return None
        try:
            return await self.backend.fetchrow(statement.sql, statement.params)
        except Exception as e:
            logger.error(f"Database get error: {e}")
            raise

    async def all(self, query: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """Execute a query and return every row."""
        statement = self.prepare(query, params)
        return await self.fetch(statement, op="all")

    async def execute(self, statement: TranslatedStatement, op: str = "run") -> RunResult:
        """Execute a statement already compiled for this backend."""
        if statement.is_empty:
            return RunResult(changes=0)
        try:
            return await self.backend.execute(statement.sql, statement.params)
        except Exception as e:
            logger.error(f"Database {op} error: {e}")
            raise

    async def fetch(self, statement: TranslatedStatement, op: str = "all") -> List[Dict[str, Any]]:
        """Fetch rows for a statement already compiled for this backend."""
        if statement.is_empty:
            return []
        try:
            return await self.backend.fetch(statement.sql, statement.params)
        except Exception as e:
            logger.error(f"Database {op} error: {e}")
            raise

    async def exec_script(self, path: str, tolerate_errors: bool = False) -> ScriptResult:
        """
        Execute a SQL script statement by statement.

        For PostgreSQL the script is translated first. There is no
        transaction around the script, so statements that ran before a
        failure stay applied.

        Args:
            path: Path of the script file
            tolerate_errors: Log failing statements and carry on instead of
                raising on the first failure

        Returns:
            ScriptResult with executed and failed statement counts
        """
        script = Path(path).read_text(encoding="utf-8")
        if self.dialect == Dialect.POSTGRES:
            script = self.translator.translate_schema(script)

        result = ScriptResult(path=str(path))
        for statement in split_statements(script):
            try:
                await self.backend.execute(statement)
                result.executed += 1
            except Exception as e:
                if not tolerate_errors:
                    logger.error(f"Database exec error in {path}: {e}")
                    raise
                summary = " ".join(statement.split())[:80]
                logger.warning(f"Statement failed ({e}): {summary}")
                result.failed.append({"statement": summary, "error": str(e)})

        logger.info(
            f"Executed script {path}: {result.executed} statement(s) ok, "
            f"{len(result.failed)} failed"
        )
        return result

    async def ping(self) -> bool:
        """Run ``SELECT 1`` against the backend."""
        row = await self.get("SELECT 1 AS ok")
        return bool(row and row.get("ok") == 1)

    async def close(self) -> None:
        await self.backend.close()


def parse_sqlite_url(url: str) -> str:
    """
    Database path from a ``sqlite://`` URL.

    ``sqlite:///data/app.db`` is relative, ``sqlite:////srv/app.db`` is
    absolute and ``sqlite://:memory:`` (or ``sqlite:///:memory:``) is an
    in-memory database.
    """
    rest = url.split("://", 1)[1] if "://" in url else ""
    if rest in (":memory:", "/:memory:", ""):
        return ":memory:"
    if rest.startswith("/"):
        rest = rest[1:]
    return unquote(rest)


async def connect(
    url: str,
    ssl: Optional[bool] = None,
    pool_min: int = 1,
    pool_max: int = 10,
    read_only: bool = False,
) -> Database:
    """
    Open a Database for a connection URL.

    Args:
        url: ``postgres://``, ``postgresql://`` or ``sqlite://`` URL
        ssl: Force TLS on or off; decided from the environment when None
        pool_min: Minimum pool size (PostgreSQL)
        pool_max: Maximum pool size (PostgreSQL)
        read_only: Open a SQLite file read-only

    Raises:
        UnsupportedDatabaseURL: the scheme is not one of the above
    """
    scheme = urlparse(url).scheme.lower()
    if scheme in ("postgres", "postgresql"):
        config = DatabaseConfig(
            url=url,
            ssl=ssl_required(url) if ssl is None else ssl,
            pool_min=pool_min,
            pool_max=pool_max,
        )
        return Database(await PostgresBackend.create(config))
    if scheme == "sqlite":
        return Database(await SQLiteBackend.create(parse_sqlite_url(url), read_only=read_only))

    logger.error(f"Cannot connect to {mask_url(url)}")
    raise UnsupportedDatabaseURL(url)


async def connect_config(config: DatabaseConfig) -> Database:
    """Open a Database from a DatabaseConfig."""
    return await connect(config.url, ssl=config.ssl, pool_min=config.pool_min, pool_max=config.pool_max)
