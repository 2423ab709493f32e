"""Backend interface shared by the database drivers."""

import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from ..models.schema import Dialect
from ..models.record import RunResult
from ..services.translator import MaskedSQL

_RETURNING = re.compile(r"\bRETURNING\b", re.IGNORECASE)


def returns_rows(sql: str) -> bool:
    """Check if a write statement hands back rows through RETURNING, outside literals."""
    return bool(_RETURNING.search(MaskedSQL(sql).text))


def first_value(row: Optional[Dict[str, Any]]) -> Optional[int]:
    """First column of a RETURNING row when it is an integer id."""
    if not row:
        return None
    value = next(iter(row.values()), None)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


class BaseBackend(ABC):
    """
    Base class for database backends.

    A backend executes SQL that is already written for its dialect, with
    positional parameters in that dialect's placeholder style. Translation
    happens in the facade, never here. Driver exceptions propagate as they
    are raised.
    """

    dialect: Dialect = Dialect.SQLITE
    name: str = "base"

    @abstractmethod
    async def execute(self, sql: str, params: Sequence[Any] = ()) -> RunResult:
        """
        Execute a statement that returns no rows.

        Args:
            sql: Statement in the backend dialect
            params: Positional parameters

        Returns:
            RunResult with the affected row count
        """
        pass

    @abstractmethod
    async def fetch(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """Execute a query and return all rows as dictionaries."""
        pass

    async def fetchrow(self, sql: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        """Execute a query and return the first row, or None."""
        rows = await self.fetch(sql, params)
        return rows[0] if rows else None

    @abstractmethod
    async def close(self) -> None:
        """Release connections held by the backend."""
        pass

    def describe(self) -> str:
        """Short human readable description, safe to log."""
        return self.name
