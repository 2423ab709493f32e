"""Structured queries compiled per dialect.

Placeholders are generated while the statement is built, so the count always
matches the parameters and no string substitution is involved.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..models.schema import Dialect
from ..models.record import TranslatedStatement

_PLAIN_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Identifiers that must be quoted in either dialect when used as names.
_RESERVED = {
    "all", "and", "as", "asc", "check", "column", "constraint", "default",
    "desc", "end", "from", "group", "limit", "offset", "or", "order",
    "primary", "references", "select", "table", "to", "user", "where",
}


def quote_identifier(name: str) -> str:
    """
    Quote an identifier only when it needs it.

    Unquoted names are folded to lower case by PostgreSQL, and the schema is
    created unquoted, so plain names such as ``isPublished`` must stay bare
    to resolve to the same column.
    """
    if _PLAIN_IDENTIFIER.match(name) and name.lower() not in _RESERVED:
        return name
    return '"' + name.replace('"', '""') + '"'


class _Placeholders:
    """Hands out positional markers for one statement."""

    def __init__(self, dialect: Dialect):
        self.dialect = dialect
        self.count = 0

    def next(self) -> str:
        self.count += 1
        if self.dialect == Dialect.POSTGRES:
            return f"${self.count}"
        return "?"


@dataclass
class InsertQuery:
    """A multi-row INSERT."""
    table: str
    columns: List[str]
    rows: List[Sequence[Any]] = field(default_factory=list)
    on_conflict_do_nothing: bool = False
    returning: Optional[str] = None

    def compile(self, dialect: Dialect) -> TranslatedStatement:
        """Render the statement for a dialect."""
        if not self.columns:
            raise ValueError(f"INSERT into {self.table} needs at least one column")
        if not self.rows:
            raise ValueError(f"INSERT into {self.table} needs at least one row")

        marks = _Placeholders(dialect)
        params: List[Any] = []
        values = []
        for row in self.rows:
            if len(row) != len(self.columns):
                raise ValueError(
                    f"Row has {len(row)} values but {len(self.columns)} columns were given"
                )
            values.append("(" + ", ".join(marks.next() for _ in row) + ")")
            params.extend(row)

        sql = (
            f"INSERT INTO {quote_identifier(self.table)} "
            f"({', '.join(quote_identifier(c) for c in self.columns)}) "
            f"VALUES {', '.join(values)}"
        )
        if self.on_conflict_do_nothing:
            sql += " ON CONFLICT DO NOTHING"
        if self.returning:
            sql += f" RETURNING {quote_identifier(self.returning)}"

        return TranslatedStatement(
            sql=sql,
            params=tuple(params),
            style=dialect.placeholder_style,
            placeholder_count=marks.count,
        )


@dataclass
class SelectQuery:
    """A SELECT over one table with equality filters."""
    table: str
    columns: List[str] = field(default_factory=list)  # Empty means *
    where: Dict[str, Any] = field(default_factory=dict)
    order_by: List[str] = field(default_factory=list)
    limit: Optional[int] = None
    offset: Optional[int] = None

    def compile(self, dialect: Dialect) -> TranslatedStatement:
        """Render the statement for a dialect."""
        marks = _Placeholders(dialect)
        params: List[Any] = []

        projection = ", ".join(quote_identifier(c) for c in self.columns) or "*"
        sql = f"SELECT {projection} FROM {quote_identifier(self.table)}"

        if self.where:
            clauses = []
            for column, value in self.where.items():
                if value is None:
                    clauses.append(f"{quote_identifier(column)} IS NULL")
                else:
                    clauses.append(f"{quote_identifier(column)} = {marks.next()}")
                    params.append(value)
            sql += " WHERE " + " AND ".join(clauses)

        if self.order_by:
            sql += " ORDER BY " + ", ".join(_order_term(term) for term in self.order_by)

        if self.limit is not None:
            sql += f" LIMIT {marks.next()}"
            params.append(int(self.limit))
        if self.offset is not None:
            sql += f" OFFSET {marks.next()}"
            params.append(int(self.offset))

        return TranslatedStatement(
            sql=sql,
            params=tuple(params),
            style=dialect.placeholder_style,
            placeholder_count=marks.count,
        )


def _order_term(term: str) -> str:
    # "name DESC" -> name DESC; rowid and expressions pass through untouched.
    parts = term.split()
    if len(parts) == 2 and parts[1].upper() in ("ASC", "DESC"):
        return f"{quote_identifier(parts[0])} {parts[1].upper()}"
    if len(parts) == 1 and parts[0].lower() != "rowid":
        return quote_identifier(parts[0])
    return term


def batched(rows: Sequence[Any], size: int) -> List[Tuple[int, Sequence[Any]]]:
    """Split rows into (offset, chunk) pairs of at most ``size`` rows."""
    size = max(1, size)
    return [(i, rows[i:i + size]) for i in range(0, len(rows), size)]
