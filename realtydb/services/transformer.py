"""Conversion of exported SQLite rows into values the target database accepts."""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple
from datetime import timezone
from dateutil import parser as date_parser

from ..models.schema import ColumnDescriptor, Dialect, TableDescriptor
from ..models.record import SourceRow

logger = logging.getLogger(__name__)

Converter = Callable[[Any, ColumnDescriptor], Any]


class RowTransformer:
    """
    Transformer turning source rows into insert parameters.

    SQLite stores booleans as 0/1 and timestamps as text. PostgreSQL wants
    real booleans, and asyncpg binds only datetime objects to TIMESTAMP
    columns, so:

    - boolean-like columns: 0/1 become False/True
    - temporal columns (PostgreSQL only): text is parsed with dateutil
    - everything else passes through unchanged

    Per-column converters can be registered and take precedence over the
    built-in handling.
    """

    def __init__(self, dialect: Dialect = Dialect.POSTGRES):
        """
        Initialize the transformer.

        Args:
            dialect: Dialect of the database rows are loaded into
        """
        self.dialect = dialect
        self._converters: Dict[Tuple[str, str], Converter] = {}

    def register_converter(self, table: str, column: str, func: Converter) -> None:
        """Register a converter for one column of one table."""
        self._converters[(table, column)] = func

    def transform_row(
        self,
        table: TableDescriptor,
        row: SourceRow,
        columns: Optional[List[ColumnDescriptor]] = None,
    ) -> Tuple[Any, ...]:
        """
        Convert a row to insert parameters.

        Args:
            table: Descriptor of the table the row belongs to
            row: Row read from the source database
            columns: Columns to emit, in order. Defaults to the table's
                insert columns.

        Returns:
            Tuple of values aligned with ``columns``
        """
        if columns is None:
            columns = table.insert_columns()
        return tuple(
            self.convert_value(table.name, column, row.get(column.name))
            for column in columns
        )

    def convert_value(self, table_name: str, column: ColumnDescriptor, value: Any) -> Any:
        """Convert a single value for a column."""
        custom = self._converters.get((table_name, column.name))
        if custom:
            return custom(value, column)

        if value is None:
            return None
        if column.is_boolean_like:
            return _to_boolean(value)
        if column.is_temporal and self.dialect == Dialect.POSTGRES:
            return _to_temporal(value, column)
        return value


def _to_boolean(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in ("0", "1", "true", "false"):
        return value.strip().lower() in ("1", "true")
    return value


def _to_temporal(value: Any, column: ColumnDescriptor) -> Any:
    if not isinstance(value, str):
        return value

    try:
        parsed = date_parser.parse(value)
    except (ValueError, OverflowError):
        logger.debug(f"Could not parse {value!r} for column {column.name}, passing it through")
        return value

    if column.is_date_only:
        return parsed.date()
    if (column.declared_type or "").strip().upper() == "TIME":
        return parsed.time()
    if parsed.tzinfo is not None:
        # TIMESTAMP columns are timezone-naive; store the UTC wall time.
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
