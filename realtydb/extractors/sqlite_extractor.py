"""Extractor reading tables out of the embedded SQLite database."""

import logging
from typing import List

from .base import BaseExtractor
from ..drivers.database import Database
from ..errors import ConfigurationError
from ..models.schema import ColumnDescriptor, Dialect, ForeignKey, TableDescriptor
from ..models.record import SourceRow
from ..services.query_builder import SelectQuery, quote_identifier

logger = logging.getLogger(__name__)


class SQLiteExtractor(BaseExtractor):
    """
    Extractor for a SQLite source database.

    Tables are listed in ``sqlite_master`` order, which is the order the
    schema script created them in. Columns and foreign keys come from the
    ``pragma_table_info`` and ``pragma_foreign_key_list`` table functions.
    """

    def __init__(self, database: Database, batch_size: int = 500):
        """
        Initialize the extractor.

        Args:
            database: Facade over a SQLite backend
            batch_size: Rows per batch when streaming

        Raises:
            ConfigurationError: the database is not SQLite
        """
        super().__init__(batch_size=batch_size)
        if database.dialect != Dialect.SQLITE:
            raise ConfigurationError(
                f"SQLiteExtractor needs a SQLite database, got {database.dialect.value}"
            )
        self.database = database

    async def list_tables(self) -> List[str]:
        rows = await self.database.all(
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' "
            "ORDER BY rowid"
        )
        return [row["name"] for row in rows]

    async def describe_table(self, name: str, position: int = 0) -> TableDescriptor:
        column_rows = await self.database.all(
            "SELECT * FROM pragma_table_info(?) ORDER BY cid", [name]
        )
        if not column_rows:
            raise ConfigurationError(f"Table {name} does not exist in the source database")

        fk_rows = await self.database.all(
            "SELECT * FROM pragma_foreign_key_list(?) ORDER BY id, seq", [name]
        )
        table = TableDescriptor(
            name=name,
            columns=[ColumnDescriptor.from_pragma(row) for row in column_rows],
            foreign_keys=[ForeignKey.from_pragma(row) for row in fk_rows],
            unique_indexes=await self._unique_indexes(name),
            position=position,
        )
        logger.debug(
            f"Described {name}: {len(table.columns)} columns, "
            f"references {table.depends_on or 'nothing'}"
        )
        return table

    async def _unique_indexes(self, name: str) -> List[List[str]]:
        # origin "pk" is the primary key itself, which has_conflict_target covers
        index_rows = await self.database.all(
            "SELECT name FROM pragma_index_list(?) WHERE \"unique\" = 1 AND origin != 'pk' ORDER BY seq",
            [name],
        )
        indexes = []
        for index in index_rows:
            column_rows = await self.database.all(
                "SELECT name FROM pragma_index_info(?) ORDER BY seqno", [index["name"]]
            )
            indexes.append([row["name"] for row in column_rows])
        return indexes

    async def extract_batch(
        self,
        table: TableDescriptor,
        offset: int = 0,
        limit: int = 500,
    ) -> List[SourceRow]:
        order_by = [c.name for c in table.primary_key_columns] or ["rowid"]
        if offset == 0 and not table.primary_key_columns:
            self.add_warning(f"{table.name} has no primary key, reading it in rowid order")
        statement = SelectQuery(
            table=table.name,
            order_by=order_by,
            limit=limit,
            offset=offset,
        ).compile(Dialect.SQLITE)
        rows = await self.database.fetch(statement)
        return [SourceRow(table=table.name, data=row) for row in rows]

    async def count_rows(self, table: TableDescriptor) -> int:
        """Number of rows in a table."""
        row = await self.database.get(f"SELECT COUNT(*) AS n FROM {quote_identifier(table.name)}")
        return int(row["n"]) if row else 0